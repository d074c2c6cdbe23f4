# tests/test_inventory_domain/test_domain/test_ingredient.py
"""Tests for the Ingredient entity."""

from datetime import datetime

import pytest

from src.common.exceptions.custom_exceptions import InsufficientStockError, ValidationError
from src.inventory_domain.domain.entities.ingredient import Ingredient, StockLevel


def test_consume_crosses_reorder_point_before_minimum(make_ingredient) -> None:
    """100 in stock, minimum 20, reorder point 30: 65 then 10 units consumed."""
    ingredient = make_ingredient(current_stock=100, min_stock=20, reorder_point=30)

    result = ingredient.consume(65)

    assert result.success
    assert ingredient.current_stock == 35
    assert not ingredient.is_low_stock()
    assert not ingredient.needs_reorder()

    ingredient.consume(10)

    assert ingredient.current_stock == 25
    assert not ingredient.is_low_stock()
    assert ingredient.needs_reorder()
    assert ingredient.get_stock_level() == StockLevel.LOW
    assert isinstance(ingredient.last_consumed, datetime)


def test_thresholds_are_inclusive(make_ingredient) -> None:
    at_minimum = make_ingredient(current_stock=20, min_stock=20, reorder_point=30)
    at_reorder = make_ingredient(current_stock=30, min_stock=20, reorder_point=30)

    assert at_minimum.is_low_stock()
    assert at_minimum.get_stock_level() == StockLevel.CRITICAL
    assert not at_reorder.is_low_stock()
    assert at_reorder.needs_reorder()


def test_low_stock_implies_needs_reorder(make_ingredient) -> None:
    for stock in (0, 5, 19.5, 20):
        ingredient = make_ingredient(current_stock=stock, min_stock=20, reorder_point=30)
        assert ingredient.is_low_stock()
        assert ingredient.needs_reorder()


def test_consume_rejects_more_than_available(make_ingredient) -> None:
    ingredient = make_ingredient(current_stock=3)

    result = ingredient.consume(5)

    assert not result.success
    assert isinstance(result.error, InsufficientStockError)
    assert result.error.available == 3
    assert result.error.required == 5
    assert "Insufficient stock for Flour" in result.error.message
    assert ingredient.current_stock == 3
    assert ingredient.last_consumed is None


def test_consume_entire_stock_reaches_zero(make_ingredient) -> None:
    ingredient = make_ingredient(current_stock=12)

    assert ingredient.consume(12).success
    assert ingredient.current_stock == 0
    assert ingredient.get_stock_level() == StockLevel.CRITICAL


@pytest.mark.parametrize("quantity", [0, -1])
def test_consume_requires_positive_quantity(make_ingredient, quantity) -> None:
    ingredient = make_ingredient()

    result = ingredient.consume(quantity)

    assert not result.success
    assert isinstance(result.error, ValidationError)
    assert result.error.message == "Consumption quantity must be positive"
    assert ingredient.current_stock == 100


def test_replenish_and_set_stock(make_ingredient) -> None:
    ingredient = make_ingredient(current_stock=10)

    assert ingredient.replenish(15).success
    assert ingredient.current_stock == 25
    assert ingredient.last_restocked is not None

    assert not ingredient.replenish(0).success

    failed = ingredient.set_stock(-1)
    assert not failed.success
    assert failed.error.message == "Stock cannot be negative"
    assert ingredient.current_stock == 25

    assert ingredient.set_stock(0).success
    assert ingredient.current_stock == 0


def test_calculate_cost(make_ingredient) -> None:
    ingredient = make_ingredient(cost_per_unit=0.25)

    assert ingredient.calculate_cost(8) == pytest.approx(2.0)


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"name": "  "}, "Ingredient name is required"),
        ({"unit": ""}, "Unit is required"),
        ({"current_stock": -1}, "Current stock cannot be negative"),
        ({"min_stock": 40, "reorder_point": 30}, "Reorder point must be greater than or equal to minimum stock"),
        ({"cost_per_unit": 0}, "Cost per unit must be positive"),
        ({"supplier_id": ""}, "Supplier ID is required"),
    ],
)
def test_create_rejects_broken_invariants(make_ingredient, overrides, message) -> None:
    values = dict(
        id="ing-1",
        name="Flour",
        description="",
        unit="kg",
        current_stock=10,
        min_stock=2,
        reorder_point=5,
        cost_per_unit=1.0,
        supplier_id="sup-1",
        category="",
    )
    values.update(overrides)

    result = Ingredient.create(**values)

    assert not result.success
    assert isinstance(result.error, ValidationError)
    assert result.error.message == message


def test_create_strips_text_fields() -> None:
    result = Ingredient.create("ing-1", "  Basil ", None, " g ", 10, 2, 5, 0.1, "sup-1", " Herbs ")

    assert result.success
    assert result.value.name == "Basil"
    assert result.value.unit == "g"
    assert result.value.description == ""
    assert result.value.category == "Herbs"
