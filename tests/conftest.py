# tests/conftest.py
from unittest.mock import AsyncMock, Mock

import pytest

from src.common.config.settings import settings
from src.common.result import ok
from src.inventory_domain.application.check_low_stock_use_case import CheckLowStockUseCase
from src.inventory_domain.application.consume_ingredients_use_case import ConsumeIngredientsUseCase
from src.inventory_domain.application.inventory_manager import AlertConfig, InventoryManager
from src.inventory_domain.domain.entities.ingredient import Ingredient
from src.inventory_domain.domain.entities.menu_item import IngredientReference, MenuItem
from src.inventory_domain.infrastructure.persistence.in_memory_repositories import (
    InMemoryIngredientRepository,
    InMemoryLowStockNotificationRepository,
    InMemoryMenuItemRepository,
)
from src.notification_domain.domain.email_service import EmailRecipient, IEmailService


@pytest.fixture(autouse=True)
def mock_settings_database(mocker) -> None:
    """Keeps tests independent of a local .env file."""
    mocker.patch.object(settings, "DB_HOST", "localhost")
    mocker.patch.object(settings, "DB_DATABASE", "restaurant_test")
    mocker.patch.object(settings, "DB_USER", "test")
    mocker.patch.object(settings, "DB_PASSWORD", "test")


def build_ingredient(**overrides) -> Ingredient:
    values = dict(
        id="ing-flour",
        name="Flour",
        description="Type 00 flour",
        unit="kg",
        current_stock=100,
        min_stock=20,
        reorder_point=30,
        cost_per_unit=0.5,
        supplier_id="sup-1",
        category="Dry goods",
    )
    values.update(overrides)
    return Ingredient.create(**values).unwrap()


def build_menu_item(references: list[IngredientReference], **overrides) -> MenuItem:
    values = dict(
        id="menu-pizza",
        name="Pizza Margherita",
        description="Tomato, mozzarella, basil",
        price=12.0,
        category_id="cat-pizza",
        ingredient_references=references,
        preparation_time=15,
    )
    values.update(overrides)
    return MenuItem.create(**values).unwrap()


@pytest.fixture
def flour() -> Ingredient:
    return build_ingredient()


@pytest.fixture
def tomato() -> Ingredient:
    return build_ingredient(
        id="ing-tomato",
        name="Tomato Sauce",
        description="",
        unit="l",
        current_stock=40,
        min_stock=5,
        reorder_point=10,
        cost_per_unit=2.0,
        category="Sauces",
    )


@pytest.fixture
def pizza() -> MenuItem:
    """Two units of flour and one of tomato sauce per serving."""
    return build_menu_item(
        [
            IngredientReference("ing-flour", 2, "kg"),
            IngredientReference("ing-tomato", 1, "l"),
        ]
    )


@pytest.fixture
def ingredient_repo(flour, tomato) -> InMemoryIngredientRepository:
    return InMemoryIngredientRepository([flour, tomato])


@pytest.fixture
def menu_item_repo(pizza) -> InMemoryMenuItemRepository:
    return InMemoryMenuItemRepository([pizza])


@pytest.fixture
def notification_repo() -> InMemoryLowStockNotificationRepository:
    return InMemoryLowStockNotificationRepository()


@pytest.fixture
def mock_email_service() -> Mock:
    """Email service whose sends always succeed."""
    service = Mock(spec=IEmailService)
    service.send = AsyncMock(return_value=ok(None))
    service.send_bulk = AsyncMock(return_value=ok(None))
    return service


@pytest.fixture
def recipients() -> list[EmailRecipient]:
    return [
        EmailRecipient("admin@restaurant.com", "Restaurant Manager"),
        EmailRecipient("manager@restaurant.com", "Inventory Manager"),
    ]


@pytest.fixture
def alert_config(recipients) -> AlertConfig:
    return AlertConfig(recipients=recipients, check_interval_minutes=60, debounce_seconds=0)


@pytest.fixture
def consume_use_case(menu_item_repo, ingredient_repo) -> ConsumeIngredientsUseCase:
    return ConsumeIngredientsUseCase(menu_item_repo=menu_item_repo, ingredient_repo=ingredient_repo)


@pytest.fixture
def check_use_case(ingredient_repo, notification_repo) -> CheckLowStockUseCase:
    return CheckLowStockUseCase(ingredient_repo=ingredient_repo, notification_repo=notification_repo)


@pytest.fixture
def inventory_manager(
    check_use_case, consume_use_case, mock_email_service, ingredient_repo, menu_item_repo, alert_config
) -> InventoryManager:
    """InventoryManager over in-memory repositories and a mocked email service."""
    return InventoryManager(
        check_low_stock_use_case=check_use_case,
        consume_ingredients_use_case=consume_use_case,
        email_service=mock_email_service,
        ingredient_repo=ingredient_repo,
        menu_item_repo=menu_item_repo,
        alert_config=alert_config,
    )


@pytest.fixture
def make_ingredient():
    """Factory for valid ingredients; keyword arguments override the flour defaults."""
    return build_ingredient


@pytest.fixture
def make_menu_item():
    return build_menu_item
