# tests/test_inventory_domain/test_infrastructure/test_in_memory_repositories.py
"""Tests for the in-process repositories."""

import asyncio

from src.common.exceptions.custom_exceptions import ConcurrentModificationError, NotFoundError, ValidationError
from src.inventory_domain.domain.entities.low_stock_notification import LowStockNotificationFactory
from src.inventory_domain.infrastructure.persistence.in_memory_repositories import InMemoryIngredientRepository


def test_ingredient_repository_returns_copies(ingredient_repo) -> None:
    loaded = asyncio.run(ingredient_repo.find_by_id("ing-flour")).value
    loaded.consume(50)

    assert asyncio.run(ingredient_repo.find_by_id("ing-flour")).value.current_stock == 100


def test_find_by_ids_skips_unknown_and_duplicates(ingredient_repo) -> None:
    found = asyncio.run(ingredient_repo.find_by_ids(["ing-tomato", "ing-ghost", "ing-tomato", "ing-flour"])).value

    assert [i.id for i in found] == ["ing-tomato", "ing-flour"]
    assert asyncio.run(ingredient_repo.find_by_id("ing-ghost")).value is None


def test_find_low_stock_uses_reorder_point_and_active_flag(make_ingredient) -> None:
    repo = InMemoryIngredientRepository(
        [
            make_ingredient(id="ing-1", current_stock=30),
            make_ingredient(id="ing-2", current_stock=31),
            make_ingredient(id="ing-3", current_stock=1, is_active=False),
        ]
    )

    assert [i.id for i in asyncio.run(repo.find_low_stock_ingredients()).value] == ["ing-1"]
    assert [i.id for i in asyncio.run(repo.find_all()).value] == ["ing-1", "ing-2"]


def test_compare_and_set_stock(ingredient_repo) -> None:
    consumed = asyncio.run(ingredient_repo.compare_and_set_stock("ing-flour", 100, 70))
    stale = asyncio.run(ingredient_repo.compare_and_set_stock("ing-flour", 100, 60))
    restocked = asyncio.run(ingredient_repo.compare_and_set_stock("ing-flour", 70, 90))
    negative = asyncio.run(ingredient_repo.compare_and_set_stock("ing-flour", 90, -1))
    missing = asyncio.run(ingredient_repo.compare_and_set_stock("ing-ghost", 0, 1))

    assert consumed.value.current_stock == 70
    assert consumed.value.last_consumed is not None
    assert isinstance(stale.error, ConcurrentModificationError)
    assert stale.error.actual_stock == 70
    assert restocked.value.last_restocked is not None
    assert isinstance(negative.error, ValidationError)
    assert isinstance(missing.error, NotFoundError)
    assert asyncio.run(ingredient_repo.find_by_id("ing-flour")).value.current_stock == 90


def test_menu_item_repository(menu_item_repo, make_menu_item) -> None:
    retired = make_menu_item([], id="menu-old", name="Old Dish", is_active=False)
    asyncio.run(menu_item_repo.save(retired))

    assert asyncio.run(menu_item_repo.find_by_id("menu-old")).value is retired
    assert [m.id for m in asyncio.run(menu_item_repo.find_all_active()).value] == ["menu-pizza"]
    assert [m.id for m in asyncio.run(menu_item_repo.find_by_ids(["menu-old", "menu-x"])).value] == ["menu-old"]


def test_notification_repository(notification_repo) -> None:
    notification = LowStockNotificationFactory.create("n-1", "ing-flour", "Flour", 10, 20).unwrap()
    asyncio.run(notification_repo.create(notification))

    assert asyncio.run(notification_repo.find_by_ingredient_id("ing-flour")).value == notification
    acknowledged = asyncio.run(notification_repo.acknowledge("n-1", "chef-1")).value

    assert acknowledged.acknowledged
    assert asyncio.run(notification_repo.find_by_ingredient_id("ing-flour")).value is None
    assert asyncio.run(notification_repo.find_unacknowledged()).value == []
    assert isinstance(asyncio.run(notification_repo.acknowledge("n-2", "chef-1")).error, NotFoundError)
