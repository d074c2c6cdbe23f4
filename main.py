"""Main application entry point for the inventory consumption and low-stock alerting service."""

import argparse
import asyncio
import logging
from dataclasses import dataclass

from src.common.config.settings import settings
from src.common.dtos.inventory_dtos import OrderItemDTO
from src.common.exceptions.custom_exceptions import PersistenceError
from src.common.logger_config import setup_logging
from src.inventory_domain.application.check_low_stock_use_case import CheckLowStockUseCase
from src.inventory_domain.application.consume_ingredients_use_case import ConsumeIngredientsUseCase
from src.inventory_domain.application.inventory_manager import AlertConfig, InventoryManager
from src.inventory_domain.application.stock_service import StockApplicationService
from src.inventory_domain.domain.entities.ingredient import Ingredient
from src.inventory_domain.domain.entities.menu_item import IngredientReference, MenuItem
from src.inventory_domain.domain.repositories.ingredient_repository import IIngredientRepository
from src.inventory_domain.domain.repositories.low_stock_notification_repository import (
    ILowStockNotificationRepository,
)
from src.inventory_domain.domain.repositories.menu_item_repository import IMenuItemRepository
from src.inventory_domain.infrastructure.persistence.in_memory_repositories import (
    InMemoryIngredientRepository,
    InMemoryLowStockNotificationRepository,
    InMemoryMenuItemRepository,
)
from src.inventory_domain.infrastructure.persistence.mysql_ingredient_repository import MySQLIngredientRepository
from src.inventory_domain.infrastructure.persistence.mysql_low_stock_notification_repository import (
    MySQLLowStockNotificationRepository,
)
from src.inventory_domain.infrastructure.persistence.mysql_menu_item_repository import MySQLMenuItemRepository
from src.notification_domain.domain.email_service import EmailRecipient, IEmailService
from src.notification_domain.infrastructure.http_email_service import HttpEmailService
from src.notification_domain.infrastructure.smtp_email_service import SmtpConfig, SmtpEmailService

logger = logging.getLogger(__name__)


@dataclass
class InventoryContainer:
    """Everything the composition root wires together."""

    ingredient_repo: IIngredientRepository
    menu_item_repo: IMenuItemRepository
    notification_repo: ILowStockNotificationRepository
    email_service: IEmailService
    inventory_manager: InventoryManager
    stock_service: StockApplicationService


def build_alert_config() -> AlertConfig:
    return AlertConfig(
        recipients=[
            EmailRecipient(email=settings.ADMIN_EMAIL, name="Restaurant Manager"),
            EmailRecipient(email=settings.MANAGER_EMAIL, name="Inventory Manager"),
        ],
        check_interval_minutes=settings.ALERT_INTERVAL_MINUTES,
        enable_email_alerts=settings.ENABLE_EMAIL_ALERTS,
        enable_real_time_alerts=settings.ENABLE_REAL_TIME_ALERTS,
        debounce_seconds=settings.ALERT_DEBOUNCE_SECONDS,
        max_queue_size=settings.ALERT_QUEUE_SIZE,
    )


def build_email_service() -> IEmailService:
    if settings.EMAIL_BACKEND == "http":
        return HttpEmailService()
    return SmtpEmailService(SmtpConfig.from_settings())


def create_mysql_tables(*repositories) -> None:
    """Creates tables for the inventory domain (idempotent)."""
    for repository in repositories:
        try:
            repository.create_tables()
        except PersistenceError as e:
            logger.error(f"Error creating inventory database tables: {e}")
            raise


def setup_inventory_dependencies(
    ingredient_repo: IIngredientRepository,
    menu_item_repo: IMenuItemRepository,
    notification_repo: ILowStockNotificationRepository,
    email_service: IEmailService,
    alert_config: AlertConfig,
) -> InventoryContainer:
    """Initializes and wires up inventory domain dependencies."""
    consume_use_case = ConsumeIngredientsUseCase(menu_item_repo=menu_item_repo, ingredient_repo=ingredient_repo)
    check_use_case = CheckLowStockUseCase(ingredient_repo=ingredient_repo, notification_repo=notification_repo)
    inventory_manager = InventoryManager(
        check_low_stock_use_case=check_use_case,
        consume_ingredients_use_case=consume_use_case,
        email_service=email_service,
        ingredient_repo=ingredient_repo,
        menu_item_repo=menu_item_repo,
        alert_config=alert_config,
    )
    stock_service = StockApplicationService(
        ingredient_repo=ingredient_repo, menu_item_repo=menu_item_repo, notification_repo=notification_repo
    )
    return InventoryContainer(
        ingredient_repo=ingredient_repo,
        menu_item_repo=menu_item_repo,
        notification_repo=notification_repo,
        email_service=email_service,
        inventory_manager=inventory_manager,
        stock_service=stock_service,
    )


def build_container() -> InventoryContainer:
    if settings.PERSISTENCE_BACKEND == "memory":
        ingredient_repo = InMemoryIngredientRepository()
        menu_item_repo = InMemoryMenuItemRepository()
        notification_repo = InMemoryLowStockNotificationRepository()
    else:
        ingredient_repo = MySQLIngredientRepository()
        menu_item_repo = MySQLMenuItemRepository()
        notification_repo = MySQLLowStockNotificationRepository()
        create_mysql_tables(ingredient_repo, menu_item_repo, notification_repo)

    return setup_inventory_dependencies(
        ingredient_repo, menu_item_repo, notification_repo, build_email_service(), build_alert_config()
    )


def build_demo_container() -> InventoryContainer:
    """In-memory container seeded with a small burger menu."""
    ingredients = [
        Ingredient.create("ing-bun", "Burger Bun", "Brioche bun", "pcs", 40, 10, 20, 0.35, "sup-bakery", "Bakery"),
        Ingredient.create("ing-patty", "Beef Patty", "150g patty", "pcs", 25, 8, 15, 1.8, "sup-meat", "Meat"),
        Ingredient.create("ing-cheddar", "Cheddar", "Sliced cheddar", "g", 600, 200, 400, 0.012, "sup-dairy", "Dairy"),
    ]
    menu_items = [
        MenuItem.create(
            "menu-cheeseburger",
            "Cheeseburger",
            "Beef, cheddar, brioche",
            9.5,
            "cat-burgers",
            [
                IngredientReference("ing-bun", 1, "pcs"),
                IngredientReference("ing-patty", 1, "pcs"),
                IngredientReference("ing-cheddar", 40, "g"),
            ],
            12,
        ),
    ]
    return setup_inventory_dependencies(
        InMemoryIngredientRepository(result.unwrap() for result in ingredients),
        InMemoryMenuItemRepository(result.unwrap() for result in menu_items),
        InMemoryLowStockNotificationRepository(),
        build_email_service(),
        build_alert_config(),
    )


async def run_demo() -> None:
    container = build_demo_container()
    manager = container.inventory_manager
    manager.start()
    try:
        order = [OrderItemDTO("menu-cheeseburger", 12), OrderItemDTO("menu-unknown", 1)]
        result = await manager.process_order(order)
        for consumption in result.consumed_ingredients:
            logger.info(
                f"{consumption.ingredient_id}: -{consumption.consumed_quantity} -> {consumption.remaining_stock} "
                f"(low={consumption.is_low_stock}, reorder={consumption.needs_reorder})"
            )
        for failed in result.failed_items:
            logger.warning(f"{failed.menu_item_id}: {failed.error}")

        summary = (await manager.check_and_alert_low_stock()).unwrap()
        logger.info(f"Audit summary: {summary}")
        await manager.alert_dispatcher.join()
    finally:
        await manager.shutdown()


async def run_service() -> None:
    """Runs the alert worker and the periodic audit until cancelled."""
    container = build_container()
    manager = container.inventory_manager
    manager.start()
    manager.start_automatic_alerts()
    logger.info("Inventory alerting service started.")
    try:
        await asyncio.Event().wait()
    finally:
        await manager.shutdown()
        logger.info("Inventory alerting service stopped.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Inventory consumption and low-stock alerting service")
    parser.add_argument("--demo", action="store_true", help="run a sample order against in-memory repositories")
    args = parser.parse_args()

    setup_logging()
    try:
        asyncio.run(run_demo() if args.demo else run_service())
    except KeyboardInterrupt:
        logger.info("Interrupted.")
