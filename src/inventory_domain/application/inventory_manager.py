# src/inventory_domain/application/inventory_manager.py
"""Orchestrates order consumption, real-time alerts and periodic stock audits."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from src.common.dtos.inventory_dtos import (
    AlertSummaryDTO,
    ConsumptionResultDTO,
    DeductionPreviewDTO,
    FailedItemDTO,
    ItemAvailabilityDTO,
    LowStockIngredientDTO,
    OrderItemDTO,
    OrderProcessingResultDTO,
    RealTimeAlertDTO,
)
from src.common.exceptions.custom_exceptions import ApplicationError
from src.common.result import Result, err, ok
from src.common.utils.date_utils import utc_now
from src.inventory_domain.application.alert_dispatcher import RealTimeAlertDispatcher
from src.inventory_domain.application.check_low_stock_use_case import CheckLowStockUseCase
from src.inventory_domain.application.consume_ingredients_use_case import ConsumeIngredientsUseCase
from src.inventory_domain.domain.repositories.ingredient_repository import IIngredientRepository
from src.inventory_domain.domain.repositories.menu_item_repository import IMenuItemRepository
from src.notification_domain.domain.email_service import EmailContent, EmailRecipient, IEmailService

logger = logging.getLogger(__name__)


@dataclass
class AlertConfig:
    recipients: list[EmailRecipient] = field(default_factory=list)
    check_interval_minutes: float = 60
    enable_email_alerts: bool = True
    enable_real_time_alerts: bool = True
    debounce_seconds: float = 0.1
    max_queue_size: int = 1000


class InventoryManager:
    """
    Entry point for the inventory core.

    Exactly one instance is expected per process: the real-time alert queue and the
    periodic audit task live on the instance and are not coordinated across processes.
    """

    def __init__(
        self,
        check_low_stock_use_case: CheckLowStockUseCase,
        consume_ingredients_use_case: ConsumeIngredientsUseCase,
        email_service: IEmailService,
        ingredient_repo: IIngredientRepository,
        menu_item_repo: IMenuItemRepository,
        alert_config: AlertConfig,
    ) -> None:
        self.check_low_stock_use_case = check_low_stock_use_case
        self.consume_ingredients_use_case = consume_ingredients_use_case
        self.email_service = email_service
        self.ingredient_repo = ingredient_repo
        self.menu_item_repo = menu_item_repo
        self.alert_config = alert_config
        self.alert_dispatcher = RealTimeAlertDispatcher(
            email_service=email_service,
            recipients=alert_config.recipients,
            debounce_seconds=alert_config.debounce_seconds,
            max_queue_size=alert_config.max_queue_size,
            send_emails=alert_config.enable_email_alerts,
        )
        self._audit_task: Optional[asyncio.Task] = None
        self._audit_stop: Optional[asyncio.Event] = None

    # --- lifecycle ---

    def start(self) -> None:
        """Starts the real-time alert worker. Call once from the running event loop."""
        self.alert_dispatcher.start()

    async def shutdown(self) -> None:
        """Stops the periodic audit, lets an audit already running finish, then stops the alert worker."""
        audit_task = self._audit_task
        self.stop_automatic_alerts()
        if audit_task is not None:
            await audit_task
        await self.alert_dispatcher.stop()

    # --- order path ---

    async def process_order(self, items: list[OrderItemDTO]) -> OrderProcessingResultDTO:
        """
        Consumes ingredients for each order line, one line at a time.

        A failing line is recorded in ``failed_items`` and the remaining lines are still
        processed; lines consumed earlier in the same order are not rolled back.
        """
        order_items = self._validate_items(items)

        consumed: list[ConsumptionResultDTO] = []
        failed: list[FailedItemDTO] = []

        for item in order_items:
            result = await self.consume_ingredients_use_case.execute(item)
            if not result.success:
                logger.warning(f"Order item {item.menu_item_id} failed: {result.error.message}")
                failed.append(FailedItemDTO(menu_item_id=item.menu_item_id, error=result.error.message))
                continue

            consumed.extend(result.value.consumption_results)
            for consumption in result.value.consumption_results:
                if consumption.needs_reorder:
                    await self._queue_real_time_alert(consumption)

        if failed:
            logger.info(f"Processed order with {len(failed)} of {len(order_items)} items failing.")
        else:
            logger.info(f"Processed order with {len(order_items)} items.")

        return OrderProcessingResultDTO(successful=not failed, consumed_ingredients=consumed, failed_items=failed)

    async def _queue_real_time_alert(self, consumption: ConsumptionResultDTO) -> None:
        if not self.alert_config.enable_real_time_alerts:
            return

        ingredient_result = await self.ingredient_repo.find_by_id(consumption.ingredient_id)
        if not ingredient_result.success or ingredient_result.value is None:
            logger.warning(f"Cannot raise real-time alert: ingredient {consumption.ingredient_id} lookup failed")
            return

        ingredient = ingredient_result.value
        self.alert_dispatcher.push(
            RealTimeAlertDTO(
                ingredient_id=ingredient.id,
                ingredient_name=ingredient.name,
                remaining_stock=consumption.remaining_stock,
                unit=ingredient.unit,
                is_low_stock=consumption.is_low_stock,
                created_at=utc_now(),
            )
        )

    @staticmethod
    def _validate_items(items: list[OrderItemDTO]) -> list[OrderItemDTO]:
        """Normalises order lines; malformed input is a programmer error and raises."""
        if not isinstance(items, (list, tuple)):
            raise TypeError("Order items must be a list")

        order_items: list[OrderItemDTO] = []
        for item in items:
            if isinstance(item, OrderItemDTO):
                order_items.append(item)
            elif isinstance(item, dict) and "menu_item_id" in item and "quantity" in item:
                order_items.append(OrderItemDTO(menu_item_id=item["menu_item_id"], quantity=item["quantity"]))
            else:
                raise ValueError(f"Malformed order item: {item!r}")
        return order_items

    # --- read-only order helpers ---

    async def check_availability(self, items: list[OrderItemDTO]) -> Result[list[ItemAvailabilityDTO]]:
        """Reports, per order line, which ingredients are missing or short. Never mutates stock."""
        order_items = self._validate_items(items)
        availability: list[ItemAvailabilityDTO] = []

        for item in order_items:
            menu_item_result = await self.menu_item_repo.find_by_id(item.menu_item_id)
            if not menu_item_result.success:
                return menu_item_result
            menu_item = menu_item_result.value
            if menu_item is None:
                availability.append(
                    ItemAvailabilityDTO(
                        menu_item_id=item.menu_item_id,
                        menu_item_name="Unknown",
                        available=False,
                        missing_ingredients=["Menu item not found"],
                    )
                )
                continue

            references = menu_item.get_required_ingredients()
            ingredients_result = await self.ingredient_repo.find_by_ids([ref.ingredient_id for ref in references])
            if not ingredients_result.success:
                return ingredients_result
            ingredient_map = {ing.id: ing for ing in ingredients_result.value}

            missing: list[str] = []
            for ref in references:
                ingredient = ingredient_map.get(ref.ingredient_id)
                if ingredient is None:
                    missing.append(f"Ingredient {ref.ingredient_id} not found")
                    continue
                required = ref.quantity * item.quantity
                if ingredient.current_stock < required:
                    missing.append(
                        f"{ingredient.name}: Need {required}{ingredient.unit}, "
                        f"have {ingredient.current_stock}{ingredient.unit}"
                    )

            availability.append(
                ItemAvailabilityDTO(
                    menu_item_id=item.menu_item_id,
                    menu_item_name=menu_item.name,
                    available=not missing,
                    missing_ingredients=missing,
                )
            )

        return ok(availability)

    async def preview_deduction(self, items: list[OrderItemDTO]) -> Result[list[DeductionPreviewDTO]]:
        """Projects remaining stock per ingredient for a whole order without persisting anything."""
        order_items = self._validate_items(items)
        required: dict[str, float] = {}

        for item in order_items:
            menu_item_result = await self.menu_item_repo.find_by_id(item.menu_item_id)
            if not menu_item_result.success:
                return menu_item_result
            if menu_item_result.value is None:
                logger.debug(f"Preview skips unknown menu item {item.menu_item_id}")
                continue
            for ref in menu_item_result.value.get_required_ingredients():
                required[ref.ingredient_id] = required.get(ref.ingredient_id, 0) + ref.quantity * item.quantity

        if not required:
            return ok([])

        ingredients_result = await self.ingredient_repo.find_by_ids(list(required))
        if not ingredients_result.success:
            return ingredients_result
        ingredient_map = {ing.id: ing for ing in ingredients_result.value}

        previews: list[DeductionPreviewDTO] = []
        for ingredient_id, quantity in required.items():
            ingredient = ingredient_map.get(ingredient_id)
            if ingredient is None:
                continue
            remaining = ingredient.current_stock - quantity
            previews.append(
                DeductionPreviewDTO(
                    ingredient_id=ingredient.id,
                    ingredient_name=ingredient.name,
                    consumed_quantity=quantity,
                    current_stock=ingredient.current_stock,
                    remaining_stock=remaining,
                    unit=ingredient.unit,
                    is_low_stock=remaining <= ingredient.min_stock,
                    needs_reorder=remaining <= ingredient.reorder_point,
                    reorder_point=ingredient.reorder_point,
                )
            )
        return ok(previews)

    # --- periodic audit path ---

    async def check_and_alert_low_stock(self) -> Result[AlertSummaryDTO]:
        try:
            check_result = await self.check_low_stock_use_case.execute()
            if not check_result.success:
                return check_result

            low_stock = check_result.value.low_stock_ingredients
            notifications_created = check_result.value.notifications_created
            if not low_stock:
                return ok(AlertSummaryDTO(notifications_created=notifications_created))

            critical = [ingredient for ingredient in low_stock if ingredient.is_critical]
            low = [ingredient for ingredient in low_stock if not ingredient.is_critical]

            emails_sent = 0
            if self.alert_config.enable_email_alerts:
                content = self._build_audit_content(critical, low)
                for recipient in self.alert_config.recipients:
                    send_result = await self.email_service.send(recipient, content)
                    if send_result.success:
                        emails_sent += 1
                    else:
                        logger.error(f"Failed to send low stock alert to {recipient.email}: {send_result.error}")
            else:
                logger.info("Email alerts disabled; low stock summary not sent.")

            return ok(
                AlertSummaryDTO(
                    low_stock_count=len(low_stock),
                    critical_stock_count=len(critical),
                    emails_sent=emails_sent,
                    notifications_created=notifications_created,
                )
            )
        except Exception as e:
            logger.exception("Unexpected error during low stock alerting")
            return err(ApplicationError(f"Failed to check and alert low stock: {e}", original_exception=e))

    def start_automatic_alerts(self) -> None:
        """(Re)starts the periodic audit; the first check runs immediately."""
        self.stop_automatic_alerts()
        self._audit_stop = asyncio.Event()
        self._audit_task = asyncio.get_running_loop().create_task(
            self._run_periodic_audit(self._audit_stop), name="periodic-low-stock-audit"
        )
        logger.info(f"Automatic low stock alerts every {self.alert_config.check_interval_minutes} minutes.")

    def stop_automatic_alerts(self) -> None:
        """Ends the periodic audit. Only the wait between audits is interrupted; a running audit completes."""
        if self._audit_task is None:
            return
        self._audit_stop.set()
        self._audit_task = None
        self._audit_stop = None
        logger.info("Automatic low stock alerts stopped.")

    @property
    def automatic_alerts_running(self) -> bool:
        return self._audit_task is not None and not self._audit_task.done()

    async def _run_periodic_audit(self, stop_event: asyncio.Event) -> None:
        interval_seconds = self.alert_config.check_interval_minutes * 60
        while not stop_event.is_set():
            result = await self.check_and_alert_low_stock()
            if result.success:
                summary = result.value
                logger.info(
                    f"Periodic audit: {summary.low_stock_count} low ({summary.critical_stock_count} critical), "
                    f"{summary.emails_sent} emails sent, {summary.notifications_created} notifications created."
                )
            else:
                logger.error(f"Periodic audit failed: {result.error}")
            try:
                await asyncio.wait_for(stop_event.wait(), interval_seconds)
            except asyncio.TimeoutError:
                pass

    @staticmethod
    def _build_audit_content(
        critical: list[LowStockIngredientDTO], low: list[LowStockIngredientDTO]
    ) -> EmailContent:
        sections = []
        if critical:
            lines = "\n".join(
                f"• {i.name}: Current {i.current_stock}{i.unit}, Minimum {i.min_stock}{i.unit}" for i in critical
            )
            sections.append(f"CRITICAL - at or below minimum stock:\n{lines}")
        if low:
            lines = "\n".join(
                f"• {i.name}: Current {i.current_stock}{i.unit}, Reorder point {i.reorder_point}{i.unit}"
                for i in low
            )
            sections.append(f"LOW - at or below reorder point:\n{lines}")

        total = len(critical) + len(low)
        return EmailContent(
            subject=f"Low Stock Alert - {total} Item(s) Need Attention",
            body=(
                "The following ingredients are running low on stock:\n\n"
                + "\n\n".join(sections)
                + "\n\nPlease replenish these items as soon as possible.\n\n"
                "This is an automated alert from the Inventory Management System."
            ),
        )
