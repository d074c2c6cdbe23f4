# src/inventory_domain/application/alert_dispatcher.py
"""Serialized delivery of real-time low-stock alerts."""

import asyncio
import logging
from typing import Optional

from src.common.dtos.inventory_dtos import RealTimeAlertDTO
from src.notification_domain.domain.email_service import EmailContent, EmailRecipient, IEmailService

logger = logging.getLogger(__name__)


class RealTimeAlertDispatcher:
    """
    Single-consumer pipeline for alerts raised while orders are processed.

    Producers call :meth:`push`, which only enqueues. One long-lived worker task waits
    for the first alert of a burst, sleeps ``debounce_seconds`` so the rest of the burst
    can arrive, then drains the queue in FIFO order until it is empty. Alerts pushed
    during a drain are picked up by that same drain.
    """

    def __init__(
        self,
        email_service: IEmailService,
        recipients: list[EmailRecipient],
        debounce_seconds: float = 0.1,
        max_queue_size: int = 1000,
        send_emails: bool = True,
    ) -> None:
        self.email_service = email_service
        self.recipients = recipients
        self.debounce_seconds = debounce_seconds
        self.send_emails = send_emails
        self._queue: asyncio.Queue[RealTimeAlertDTO] = asyncio.Queue(maxsize=max_queue_size)
        self._worker: Optional[asyncio.Task] = None
        self._draining = False
        self.drain_cycles = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    @property
    def is_draining(self) -> bool:
        return self._draining

    def push(self, alert: RealTimeAlertDTO) -> bool:
        """Enqueues an alert; returns False if the queue is full and the alert was dropped."""
        try:
            self._queue.put_nowait(alert)
        except asyncio.QueueFull:
            logger.warning(f"Alert queue full ({self._queue.maxsize}); dropping alert for {alert.ingredient_name}")
            return False
        return True

    def start(self) -> None:
        """Starts the worker task. Must be called from a running event loop; no-op if already running."""
        if self.is_running:
            return
        self._worker = asyncio.get_running_loop().create_task(self._run(), name="real-time-alert-dispatcher")
        logger.debug("Real-time alert dispatcher started.")

    async def stop(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        logger.debug("Real-time alert dispatcher stopped.")

    async def join(self) -> None:
        """Waits until every alert pushed so far has been delivered (or has failed)."""
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            alert = await self._queue.get()
            if self.debounce_seconds > 0:
                await asyncio.sleep(self.debounce_seconds)

            self.drain_cycles += 1
            self._draining = True
            try:
                while True:
                    try:
                        await self._deliver(alert)
                    finally:
                        self._queue.task_done()
                    try:
                        alert = self._queue.get_nowait()
                    except asyncio.QueueEmpty:
                        break
            finally:
                self._draining = False

    async def _deliver(self, alert: RealTimeAlertDTO) -> None:
        if not self.send_emails:
            logger.info(f"Email alerts disabled; real-time alert for {alert.ingredient_name} not sent.")
            return

        content = self._build_content(alert)
        for recipient in self.recipients:
            try:
                result = await self.email_service.send(recipient, content)
            except Exception as e:
                logger.error(f"Unexpected error sending real-time alert to {recipient.email}: {e}")
                continue
            if not result.success:
                logger.error(f"Failed to send real-time alert to {recipient.email}: {result.error}")

    @staticmethod
    def _build_content(alert: RealTimeAlertDTO) -> EmailContent:
        level = "CRITICAL" if alert.is_low_stock else "LOW"
        return EmailContent(
            subject=f"URGENT: Low Stock Alert - {alert.ingredient_name}",
            body=(
                f"Ingredient {alert.ingredient_name} has reached a {level} stock level.\n\n"
                f"Remaining stock: {alert.remaining_stock}{alert.unit}\n\n"
                "Please reorder this ingredient as soon as possible.\n\n"
                "This is an automated alert from the Inventory Management System."
            ),
        )
