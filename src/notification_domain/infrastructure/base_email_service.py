# src/notification_domain/infrastructure/base_email_service.py
"""Common async wrapper for blocking email transports."""

import logging
from abc import abstractmethod

import anyio

from src.common.exceptions.custom_exceptions import NotificationDeliveryError
from src.common.result import Result, err, ok
from src.notification_domain.domain.email_service import EmailContent, EmailRecipient, IEmailService

logger = logging.getLogger(__name__)


class BlockingEmailService(IEmailService):
    """Runs a blocking ``_deliver`` in a worker thread and reports failures as Results, never raising."""

    @abstractmethod
    def _deliver(self, recipient: EmailRecipient, content: EmailContent) -> None:
        """Sends one email; raises NotificationDeliveryError on failure."""
        pass

    async def send(self, recipient: EmailRecipient, content: EmailContent) -> Result[None]:
        try:
            await anyio.to_thread.run_sync(self._deliver, recipient, content)
        except NotificationDeliveryError as e:
            logger.error(str(e))
            return err(e)
        except Exception as e:
            logger.error(f"Unexpected error sending email to {recipient.email}: {e}")
            return err(NotificationDeliveryError(str(e), original_exception=e, recipient=recipient.email))
        logger.debug(f"Email '{content.subject}' sent to {recipient.email}")
        return ok(None)

    async def send_bulk(self, recipients: list[EmailRecipient], content: EmailContent) -> Result[None]:
        failed = []
        for recipient in recipients:
            result = await self.send(recipient, content)
            if not result.success:
                failed.append(recipient.email)

        if failed:
            return err(
                NotificationDeliveryError(
                    f"Failed to send bulk emails to {len(failed)} of {len(recipients)} recipients: {', '.join(failed)}"
                )
            )
        return ok(None)
