# src/notification_domain/domain/email_service.py
"""Email delivery interface used for low-stock alerts."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from src.common.result import Result


@dataclass(frozen=True)
class EmailRecipient:
    email: str
    name: Optional[str] = None

    def formatted(self) -> str:
        return f"{self.name} <{self.email}>" if self.name else self.email


@dataclass(frozen=True)
class EmailContent:
    subject: str
    body: str
    is_html: bool = False


class IEmailService(ABC):

    @abstractmethod
    async def send(self, recipient: EmailRecipient, content: EmailContent) -> Result[None]:
        """Sends one email. Delivery problems come back as a NotificationDeliveryError failure."""
        pass

    @abstractmethod
    async def send_bulk(self, recipients: list[EmailRecipient], content: EmailContent) -> Result[None]:
        """Sends the same email to every recipient; fails if any single delivery failed."""
        pass
