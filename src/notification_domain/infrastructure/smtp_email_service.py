# src/notification_domain/infrastructure/smtp_email_service.py
"""SMTP delivery of alert emails."""

import smtplib
from dataclasses import dataclass
from email.message import EmailMessage

from src.common.config.settings import settings
from src.common.exceptions.custom_exceptions import NotificationDeliveryError
from src.notification_domain.domain.email_service import EmailContent, EmailRecipient
from src.notification_domain.infrastructure.base_email_service import BlockingEmailService


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int
    secure: bool  # implicit TLS; otherwise STARTTLS when the server offers it
    user: str
    password: str
    from_address: str
    timeout: float = 30

    @classmethod
    def from_settings(cls) -> "SmtpConfig":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            secure=settings.SMTP_SECURE,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASS,
            from_address=settings.SMTP_FROM,
            timeout=settings.SMTP_TIMEOUT,
        )


class SmtpEmailService(BlockingEmailService):
    """Opens one SMTP session per email; alert volume is low enough that pooling is not worth it."""

    def __init__(self, config: SmtpConfig) -> None:
        self.config = config

    def _build_message(self, recipient: EmailRecipient, content: EmailContent) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.config.from_address
        message["To"] = recipient.formatted()
        message["Subject"] = content.subject
        if content.is_html:
            message.set_content(content.body, subtype="html")
        else:
            message.set_content(content.body)
        return message

    def _deliver(self, recipient: EmailRecipient, content: EmailContent) -> None:
        message = self._build_message(recipient, content)
        try:
            if self.config.secure:
                smtp = smtplib.SMTP_SSL(self.config.host, self.config.port, timeout=self.config.timeout)
            else:
                smtp = smtplib.SMTP(self.config.host, self.config.port, timeout=self.config.timeout)
            with smtp:
                if not self.config.secure:
                    smtp.ehlo()
                    if smtp.has_extn("starttls"):
                        smtp.starttls()
                        smtp.ehlo()
                if self.config.user:
                    smtp.login(self.config.user, self.config.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationDeliveryError(
                f"Failed to send email: {e}", original_exception=e, recipient=recipient.email
            )
