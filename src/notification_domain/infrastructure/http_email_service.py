# src/notification_domain/infrastructure/http_email_service.py
"""Client for a transactional email HTTP API."""

from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from src.common.config.settings import settings
from src.common.exceptions.custom_exceptions import NotificationDeliveryError
from src.notification_domain.domain.email_service import EmailContent, EmailRecipient
from src.notification_domain.infrastructure.base_email_service import BlockingEmailService


class HttpEmailService(BlockingEmailService):
    """
    Posts each email as JSON to ``{base_url}/messages`` with a bearer token.
    Transient failures (429 and 5xx) are retried by the session adapter.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        from_address: Optional[str] = None,
        timeout: float = 30,
    ) -> None:
        self.base_url = (base_url or settings.EMAIL_API_BASE_URL or "").rstrip("/")
        self.token = token or settings.EMAIL_API_TOKEN
        self.from_address = from_address or settings.SMTP_FROM
        self.timeout = timeout

        # Configure session with connection pooling and retry strategy
        self.session = requests.Session()
        retry_strategy = Retry(
            total=3,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["POST"],
            backoff_factor=1,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy, pool_connections=4, pool_maxsize=4)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def _deliver(self, recipient: EmailRecipient, content: EmailContent) -> None:
        if not self.base_url or not self.token:
            raise NotificationDeliveryError(
                "EMAIL_API_BASE_URL and EMAIL_API_TOKEN must be set in environment variables.",
                recipient=recipient.email,
            )

        payload = {
            "from": self.from_address,
            "to": [{"email": recipient.email, "name": recipient.name}],
            "subject": content.subject,
            "html" if content.is_html else "text": content.body,
        }
        headers = {"Authorization": f"Bearer {self.token}"}

        try:
            response = self.session.post(
                f"{self.base_url}/messages", json=payload, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise NotificationDeliveryError(
                f"Email API request timed out: {e}", original_exception=e, recipient=recipient.email
            )
        except requests.exceptions.RequestException as e:
            status = e.response.status_code if e.response is not None else "N/A"
            raise NotificationDeliveryError(
                f"Email API request failed: {e}. Status code: {status}",
                original_exception=e,
                recipient=recipient.email,
            )
