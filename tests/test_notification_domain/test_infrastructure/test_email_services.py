# tests/test_notification_domain/test_infrastructure/test_email_services.py
"""Tests for the SMTP and HTTP email services."""

import asyncio
import smtplib
from dataclasses import replace
from unittest.mock import Mock

import pytest
import requests

from src.common.config.settings import settings
from src.common.exceptions.custom_exceptions import NotificationDeliveryError
from src.notification_domain.domain.email_service import EmailContent, EmailRecipient
from src.notification_domain.infrastructure.http_email_service import HttpEmailService
from src.notification_domain.infrastructure.smtp_email_service import SmtpConfig, SmtpEmailService


@pytest.fixture
def smtp_config() -> SmtpConfig:
    return SmtpConfig(
        host="smtp.example.com",
        port=587,
        secure=False,
        user="alerts",
        password="secret",
        from_address="inventory@restaurant.com",
    )


@pytest.fixture
def content() -> EmailContent:
    return EmailContent(subject="Low Stock Alert - 1 Item(s) Need Attention", body="Flour is low.")


@pytest.fixture
def recipient() -> EmailRecipient:
    return EmailRecipient("manager@restaurant.com", "Inventory Manager")


def test_recipient_formatting() -> None:
    assert EmailRecipient("a@b.c", "Chef").formatted() == "Chef <a@b.c>"
    assert EmailRecipient("a@b.c").formatted() == "a@b.c"


def test_smtp_send_uses_starttls_and_login(mocker, smtp_config, recipient, content) -> None:
    mock_smtp_class = mocker.patch("smtplib.SMTP")
    mock_smtp_class.return_value.has_extn.return_value = True

    result = asyncio.run(SmtpEmailService(smtp_config).send(recipient, content))

    assert result.success
    mock_smtp_class.assert_called_once_with("smtp.example.com", 587, timeout=30)
    session = mock_smtp_class.return_value
    session.starttls.assert_called_once()
    session.login.assert_called_once_with("alerts", "secret")
    message = session.send_message.call_args[0][0]
    assert message["To"] == "Inventory Manager <manager@restaurant.com>"
    assert message["Subject"] == content.subject
    assert message.get_content().strip() == "Flour is low."


def test_smtp_secure_uses_ssl(mocker, smtp_config, recipient, content) -> None:
    mock_ssl_class = mocker.patch("smtplib.SMTP_SSL")
    mock_plain_class = mocker.patch("smtplib.SMTP")
    config = replace(smtp_config, secure=True, port=465)

    result = asyncio.run(SmtpEmailService(config).send(recipient, content))

    assert result.success
    mock_ssl_class.assert_called_once_with("smtp.example.com", 465, timeout=30)
    mock_plain_class.assert_not_called()
    mock_ssl_class.return_value.starttls.assert_not_called()


def test_smtp_failure_becomes_failed_result(mocker, smtp_config, recipient, content) -> None:
    mock_smtp_class = mocker.patch("smtplib.SMTP")
    mock_smtp_class.return_value.send_message.side_effect = smtplib.SMTPRecipientsRefused({})

    result = asyncio.run(SmtpEmailService(smtp_config).send(recipient, content))

    assert not result.success
    assert isinstance(result.error, NotificationDeliveryError)
    assert result.error.recipient == "manager@restaurant.com"
    assert result.error.message.startswith("Delivery Error: Failed to send email")


def test_smtp_connection_refused(mocker, smtp_config, recipient, content) -> None:
    mocker.patch("smtplib.SMTP", side_effect=ConnectionRefusedError("refused"))

    result = asyncio.run(SmtpEmailService(smtp_config).send(recipient, content))

    assert isinstance(result.error, NotificationDeliveryError)


def test_send_bulk_reports_failed_recipients(mocker, smtp_config, content) -> None:
    service = SmtpEmailService(smtp_config)

    def deliver(recipient, _content):
        if recipient.email == "bad@restaurant.com":
            raise NotificationDeliveryError("mailbox unavailable", recipient=recipient.email)

    mocker.patch.object(service, "_deliver", side_effect=deliver)

    result = asyncio.run(
        service.send_bulk(
            [EmailRecipient("good@restaurant.com"), EmailRecipient("bad@restaurant.com")], content
        )
    )

    assert not result.success
    assert "1 of 2 recipients: bad@restaurant.com" in result.error.message
    assert service._deliver.call_count == 2


def test_http_send_posts_message(mocker, recipient, content) -> None:
    service = HttpEmailService(base_url="https://mail.example.com/v1/", token="token-123")
    mock_response = Mock()
    mock_post = mocker.patch.object(service.session, "post", return_value=mock_response)

    result = asyncio.run(service.send(recipient, content))

    assert result.success
    mock_response.raise_for_status.assert_called_once()
    assert mock_post.call_args[0][0] == "https://mail.example.com/v1/messages"
    assert mock_post.call_args[1]["headers"] == {"Authorization": "Bearer token-123"}
    payload = mock_post.call_args[1]["json"]
    assert payload["to"] == [{"email": "manager@restaurant.com", "name": "Inventory Manager"}]
    assert payload["text"] == "Flour is low."


def test_http_send_timeout(mocker, recipient, content) -> None:
    service = HttpEmailService(base_url="https://mail.example.com", token="token-123")
    mocker.patch.object(service.session, "post", side_effect=requests.exceptions.Timeout("read timed out"))

    result = asyncio.run(service.send(recipient, content))

    assert isinstance(result.error, NotificationDeliveryError)
    assert "timed out" in result.error.message


def test_http_send_error_status(mocker, recipient, content) -> None:
    service = HttpEmailService(base_url="https://mail.example.com", token="token-123")
    mock_response = Mock()
    mock_response.status_code = 422
    mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError("422", response=mock_response)
    mocker.patch.object(service.session, "post", return_value=mock_response)

    result = asyncio.run(service.send(recipient, content))

    assert not result.success
    assert "Status code: 422" in result.error.message


def test_http_send_without_configuration(mocker, recipient, content) -> None:
    mocker.patch.object(settings, "EMAIL_API_BASE_URL", None)
    mocker.patch.object(settings, "EMAIL_API_TOKEN", None)
    service = HttpEmailService()
    mock_post = mocker.patch.object(service.session, "post")

    result = asyncio.run(service.send(recipient, content))

    assert isinstance(result.error, NotificationDeliveryError)
    mock_post.assert_not_called()
