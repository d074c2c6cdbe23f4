# tests/test_inventory_domain/test_application/test_alert_dispatcher.py
"""Tests for the real-time alert dispatcher."""

import asyncio

from src.common.dtos.inventory_dtos import RealTimeAlertDTO
from src.common.exceptions.custom_exceptions import NotificationDeliveryError
from src.common.result import err, ok
from src.inventory_domain.application.alert_dispatcher import RealTimeAlertDispatcher


def make_alert(name: str, remaining: float = 4, is_low_stock: bool = True) -> RealTimeAlertDTO:
    return RealTimeAlertDTO(
        ingredient_id=f"ing-{name.lower()}",
        ingredient_name=name,
        remaining_stock=remaining,
        unit="kg",
        is_low_stock=is_low_stock,
    )


def sent_subjects(mock_email_service) -> list[str]:
    return [call.args[1].subject for call in mock_email_service.send.call_args_list]


def test_burst_is_drained_once_in_fifo_order(mock_email_service, recipients) -> None:
    """Three alerts pushed back to back are delivered by a single drain cycle."""

    async def scenario() -> RealTimeAlertDispatcher:
        dispatcher = RealTimeAlertDispatcher(mock_email_service, recipients[:1], debounce_seconds=0.05)
        dispatcher.start()
        for name in ("Flour", "Yeast", "Basil"):
            assert dispatcher.push(make_alert(name))
        await dispatcher.join()
        await dispatcher.stop()
        return dispatcher

    dispatcher = asyncio.run(scenario())

    assert dispatcher.drain_cycles == 1
    assert dispatcher.pending == 0
    assert sent_subjects(mock_email_service) == [
        "URGENT: Low Stock Alert - Flour",
        "URGENT: Low Stock Alert - Yeast",
        "URGENT: Low Stock Alert - Basil",
    ]


def test_alert_pushed_during_drain_joins_that_drain(mock_email_service, recipients) -> None:
    async def scenario() -> RealTimeAlertDispatcher:
        dispatcher = RealTimeAlertDispatcher(mock_email_service, recipients[:1], debounce_seconds=0)

        async def send(recipient, content):
            if content.subject.endswith("Flour"):
                assert dispatcher.is_draining
                dispatcher.push(make_alert("Salt"))
            return ok(None)

        mock_email_service.send.side_effect = send
        dispatcher.start()
        dispatcher.push(make_alert("Flour"))
        await dispatcher.join()
        await dispatcher.stop()
        return dispatcher

    dispatcher = asyncio.run(scenario())

    assert dispatcher.drain_cycles == 1
    assert not dispatcher.is_draining
    assert sent_subjects(mock_email_service) == [
        "URGENT: Low Stock Alert - Flour",
        "URGENT: Low Stock Alert - Salt",
    ]


def test_separate_bursts_get_separate_drains(mock_email_service, recipients) -> None:
    async def scenario() -> RealTimeAlertDispatcher:
        dispatcher = RealTimeAlertDispatcher(mock_email_service, recipients[:1], debounce_seconds=0)
        dispatcher.start()
        dispatcher.push(make_alert("Flour"))
        await dispatcher.join()
        dispatcher.push(make_alert("Yeast"))
        await dispatcher.join()
        await dispatcher.stop()
        return dispatcher

    dispatcher = asyncio.run(scenario())

    assert dispatcher.drain_cycles == 2


def test_delivery_failures_do_not_stop_the_drain(mock_email_service, recipients) -> None:
    mock_email_service.send.side_effect = [
        err(NotificationDeliveryError("mailbox full", recipient=recipients[0].email)),
        RuntimeError("socket closed"),
        ok(None),
        ok(None),
        ok(None),
        ok(None),
    ]

    async def scenario() -> RealTimeAlertDispatcher:
        dispatcher = RealTimeAlertDispatcher(mock_email_service, recipients, debounce_seconds=0)
        for name in ("Flour", "Yeast", "Basil"):
            dispatcher.push(make_alert(name))
        dispatcher.start()
        await dispatcher.join()
        running = dispatcher.is_running
        await dispatcher.stop()
        assert running
        return dispatcher

    dispatcher = asyncio.run(scenario())

    # every alert goes to both recipients
    assert mock_email_service.send.call_count == 6
    assert dispatcher.pending == 0


def test_email_content_names_level_and_remaining_stock() -> None:
    content = RealTimeAlertDispatcher._build_content(make_alert("Flour", remaining=12.5, is_low_stock=False))

    assert content.subject == "URGENT: Low Stock Alert - Flour"
    assert "LOW stock level" in content.body
    assert "Remaining stock: 12.5kg" in content.body
    assert not content.is_html


def test_disabled_email_alerts_are_drained_without_sending(mock_email_service, recipients) -> None:
    async def scenario() -> RealTimeAlertDispatcher:
        dispatcher = RealTimeAlertDispatcher(mock_email_service, recipients, debounce_seconds=0, send_emails=False)
        dispatcher.start()
        dispatcher.push(make_alert("Flour"))
        await dispatcher.join()
        await dispatcher.stop()
        return dispatcher

    dispatcher = asyncio.run(scenario())

    assert dispatcher.drain_cycles == 1
    mock_email_service.send.assert_not_called()


def test_full_queue_drops_alert(mock_email_service, recipients) -> None:
    async def scenario() -> tuple[list[bool], int]:
        dispatcher = RealTimeAlertDispatcher(mock_email_service, recipients, max_queue_size=2)
        accepted = [dispatcher.push(make_alert(name)) for name in ("Flour", "Yeast", "Basil")]
        return accepted, dispatcher.pending

    accepted, pending = asyncio.run(scenario())

    assert accepted == [True, True, False]
    assert pending == 2


def test_start_and_stop_are_idempotent(mock_email_service, recipients) -> None:
    async def scenario() -> None:
        dispatcher = RealTimeAlertDispatcher(mock_email_service, recipients)
        await dispatcher.stop()
        assert not dispatcher.is_running

        dispatcher.start()
        worker = dispatcher._worker
        dispatcher.start()
        assert dispatcher._worker is worker
        assert dispatcher.is_running

        await dispatcher.stop()
        await dispatcher.stop()
        assert not dispatcher.is_running

    asyncio.run(scenario())
