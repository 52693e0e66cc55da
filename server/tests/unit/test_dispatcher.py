"""Unit tests for the notification dispatcher."""

import asyncio
from datetime import date

import pytest

from vip_transfer.core.observability import REGISTRY
from vip_transfer.notifications.base import Channel, NotificationError, Outcome
from vip_transfer.notifications.dispatcher import NotificationDispatcher
from vip_transfer.notifications.log import NotificationLog
from vip_transfer.schemas.reservation import Reservation


def reservation() -> Reservation:
    return Reservation(
        id=3,
        customer_name="Mehmet Yılmaz",
        customer_phone="+90 532 000 00 00",
        customer_email="mehmet@example.com",
        pickup_location="Antalya Airport",
        dropoff_location="Alanya",
        transfer_date=date(2026, 6, 4),
        transfer_time="11:00",
        passenger_count=1,
        number_of_adults=1,
        number_of_children=0,
        child_seat_count=0,
        language="tr",
        currency="EUR",
        status="Pending",
    )


class FakeMailer:
    def __init__(self, customer=True, admin=1):
        self.customer = customer
        self.admin = admin
        self.calls = []

    async def send_customer_confirmation(self, reservation):
        self.calls.append(("customer", reservation.id))
        if isinstance(self.customer, Exception):
            raise self.customer
        return self.customer

    async def send_admin_alert(self, reservation):
        self.calls.append(("admin", reservation.id))
        if isinstance(self.admin, Exception):
            raise self.admin
        return self.admin


class FakeWhatsApp:
    def __init__(self, delay: float = 0, result=True):
        self.delay = delay
        self.result = result

    async def send_reservation_documents(self, reservation):
        await asyncio.sleep(self.delay)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def _sample(channel: Channel, outcome: Outcome) -> float:
    value = REGISTRY.get_sample_value(
        "notifications_total", {"channel": channel.value, "outcome": outcome.value}
    )
    return value or 0.0


@pytest.fixture
def notification_log(tmp_path):
    return NotificationLog(str(tmp_path / "logs" / "notifications.txt"))


@pytest.mark.asyncio
async def test_all_channels_succeed(notification_log):
    mailer = FakeMailer()
    dispatcher = NotificationDispatcher(mailer, FakeWhatsApp(), notification_log)

    results = await dispatcher.notify_created(reservation())

    assert [r.channel for r in results] == [Channel.CUSTOMER_EMAIL, Channel.ADMIN_EMAIL, Channel.WHATSAPP]
    assert all(r.outcome is Outcome.SENT for r in results)
    assert mailer.calls == [("customer", 3), ("admin", 3)]


@pytest.mark.asyncio
async def test_failing_channel_does_not_affect_others(notification_log):
    before = _sample(Channel.ADMIN_EMAIL, Outcome.FAILED)
    mailer = FakeMailer(admin=NotificationError("No admin email recipients configured"))
    dispatcher = NotificationDispatcher(mailer, FakeWhatsApp(), notification_log)

    customer, admin, whatsapp = await dispatcher.notify_created(reservation())

    assert customer.outcome is Outcome.SENT
    assert admin.outcome is Outcome.FAILED
    assert admin.detail == "No admin email recipients configured"
    assert not admin.ok
    assert whatsapp.outcome is Outcome.SENT
    assert _sample(Channel.ADMIN_EMAIL, Outcome.FAILED) == before + 1


@pytest.mark.asyncio
async def test_unexpected_exception_is_contained(notification_log):
    dispatcher = NotificationDispatcher(
        FakeMailer(customer=RuntimeError("boom")), FakeWhatsApp(), notification_log
    )

    results = await dispatcher.notify_created(reservation())

    assert results[0].outcome is Outcome.FAILED
    assert results[0].detail == "boom"


@pytest.mark.asyncio
async def test_disabled_channel_is_skipped(notification_log):
    dispatcher = NotificationDispatcher(FakeMailer(), FakeWhatsApp(result=False), notification_log)

    results = await dispatcher.notify_created(reservation())

    assert results[2].outcome is Outcome.SKIPPED
    assert results[2].ok


@pytest.mark.asyncio
async def test_slow_channel_times_out(notification_log):
    dispatcher = NotificationDispatcher(
        FakeMailer(), FakeWhatsApp(delay=5), notification_log, timeout_seconds=0.05
    )

    results = await dispatcher.notify_created(reservation())

    assert results[0].outcome is Outcome.SENT
    assert results[2].outcome is Outcome.TIMEOUT
    assert results[2].detail == "timed out after 0.05s"


@pytest.mark.asyncio
async def test_notify_confirmed_resends_customer_email(notification_log):
    mailer = FakeMailer()
    dispatcher = NotificationDispatcher(mailer, FakeWhatsApp(), notification_log)

    result = await dispatcher.notify_confirmed(reservation())

    assert result.channel is Channel.CUSTOMER_EMAIL
    assert result.outcome is Outcome.SENT
    assert mailer.calls == [("customer", 3)]


@pytest.mark.asyncio
async def test_attempts_are_written_to_notification_log(notification_log):
    dispatcher = NotificationDispatcher(
        FakeMailer(admin=NotificationError("smtp down")), FakeWhatsApp(), notification_log
    )

    await dispatcher.notify_created(reservation())

    lines = notification_log.read_lines()
    assert lines[0].endswith("[RESERVATION] #3 created for Mehmet Yılmaz")
    assert any(line.endswith("[ADMIN_EMAIL] Reservation #3: failed | smtp down") for line in lines)
    assert any(line.endswith("[WHATSAPP] Reservation #3: sent") for line in lines)
    assert len(lines) == 4


def test_notification_log_missing_file_reads_empty(tmp_path):
    assert NotificationLog(str(tmp_path / "absent.txt")).read_lines() == []
