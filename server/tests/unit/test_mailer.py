"""Unit tests for the reservation mailer."""

import threading
from datetime import date, datetime

import aiosmtplib
import pytest

from vip_transfer.core.config import settings
from vip_transfer.notifications.base import NotificationError
from vip_transfer.notifications.documents import ItineraryDocument
from vip_transfer.notifications.mailer import (
    ReservationMailer,
    build_message,
    render_admin_html,
    render_customer_html,
)
from vip_transfer.schemas.reservation import Reservation


class FakeSMTP:
    """Records messages instead of talking to a server."""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    async def send(self, message, **kwargs):
        if message["To"] in self.fail_for:
            raise aiosmtplib.SMTPRecipientsRefused([])
        self.sent.append((message, kwargs))
        return {}, "OK"


def reservation(**overrides) -> Reservation:
    values = {
        "id": 7,
        "customer_name": "Anna Schmidt",
        "customer_phone": "+49 151 2345678",
        "customer_email": "anna@example.com",
        "pickup_location": "Antalya Airport",
        "dropoff_location": "Belek",
        "transfer_date": date(2026, 6, 1),
        "transfer_time": "14:00",
        "passenger_count": 3,
        "number_of_adults": 2,
        "number_of_children": 1,
        "child_seat_count": 1,
        "language": "de",
        "vehicle_name": "Mercedes Vito VIP",
        "estimated_price": 45,
        "currency": "EUR",
        "notes": "<b>Late flight</b>",
        "status": "Pending",
        "created_at": datetime(2026, 6, 1, 9, 0),
    }
    values.update(overrides)
    return Reservation(**values)


@pytest.fixture
def smtp(monkeypatch):
    fake = FakeSMTP()
    monkeypatch.setattr(aiosmtplib, "send", fake.send)
    return fake


@pytest.fixture
def mailer():
    return ReservationMailer(documents=ItineraryDocument(font_path=""))


def _attachment_names(message):
    return [part.get_filename() for part in message.iter_attachments()]


def test_customer_html_is_localised_and_escaped():
    body = render_customer_html(reservation(), "de")

    assert "Ankunftsinformationen" in body
    assert "&lt;b&gt;Late flight&lt;/b&gt;" in body
    assert "cid:" not in body


def test_admin_html_lists_trip_details():
    body = render_admin_html(reservation())

    assert "Rezervasyon No: #7" in body
    assert "https://wa.me/491512345678" in body
    assert "Müşteri Notu" in body
    assert "Hayır" in body


def test_build_message_with_inline_logo():
    message = build_message(
        "anna@example.com", "Subject", "<p>Hi</p>", logo=b"\x89PNG",
    )

    assert message["To"] == "anna@example.com"
    assert message["Message-ID"]
    assert message.get_body(("html",)).get_content().strip() == "<p>Hi</p>"


@pytest.mark.asyncio
async def test_customer_confirmation_skipped_without_email(smtp, mailer):
    assert await mailer.send_customer_confirmation(reservation(customer_email="")) is False
    assert smtp.sent == []


@pytest.mark.asyncio
async def test_customer_confirmation_attaches_localised_document(smtp, mailer):
    assert await mailer.send_customer_confirmation(reservation()) is True

    message, kwargs = smtp.sent[0]
    assert message["To"] == "anna@example.com"
    assert message["Subject"] == f"Reservierungsbestätigung - #7 | {settings.brand_name}"
    assert _attachment_names(message) == ["Rezervasyon_7_de.pdf"]
    assert kwargs["hostname"] == settings.smtp_host


@pytest.mark.asyncio
async def test_customer_confirmation_smtp_failure_raises(monkeypatch, mailer):
    monkeypatch.setattr(aiosmtplib, "send", FakeSMTP(fail_for={"anna@example.com"}).send)

    with pytest.raises(NotificationError):
        await mailer.send_customer_confirmation(reservation())


@pytest.mark.asyncio
async def test_admin_alert_attaches_turkish_and_customer_language(smtp, mailer, monkeypatch):
    monkeypatch.setattr(settings, "admin_emails", ["ops@example.com", "owner@example.com"])

    delivered = await mailer.send_admin_alert(reservation())

    assert delivered == 2
    assert [m["To"] for m, _ in smtp.sent] == ["ops@example.com", "owner@example.com"]
    assert smtp.sent[0][0]["Subject"] == "Yeni Rezervasyon - #7 | Anna Schmidt"
    assert _attachment_names(smtp.sent[0][0]) == ["Rezervasyon_7_tr.pdf", "Rezervasyon_7_de.pdf"]


@pytest.mark.asyncio
async def test_admin_alert_turkish_customer_gets_one_document(smtp, mailer, monkeypatch):
    monkeypatch.setattr(settings, "admin_emails", ["ops@example.com"])

    await mailer.send_admin_alert(reservation(language="tr"))

    assert _attachment_names(smtp.sent[0][0]) == ["Rezervasyon_7_tr.pdf"]


@pytest.mark.asyncio
async def test_admin_alert_without_recipients_raises(smtp, mailer, monkeypatch):
    monkeypatch.setattr(settings, "admin_emails", [])

    with pytest.raises(NotificationError, match="No admin email recipients"):
        await mailer.send_admin_alert(reservation())


@pytest.mark.asyncio
async def test_admin_alert_partial_failure_still_delivers_others(mailer, monkeypatch):
    fake = FakeSMTP(fail_for={"ops@example.com"})
    monkeypatch.setattr(aiosmtplib, "send", fake.send)
    monkeypatch.setattr(settings, "admin_emails", ["ops@example.com", "owner@example.com"])

    with pytest.raises(NotificationError, match="ops@example.com"):
        await mailer.send_admin_alert(reservation())

    assert [m["To"] for m, _ in fake.sent] == ["owner@example.com"]


class ThreadRecordingDocument(ItineraryDocument):
    def __init__(self):
        super().__init__(font_path="")
        self.threads = []

    def render(self, reservation, lang=None):
        self.threads.append(threading.get_ident())
        return super().render(reservation, lang)


@pytest.mark.asyncio
async def test_documents_render_outside_event_loop_thread(monkeypatch, smtp):
    monkeypatch.setattr(settings, "admin_emails", ["ops@example.com"])
    documents = ThreadRecordingDocument()
    mailer = ReservationMailer(documents=documents)

    await mailer.send_customer_confirmation(reservation())
    await mailer.send_admin_alert(reservation())

    assert len(documents.threads) == 3
    assert threading.get_ident() not in documents.threads
