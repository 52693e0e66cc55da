"""Unit tests for itinerary documents and labels."""

import io
from datetime import date, datetime

import pytest
from pypdf import PdfReader

from vip_transfer.core.config import settings
from vip_transfer.notifications.documents import (
    ItineraryDocument,
    build_sections,
    document_filename,
    format_price,
)
from vip_transfer.notifications.labels import (
    LABELS,
    admin_subject,
    currency_symbol,
    customer_subject,
    document_language,
)
from vip_transfer.notifications.whatsapp import build_caption
from vip_transfer.schemas.reservation import Reservation


def make_reservation(**overrides) -> Reservation:
    values = {
        "id": 42,
        "customer_name": "John Smith",
        "customer_phone": "+44 7700 900123",
        "customer_email": "john@example.com",
        "pickup_location": "Antalya Airport",
        "dropoff_location": "Kemer Marina",
        "transfer_date": date(2026, 6, 2),
        "transfer_time": "10:30",
        "flight_number": "BA 680",
        "passenger_count": 2,
        "number_of_adults": 2,
        "number_of_children": 0,
        "child_seat_count": 0,
        "luggage_count": 2,
        "language": "en",
        "vehicle_id": 1,
        "vehicle_name": "Mercedes Vito VIP",
        "estimated_price": 45.9,
        "currency": "EUR",
        "status": "Pending",
        "created_at": datetime(2026, 6, 1, 9, 0),
    }
    values.update(overrides)
    return Reservation(**values)


def _pdf_text(content: bytes) -> tuple[int, str]:
    reader = PdfReader(io.BytesIO(content))
    return len(reader.pages), "\n".join(page.extract_text() for page in reader.pages)


def test_label_dictionaries_share_keys():
    keys = set(LABELS["tr"])
    assert all(set(labels) == keys for labels in LABELS.values())


@pytest.mark.parametrize("lang,expected", [
    ("en", "en"), ("DE", "de"), ("ru", "ru"), ("tr", "tr"), ("fr", "tr"), (None, "tr"),
])
def test_document_language_falls_back_to_turkish(lang, expected):
    assert document_language(lang) == expected


@pytest.mark.parametrize("currency,symbol", [
    ("USD", "$"), ("try", "₺"), ("GBP", "£"), ("EUR", "€"), ("CHF", "€"), (None, "€"),
])
def test_currency_symbol(currency, symbol):
    assert currency_symbol(currency) == symbol


def test_price_is_floored():
    assert format_price(45.9, "EUR") == "45 €"
    assert format_price(1799.99, "TRY") == "1799 ₺"


def test_subjects():
    assert customer_subject(42, "de", "Imperial") == "Reservierungsbestätigung - #42 | Imperial"
    assert customer_subject(42, "xx", "Imperial") == "Rezervasyon Onayı - #42 | Imperial"
    assert admin_subject(42, "John Smith") == "Yeni Rezervasyon - #42 | John Smith"


def test_document_filename_uses_document_language():
    assert document_filename(42, "EN") == "Rezervasyon_42_en.pdf"
    assert document_filename(42, "fr") == "Rezervasyon_42_tr.pdf"


def test_one_way_has_single_section():
    sections = build_sections(make_reservation(), "en")

    assert len(sections) == 1
    assert sections[0].heading == "Arrival Information"
    assert sections[0].contact_phone == settings.contact_phone
    rows = dict(sections[0].rows)
    assert rows["Price"] == "45 €"
    assert rows["Arrival Date"] == "02.06.2026 10:30"
    assert rows["Hotel Name"] == "-"


def test_return_leg_requires_flag_and_date():
    assert len(build_sections(make_reservation(is_return_transfer=True), "en")) == 1

    sections = build_sections(
        make_reservation(is_return_transfer=True, return_transfer_date=date(2026, 6, 9), return_transfer_time="18:00"),
        "en",
    )
    assert len(sections) == 2
    assert sections[0].contact_phone == settings.return_contact_phone
    assert dict(sections[1].rows)["Return Date"] == "09.06.2026 18:00"


def test_passenger_names_include_additional_passengers():
    sections = build_sections(make_reservation(additional_passenger_names="Jane Smith"), "en")

    assert dict(sections[0].rows)["Passengers"] == "John Smith, Jane Smith"


def test_render_one_way_document():
    pages, text = _pdf_text(ItineraryDocument(font_path="").render(make_reservation(), "en"))

    assert pages == 1
    assert "Arrival Information" in text
    assert "John Smith" in text
    assert "-- 1 of 1 --" in text


def test_render_round_trip_document():
    reservation = make_reservation(is_return_transfer=True, return_transfer_date=date(2026, 6, 9))

    pages, text = _pdf_text(ItineraryDocument(font_path="").render(reservation, "en"))

    assert pages == 2
    assert "Return Information" in text
    assert "-- 2 of 2 --" in text


def test_render_with_missing_font_file_falls_back(tmp_path):
    content = ItineraryDocument(font_path=str(tmp_path / "missing.ttf")).render(make_reservation(), "ru")

    assert content.startswith(b"%PDF")


def test_caption():
    caption = build_caption(make_reservation())

    assert caption.splitlines()[0] == "🚗 Yeni Rezervasyon #42"
    assert "📍 Antalya Airport → Kemer Marina" in caption
    assert "🔄 Tek Yön" in caption
    assert "💰 45 €" in caption
    assert caption.splitlines()[-1] == "🚙 Mercedes Vito VIP"


def test_caption_without_price_or_vehicle():
    caption = build_caption(make_reservation(estimated_price=0, vehicle_name=None))

    assert "💰 -" in caption
    assert "🚙" not in caption
