"""Itinerary PDF documents."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fpdf import FPDF

from ..core.clock import utcnow
from ..core.config import settings
from ..schemas.reservation import Reservation
from .labels import currency_symbol, document_language, labels_for

logger = logging.getLogger(__name__)

DOCUMENT_HEADER = "İmperial VİP Turizm"
FONT_FAMILY = "ItineraryFont"
FALLBACK_FONT = "helvetica"
MISSING = "-"


@dataclass(frozen=True)
class ItinerarySection:
    """One page of the document: a heading and its label/value rows."""

    heading: str
    rows: tuple[tuple[str, str], ...]
    contact_phone: str


def _text(value: Optional[str]) -> str:
    value = (value or "").strip()
    return value or MISSING


def format_price(amount: float, currency: Optional[str]) -> str:
    """Price truncated to whole units followed by the currency symbol."""
    return f"{int(amount or 0)} {currency_symbol(currency)}"


def format_arrival(reservation: Reservation) -> str:
    day = reservation.transfer_date.strftime("%d.%m.%Y") if reservation.transfer_date else MISSING
    return f"{day} {reservation.transfer_time or ''}".strip()


def format_return(reservation: Reservation) -> str:
    if not reservation.return_transfer_date:
        return MISSING
    text = reservation.return_transfer_date.strftime("%d.%m.%Y")
    if reservation.return_transfer_time:
        text += f" {reservation.return_transfer_time}"
    return text


def has_return_leg(reservation: Reservation) -> bool:
    return reservation.is_return_transfer and reservation.return_transfer_date is not None


def passengers_text(reservation: Reservation) -> str:
    if reservation.additional_passenger_names:
        return f"{reservation.customer_name}, {reservation.additional_passenger_names}"
    return reservation.customer_name


def build_sections(reservation: Reservation, lang: Optional[str]) -> list[ItinerarySection]:
    """
    Lay out the document content for one language.

    The outbound page is always present; the return page only when the
    reservation is a round trip with a return date.
    """
    labels = labels_for(lang)
    round_trip = has_return_leg(reservation)
    outbound_phone = settings.return_contact_phone if round_trip else settings.contact_phone

    sections = [
        ItinerarySection(
            heading=labels["ArrivalInfo"],
            rows=(
                (labels["FullName"], reservation.customer_name),
                (labels["Phone"], reservation.customer_phone),
                (labels["Email"], _text(reservation.customer_email)),
                (labels["PickupPoint"], reservation.pickup_location),
                (labels["DropoffPoint"], reservation.dropoff_location),
                (labels["ArrivalDate"], format_arrival(reservation)),
                (labels["ArrivalFlight"], _text(reservation.flight_number)),
                (labels["Airline"], _text(reservation.airline_company)),
                (labels["HotelName"], _text(reservation.hotel_name)),
                (labels["Passengers"], passengers_text(reservation)),
                (labels["VehicleType"], _text(reservation.vehicle_name)),
                (labels["Price"], format_price(reservation.estimated_price, reservation.currency)),
                (labels["Adults"], str(reservation.number_of_adults)),
                (labels["Children"], str(reservation.number_of_children)),
                (labels["ChildSeats"], str(reservation.child_seat_count)),
                (labels["SpecialNote"], _text(reservation.notes)),
            ),
            contact_phone=outbound_phone,
        )
    ]

    if round_trip:
        sections.append(
            ItinerarySection(
                heading=labels["ReturnInfo"],
                rows=(
                    (labels["ReturnDate"], format_return(reservation)),
                    (labels["ReturnFlight"], _text(reservation.return_flight_number)),
                    (labels["PickupTime"], _text(reservation.return_transfer_time)),
                ),
                contact_phone=settings.return_contact_phone,
            )
        )
    return sections


def document_filename(reservation_id: int, lang: Optional[str]) -> str:
    return f"Rezervasyon_{reservation_id}_{document_language(lang)}.pdf"


class ItineraryDocument:
    """
    Renders an itinerary into A4 PDF bytes with fpdf2.

    A Unicode TTF font is used when the configured file exists. Otherwise
    the built-in Helvetica is used and characters it cannot encode are
    replaced.
    """

    def __init__(self, font_path: Optional[str] = None):
        self.font_path = font_path if font_path is not None else settings.document_font_path

    def _new_pdf(self) -> tuple[FPDF, str, bool]:
        pdf = FPDF(orientation="P", unit="mm", format="A4")
        pdf.set_auto_page_break(auto=True, margin=15)
        if self.font_path and Path(self.font_path).is_file():
            pdf.add_font(FONT_FAMILY, "", self.font_path)
            pdf.add_font(FONT_FAMILY, "B", self.font_path)
            return pdf, FONT_FAMILY, True

        logger.warning(
            "Document font not found, falling back to core font",
            extra={"font_path": self.font_path}
        )
        return pdf, FALLBACK_FONT, False

    def render(self, reservation: Reservation, lang: Optional[str] = None) -> bytes:
        """
        Render the itinerary.

        Args:
            reservation: Reservation snapshot including the vehicle name
            lang: tr, en, de or ru; anything else renders Turkish

        Returns:
            PDF file contents
        """
        sections = build_sections(reservation, lang)
        pdf, family, unicode_font = self._new_pdf()

        def clean(text: str) -> str:
            if unicode_font:
                return text
            return text.encode("latin-1", "replace").decode("latin-1")

        year = (reservation.created_at or utcnow()).year
        total = len(sections)

        for number, section in enumerate(sections, start=1):
            pdf.add_page()

            pdf.set_fill_color(0, 0, 0)
            pdf.set_text_color(255, 255, 255)
            pdf.set_font(family, "B", 22)
            pdf.cell(0, 20, clean(DOCUMENT_HEADER), align="C", fill=True, new_x="LMARGIN", new_y="NEXT")

            pdf.set_text_color(0, 0, 0)
            pdf.ln(8)
            pdf.set_font(family, "B", 14)
            pdf.cell(0, 8, clean(section.heading), new_x="LMARGIN", new_y="NEXT")
            pdf.ln(4)

            label_width = (pdf.w - pdf.l_margin - pdf.r_margin) / 3
            for label, value in section.rows:
                pdf.set_font(family, "B", 11)
                pdf.cell(label_width, 7, clean(label))
                pdf.set_font(family, "", 11)
                pdf.multi_cell(0, 7, clean(value), align="R", new_x="LMARGIN", new_y="NEXT")

            pdf.ln(8)
            pdf.set_font(family, "", 11)
            pdf.cell(0, 6, clean(f"{settings.brand_name} - {year}"), new_x="LMARGIN", new_y="NEXT")
            pdf.set_font(family, "", 10)
            pdf.cell(
                0, 6,
                clean(f"{settings.contact_email} • {section.contact_phone}"),
                new_x="LMARGIN", new_y="NEXT",
            )
            pdf.ln(4)
            pdf.set_text_color(128, 128, 128)
            pdf.cell(0, 6, f"-- {number} of {total} --", align="C", new_x="LMARGIN", new_y="NEXT")

        return bytes(pdf.output())


def render_itinerary(reservation: Reservation, lang: Optional[str] = None) -> bytes:
    return ItineraryDocument().render(reservation, lang)
