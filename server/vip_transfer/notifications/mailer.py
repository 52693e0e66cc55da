"""Reservation emails sent over SMTP with aiosmtplib."""

import asyncio
import html
import logging
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from pathlib import Path
from typing import Optional, Sequence

import aiosmtplib

from ..core.config import settings
from ..schemas.reservation import Reservation
from .base import Attachment, NotificationError
from .documents import ItineraryDocument, build_sections, document_filename, has_return_leg
from .labels import admin_subject, customer_subject, document_language

logger = logging.getLogger(__name__)

LOGO_CID = "imperial_logo"

TEMPLATES = {
    "customer": (
        "<!DOCTYPE html>\n"
        "<html><head><meta charset='utf-8'></head>\n"
        "<body style='margin:0;padding:0;background:#f4f4f4;font-family:Arial,Helvetica,sans-serif;'>\n"
        "<table width='100%' cellpadding='0' cellspacing='0' border='0' "
        "style='max-width:600px;margin:0 auto;background:#ffffff;'>\n"
        "<tr><td style='background:#1B1B3A;padding:18px 30px;text-align:center;'>{logo}</td></tr>\n"
        "{sections}"
        "<tr><td style='background:#1B1B3A;padding:16px 30px;text-align:center;'>\n"
        "<p style='color:#ffffff;font-size:12px;margin:0;'>{brand} - {year}</p>\n"
        "<p style='color:#ffffff;font-size:11px;margin:4px 0 0 0;'>{contact_email} &bull; {contact_phone}</p>\n"
        "</td></tr>\n"
        "</table>\n"
        "</body></html>"
    ),
    "section": (
        "<tr><td style='padding:24px 30px 0 30px;'>\n"
        "<p style='font-size:16px;font-weight:bold;margin:0 0 12px 0;color:#000;'>{heading}</p>\n"
        "<table width='100%' cellpadding='0' cellspacing='0' border='0'>\n{rows}</table>\n"
        "</td></tr>\n"
    ),
    "row": (
        "<tr><td style='padding:7px 0;font-size:13px;font-weight:bold;border-bottom:1px solid #eee;width:40%;'>"
        "{label}</td><td style='padding:7px 0;font-size:13px;border-bottom:1px solid #eee;'>{value}</td></tr>\n"
    ),
    "admin": (
        "<!DOCTYPE html>\n"
        "<html><head><meta charset='utf-8'></head>\n"
        "<body style='font-family:Arial,sans-serif;color:#333;max-width:600px;margin:0 auto;padding:20px;'>\n"
        "<div style='background:#0f172a;padding:24px;text-align:center;'>\n"
        "<h1 style='color:#d4af37;margin:0;font-size:24px;'>YENİ REZERVASYON</h1>\n"
        "<p style='color:#94a3b8;margin:8px 0 0 0;'>Rezervasyon No: #{id}</p>\n"
        "</div>\n"
        "<table style='width:100%;border-collapse:collapse;margin:20px 0;'>\n{rows}</table>\n"
        "{notes}"
        "<p style='text-align:center;'><a href='https://wa.me/{whatsapp}' "
        "style='background:#25d366;color:white;padding:15px 30px;text-decoration:none;'>"
        "WhatsApp ile İletişime Geç</a></p>\n"
        "<p style='color:#94a3b8;font-size:12px;text-align:center;'>Oluşturulma: {created} | {brand}</p>\n"
        "</body></html>"
    ),
    "admin_notes": (
        "<div style='background:#fef9e7;padding:15px;border-left:4px solid #d4af37;'>"
        "<strong>Müşteri Notu:</strong><br><span>{notes}</span></div>\n"
    ),
}


def _esc(value) -> str:
    return html.escape(str(value if value is not None else ""))


def render_customer_html(reservation: Reservation, lang: Optional[str], with_logo: bool = False) -> str:
    """Customer confirmation body, built from the same rows as the itinerary document."""
    sections = build_sections(reservation, lang)
    parts = []
    for section in sections:
        rows = "".join(
            TEMPLATES["row"].format(label=_esc(label), value=_esc(value))
            for label, value in section.rows
        )
        parts.append(TEMPLATES["section"].format(heading=_esc(section.heading), rows=rows))

    logo = (
        f"<img src='cid:{LOGO_CID}' alt='{_esc(settings.brand_name)}' height='50' />"
        if with_logo
        else f"<span style='color:#ffffff;font-size:20px;'>{_esc(settings.brand_name)}</span>"
    )
    year = reservation.created_at.year if reservation.created_at else ""
    return TEMPLATES["customer"].format(
        logo=logo,
        sections="".join(parts),
        brand=_esc(settings.brand_name),
        year=year,
        contact_email=_esc(settings.contact_email),
        contact_phone=_esc(sections[0].contact_phone),
    )


def render_admin_html(reservation: Reservation) -> str:
    fields = (
        ("Ad Soyad", reservation.customer_name),
        ("Telefon", reservation.customer_phone),
        ("E-posta", reservation.customer_email or "Belirtilmedi"),
        ("Tarih & Saat", f"{reservation.transfer_date.strftime('%d.%m.%Y') if reservation.transfer_date else '-'}"
                         f" - {reservation.transfer_time or ''}"),
        ("Alınacak Nokta", f"{reservation.pickup_location} {reservation.pickup_location_detail}".strip()),
        ("Bırakılacak Nokta", f"{reservation.dropoff_location} {reservation.dropoff_location_detail}".strip()),
        ("Uçuş Kodu", reservation.flight_number or "Belirtilmedi"),
        ("Tercih Edilen Araç", reservation.vehicle_name or "Belirtilmedi"),
        ("Yolcu Sayısı", f"{reservation.passenger_count} kişi"),
        ("Bagaj Sayısı", f"{reservation.luggage_count} adet"),
        ("Gidiş-Dönüş", "Evet" if has_return_leg(reservation) else "Hayır"),
    )
    rows = "".join(TEMPLATES["row"].format(label=_esc(k), value=_esc(v)) for k, v in fields)
    notes = TEMPLATES["admin_notes"].format(notes=_esc(reservation.notes)) if reservation.notes else ""
    created = reservation.created_at.strftime("%d.%m.%Y %H:%M") if reservation.created_at else "-"
    return TEMPLATES["admin"].format(
        id=reservation.id,
        rows=rows,
        notes=notes,
        whatsapp=_esc(reservation.customer_phone.replace(" ", "").replace("+", "")),
        created=created,
        brand=_esc(settings.brand_name),
    )


def build_message(
    to: str,
    subject: str,
    html_body: str,
    attachments: Sequence[Attachment] = (),
    logo: Optional[bytes] = None,
) -> EmailMessage:
    """
    Assemble a MIME message with an HTML body, optional inline logo and attachments.
    """
    message = EmailMessage()
    message["From"] = formataddr((settings.sender_name, settings.sender_email))
    message["To"] = to
    message["Subject"] = subject
    message["Message-ID"] = make_msgid(domain=settings.sender_email.partition("@")[2] or None)

    message.set_content("This message requires an HTML capable mail client.")
    message.add_alternative(html_body, subtype="html")
    if logo:
        html_part = message.get_payload()[1]
        html_part.add_related(logo, maintype="image", subtype="png", cid=f"<{LOGO_CID}>")

    for attachment in attachments:
        maintype, _, subtype = attachment.mime_type.partition("/")
        message.add_attachment(
            attachment.content,
            maintype=maintype,
            subtype=subtype,
            filename=attachment.filename,
        )
    return message


class ReservationMailer:
    """Sends the customer confirmation and the admin alert."""

    def __init__(self, documents: Optional[ItineraryDocument] = None):
        self.documents = documents or ItineraryDocument()

    def load_logo(self) -> Optional[bytes]:
        path = settings.brand_logo_path
        if path and Path(path).is_file():
            return Path(path).read_bytes()
        return None

    async def deliver(self, message: EmailMessage) -> None:
        """
        Hand one message to the SMTP server.

        Raises:
            NotificationError: If the server rejects it or cannot be reached
        """
        try:
            await aiosmtplib.send(
                message,
                hostname=settings.smtp_host,
                port=settings.smtp_port,
                username=settings.smtp_username or None,
                password=settings.smtp_password or None,
                start_tls=settings.smtp_start_tls,
                timeout=settings.notification_timeout_seconds,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            raise NotificationError(f"SMTP delivery to {message['To']} failed: {e}") from e

    async def _attachment(self, reservation: Reservation, lang: str) -> Attachment:
        return Attachment(
            filename=document_filename(reservation.id, lang),
            content=await asyncio.to_thread(self.documents.render, reservation, lang),
        )

    async def send_customer_confirmation(self, reservation: Reservation) -> bool:
        """
        Email the customer in their language with the itinerary attached.

        Returns:
            False when the reservation has no customer email, True once sent

        Raises:
            NotificationError: If delivery fails
        """
        if not reservation.customer_email:
            logger.info(
                "Customer email is empty, skipping confirmation",
                extra={"reservation_id": reservation.id}
            )
            return False

        lang = reservation.language
        attachments: list[Attachment] = []
        try:
            attachments.append(await self._attachment(reservation, lang))
        except Exception as e:
            logger.error(
                "Itinerary rendering failed, sending confirmation without attachment",
                extra={"reservation_id": reservation.id, "error": str(e)}
            )

        logo = self.load_logo()
        message = build_message(
            to=reservation.customer_email,
            subject=customer_subject(reservation.id, lang, settings.brand_name),
            html_body=render_customer_html(reservation, lang, with_logo=logo is not None),
            attachments=attachments,
            logo=logo,
        )
        await self.deliver(message)

        logger.info(
            "Customer confirmation sent",
            extra={"reservation_id": reservation.id, "language": document_language(lang)}
        )
        return True

    async def send_admin_alert(self, reservation: Reservation) -> int:
        """
        Email every admin recipient with the Turkish itinerary and, when the
        customer's language differs, a copy in that language too.

        Returns:
            Number of recipients the alert was delivered to

        Raises:
            NotificationError: If no recipient is configured or any delivery fails
        """
        recipients = [address for address in settings.admin_emails if address]
        if not recipients:
            raise NotificationError("No admin email recipients configured")

        attachments: list[Attachment] = []
        try:
            attachments.append(await self._attachment(reservation, "tr"))
            if document_language(reservation.language) != "tr":
                attachments.append(await self._attachment(reservation, reservation.language))
        except Exception as e:
            logger.error(
                "Itinerary rendering failed for admin alert",
                extra={"reservation_id": reservation.id, "error": str(e)}
            )

        subject = admin_subject(reservation.id, reservation.customer_name)
        body = render_admin_html(reservation)
        logo = self.load_logo()

        failures = []
        delivered = 0
        for recipient in recipients:
            try:
                await self.deliver(build_message(recipient, subject, body, attachments, logo))
                delivered += 1
            except NotificationError as e:
                failures.append(str(e))
                logger.error(
                    "Admin alert delivery failed",
                    extra={"reservation_id": reservation.id, "recipient": recipient, "error": str(e)}
                )

        if failures:
            raise NotificationError("; ".join(failures))
        return delivered
