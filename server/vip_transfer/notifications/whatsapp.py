"""WhatsApp Cloud API document channel."""

import asyncio
import logging
from typing import Optional

import httpx

from ..core.config import settings
from ..schemas.reservation import Reservation
from .base import NotificationError
from .documents import ItineraryDocument, document_filename, format_price, has_return_leg
from .labels import document_language

logger = logging.getLogger(__name__)


def build_caption(reservation: Reservation) -> str:
    """Short Turkish summary sent with the first document."""
    trip = "Gidiş-Dönüş" if has_return_leg(reservation) else "Tek Yön"
    day = reservation.transfer_date.strftime("%d.%m.%Y") if reservation.transfer_date else "-"
    price = (
        format_price(reservation.estimated_price, reservation.currency)
        if reservation.estimated_price > 0
        else "-"
    )

    lines = [
        f"🚗 Yeni Rezervasyon #{reservation.id}",
        f"👤 {reservation.customer_name}",
        f"📞 {reservation.customer_phone}",
        f"📍 {reservation.pickup_location} → {reservation.dropoff_location}",
        f"📅 {day} {reservation.transfer_time or ''}".rstrip(),
        f"🔄 {trip}",
        f"💰 {price}",
    ]
    if reservation.vehicle_name and reservation.vehicle_name.strip():
        lines.append(f"🚙 {reservation.vehicle_name}")
    return "\n".join(lines)


class WhatsAppClient:
    """
    Uploads itinerary PDFs as media and sends them as document messages.

    Pass ``http_client`` to reuse a pooled client or inject a transport in
    tests; otherwise one client is opened per send.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        documents: Optional[ItineraryDocument] = None,
    ):
        self.http_client = http_client
        self.documents = documents or ItineraryDocument()

    @property
    def enabled(self) -> bool:
        return settings.whatsapp_enabled

    @property
    def configured(self) -> bool:
        return settings.whatsapp_configured

    def _url(self, resource: str) -> str:
        return (
            f"{settings.whatsapp_base_url.rstrip('/')}/{settings.whatsapp_api_version}"
            f"/{settings.whatsapp_phone_number_id}/{resource}"
        )

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {settings.whatsapp_access_token}"}

    async def upload_media(self, client: httpx.AsyncClient, content: bytes, filename: str) -> str:
        response = await client.post(
            self._url("media"),
            headers=self._headers(),
            data={"type": "application/pdf", "messaging_product": "whatsapp"},
            files={"file": (filename, content, "application/pdf")},
        )
        if response.is_error:
            raise NotificationError(
                f"WhatsApp media upload failed: {response.status_code} {response.text}"
            )
        media_id = response.json().get("id")
        if not media_id:
            raise NotificationError(f"WhatsApp media upload returned no id: {response.text}")
        return media_id

    async def send_document(
        self, client: httpx.AsyncClient, media_id: str, filename: str, caption: str
    ) -> None:
        response = await client.post(
            self._url("messages"),
            headers=self._headers(),
            json={
                "messaging_product": "whatsapp",
                "to": settings.whatsapp_recipient_phone,
                "type": "document",
                "document": {"id": media_id, "filename": filename, "caption": caption},
            },
        )
        if response.is_error:
            raise NotificationError(
                f"WhatsApp message send failed: {response.status_code} {response.text}"
            )

    async def send_reservation_documents(self, reservation: Reservation) -> bool:
        """
        Send the Turkish itinerary and, when the customer's language differs,
        a second copy in that language.

        Returns:
            False when the channel is disabled or not configured, True once sent

        Raises:
            NotificationError: If an upload or a message fails
        """
        if not self.enabled:
            logger.info("WhatsApp channel disabled", extra={"reservation_id": reservation.id})
            return False
        if not self.configured:
            logger.warning(
                "WhatsApp credentials incomplete",
                extra={"reservation_id": reservation.id}
            )
            return False

        lang = document_language(reservation.language)
        documents = [("tr", build_caption(reservation))]
        if lang != "tr":
            documents.append((lang, f"📄 {lang.upper()} - Reservation #{reservation.id}"))

        client = self.http_client or httpx.AsyncClient(timeout=settings.notification_timeout_seconds)
        try:
            for doc_lang, caption in documents:
                filename = document_filename(reservation.id, doc_lang)
                content = await asyncio.to_thread(self.documents.render, reservation, doc_lang)
                try:
                    media_id = await self.upload_media(client, content, filename)
                    await self.send_document(client, media_id, filename, caption)
                except httpx.HTTPError as e:
                    raise NotificationError(f"WhatsApp request failed: {e}") from e
                logger.info(
                    "WhatsApp document sent",
                    extra={"reservation_id": reservation.id, "language": doc_lang}
                )
        finally:
            if self.http_client is None:
                await client.aclose()

        return True
