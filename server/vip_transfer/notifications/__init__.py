"""Reservation notifications: itinerary documents, email and WhatsApp."""

from .base import Attachment, Channel, ChannelResult, NotificationError, Outcome
from .dispatcher import NotificationDispatcher
from .documents import ItineraryDocument, render_itinerary
from .log import NotificationLog
from .mailer import ReservationMailer
from .whatsapp import WhatsAppClient

__all__ = [
    "Attachment",
    "Channel",
    "ChannelResult",
    "ItineraryDocument",
    "NotificationDispatcher",
    "NotificationError",
    "NotificationLog",
    "Outcome",
    "ReservationMailer",
    "WhatsAppClient",
    "render_itinerary",
]
