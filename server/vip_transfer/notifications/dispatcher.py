"""Best-effort fan-out of reservation notifications."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Optional

from ..core.config import settings
from ..core.observability import get_logger, metrics_collector
from ..schemas.reservation import Reservation
from .base import Channel, ChannelResult, Outcome
from .log import NotificationLog
from .mailer import ReservationMailer
from .whatsapp import WhatsAppClient

logger = get_logger(__name__)


class NotificationDispatcher:
    """
    Runs every notification channel for a reservation event.

    Channels run concurrently, each inside its own error boundary and
    timeout. Nothing a channel does can raise out of the dispatcher.
    """

    def __init__(
        self,
        mailer: Optional[ReservationMailer] = None,
        whatsapp: Optional[WhatsAppClient] = None,
        notification_log: Optional[NotificationLog] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.mailer = mailer or ReservationMailer()
        self.whatsapp = whatsapp or WhatsAppClient()
        self.notification_log = notification_log or NotificationLog()
        self.timeout_seconds = timeout_seconds or settings.notification_timeout_seconds

    async def notify_created(self, reservation: Reservation) -> list[ChannelResult]:
        """
        Customer email, admin email and WhatsApp for a new reservation.

        Returns:
            One result per channel, in that order
        """
        await asyncio.to_thread(
            self.notification_log.write,
            f"[RESERVATION] #{reservation.id} created for {reservation.customer_name}",
        )
        results = await asyncio.gather(
            self._run(Channel.CUSTOMER_EMAIL, reservation, self.mailer.send_customer_confirmation),
            self._run(Channel.ADMIN_EMAIL, reservation, self.mailer.send_admin_alert),
            self._run(Channel.WHATSAPP, reservation, self.whatsapp.send_reservation_documents),
        )
        return list(results)

    async def notify_confirmed(self, reservation: Reservation) -> ChannelResult:
        """Re-send the customer confirmation after an admin confirms the booking."""
        return await self._run(
            Channel.CUSTOMER_EMAIL, reservation, self.mailer.send_customer_confirmation
        )

    async def _run(
        self,
        channel: Channel,
        reservation: Reservation,
        send: Callable[[Reservation], Awaitable[object]],
    ) -> ChannelResult:
        try:
            delivered = await asyncio.wait_for(send(reservation), timeout=self.timeout_seconds)
            outcome = Outcome.SENT if delivered else Outcome.SKIPPED
            result = ChannelResult(channel, outcome)
        except asyncio.TimeoutError:
            result = ChannelResult(
                channel, Outcome.TIMEOUT, f"timed out after {self.timeout_seconds:g}s"
            )
        except Exception as e:
            result = ChannelResult(channel, Outcome.FAILED, str(e))

        await self._record(reservation, result)
        return result

    async def _record(self, reservation: Reservation, result: ChannelResult) -> None:
        metrics_collector.record_notification(result.channel.value, result.outcome.value)

        if result.ok:
            logger.info(
                "notification_delivered",
                reservation_id=reservation.id,
                channel=result.channel.value,
                outcome=result.outcome.value,
            )
        else:
            logger.error(
                "notification_failed",
                reservation_id=reservation.id,
                channel=result.channel.value,
                outcome=result.outcome.value,
                error=result.detail,
            )

        line = f"[{result.channel.value.upper()}] Reservation #{reservation.id}: {result.outcome.value}"
        if result.detail:
            line += f" | {result.detail}"
        await asyncio.to_thread(self.notification_log.write, line)
