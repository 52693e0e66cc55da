"""Unit tests for the reservation lifecycle."""

from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import select, update

from vip_transfer.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from vip_transfer.models import Reservation
from vip_transfer.schemas.reservation import (
    CreateReservationRequest,
    ReservationSource,
    ReservationStatus,
)
from vip_transfer.services.rate_service import RateService
from vip_transfer.services.reservation_service import (
    ReservationService,
    derive_passenger_count,
    is_out_of_range_time,
    parse_transfer_time,
    violates_lead_time,
)

TODAY = date(2026, 6, 1)
NOW_LOCAL = datetime(2026, 6, 1, 12, 0)


def _service(test_session, cache, clock, dispatcher):
    return ReservationService(test_session, cache, dispatcher=dispatcher, clock=clock)


@pytest.mark.parametrize("adults,children,expected", [
    (None, None, 1),
    (2, None, 2),
    (None, 2, 3),
    (0, 0, 1),
    (3, 2, 5),
])
def test_derive_passenger_count(adults, children, expected):
    assert derive_passenger_count(adults, children) == expected


@pytest.mark.parametrize("value,expected", [
    ("14:30", (14, 30)),
    (" 09:05 ", (9, 5)),
    ("14:30:00", (14, 30)),
    ("", None),
    (None, None),
    ("noon", None),
    ("14", None),
    ("ab:cd", None),
    ("24:00", None),
    ("14:60", None),
    ("99999999:0", None),
])
def test_parse_transfer_time(value, expected):
    assert parse_transfer_time(value) == expected


def test_lead_time_boundary():
    assert violates_lead_time(TODAY, "12:59", NOW_LOCAL, 60)
    assert not violates_lead_time(TODAY, "13:00", NOW_LOCAL, 60)
    assert not violates_lead_time(TODAY + timedelta(days=1), "08:00", NOW_LOCAL, 60)


def test_lead_time_missing_date_means_today():
    assert violates_lead_time(None, "12:30", NOW_LOCAL, 60)
    assert not violates_lead_time(None, "15:00", NOW_LOCAL, 60)


def test_lead_time_skipped_without_parseable_time():
    assert not violates_lead_time(TODAY, None, NOW_LOCAL, 60)
    assert not violates_lead_time(TODAY, "soon", NOW_LOCAL, 60)


def test_out_of_range_time_is_flagged():
    assert is_out_of_range_time("99999999:0")
    assert is_out_of_range_time("23:60")
    assert not is_out_of_range_time("23:59")
    assert not is_out_of_range_time("soon")
    assert not is_out_of_range_time(None)
    assert not violates_lead_time(TODAY, "99999999:0", NOW_LOCAL, 60)


@pytest.mark.asyncio
async def test_create_reservation_applies_defaults(test_session, cache, clock, dispatcher, sample_reservation_data):
    service = _service(test_session, cache, clock, dispatcher)
    request = CreateReservationRequest(**sample_reservation_data)

    reservation = await service.create_reservation(request)

    assert reservation.id is not None
    assert reservation.status == ReservationStatus.PENDING
    assert reservation.passenger_count == 3
    assert reservation.child_seat_count == 0
    assert reservation.language == "de"
    assert reservation.currency == "EUR"
    assert reservation.vehicle_name == "Mercedes Vito VIP"
    assert reservation.pickup_location_detail == ""
    assert reservation.notes == ""
    assert reservation.created_at == clock.now_utc()
    assert dispatcher.created == [reservation]


@pytest.mark.asyncio
async def test_create_reservation_collects_missing_fields(test_session, cache, clock, dispatcher):
    service = _service(test_session, cache, clock, dispatcher)
    request = CreateReservationRequest(customer_name="  ", pickup_location="Antalya Airport")

    with pytest.raises(ValidationError) as exc_info:
        await service.create_reservation(request)

    assert set(exc_info.value.errors) == {"customer_name", "customer_phone", "dropoff_location", "vehicle_id"}
    assert dispatcher.created == []


@pytest.mark.asyncio
async def test_admin_entry_requires_region(test_session, cache, clock, dispatcher, sample_reservation_data):
    service = _service(test_session, cache, clock, dispatcher)

    with pytest.raises(ValidationError) as exc_info:
        await service.create_reservation(
            CreateReservationRequest(**sample_reservation_data), ReservationSource.ADMIN
        )

    assert set(exc_info.value.errors) == {"region_id"}


@pytest.mark.asyncio
async def test_admin_entry_with_region(test_session, cache, clock, dispatcher, sample_reservation_data, region):
    service = _service(test_session, cache, clock, dispatcher)
    data = {**sample_reservation_data, "region_id": region.id}

    reservation = await service.create_reservation(CreateReservationRequest(**data), ReservationSource.ADMIN)

    assert reservation.region_name == "Kemer"


@pytest.mark.asyncio
async def test_unknown_vehicle_is_rejected(test_session, cache, clock, dispatcher, sample_reservation_data):
    service = _service(test_session, cache, clock, dispatcher)
    data = {**sample_reservation_data, "vehicle_id": 999}

    with pytest.raises(ValidationError) as exc_info:
        await service.create_reservation(CreateReservationRequest(**data))

    assert exc_info.value.errors == {"vehicle_id": "Vehicle not found"}


@pytest.mark.asyncio
async def test_pickup_too_soon_is_rejected_and_not_stored(
    test_session, cache, clock, dispatcher, sample_reservation_data
):
    service = _service(test_session, cache, clock, dispatcher)
    data = {**sample_reservation_data, "transfer_time": "12:30"}

    with pytest.raises(ValidationError) as exc_info:
        await service.create_reservation(CreateReservationRequest(**data))

    assert "transfer_time" in exc_info.value.errors
    assert (await test_session.execute(select(Reservation))).scalars().all() == []


@pytest.mark.asyncio
async def test_pickup_exactly_one_hour_ahead_is_accepted(
    test_session, cache, clock, dispatcher, sample_reservation_data
):
    service = _service(test_session, cache, clock, dispatcher)
    data = {**sample_reservation_data, "transfer_time": "13:00"}

    reservation = await service.create_reservation(CreateReservationRequest(**data))

    assert reservation.transfer_time == "13:00"


@pytest.mark.asyncio
async def test_confirm_stamps_and_resends(test_session, cache, clock, dispatcher, sample_reservation_data):
    service = _service(test_session, cache, clock, dispatcher)
    created = await service.create_reservation(CreateReservationRequest(**sample_reservation_data))
    clock.advance(3600)

    confirmed = await service.update_status(created.id, ReservationStatus.CONFIRMED, "Driver: Mehmet")

    assert confirmed.status == ReservationStatus.CONFIRMED
    assert confirmed.confirmed_at == clock.now_utc()
    assert confirmed.updated_at == clock.now_utc()
    assert confirmed.admin_notes == "Driver: Mehmet"
    assert [r.id for r in dispatcher.confirmed] == [created.id]


@pytest.mark.asyncio
async def test_confirm_without_email_sends_nothing(test_session, cache, clock, dispatcher, sample_reservation_data):
    service = _service(test_session, cache, clock, dispatcher)
    data = {**sample_reservation_data, "customer_email": None}
    created = await service.create_reservation(CreateReservationRequest(**data))

    await service.update_status(created.id, ReservationStatus.CONFIRMED)

    assert dispatcher.confirmed == []


@pytest.mark.asyncio
async def test_blank_admin_notes_keep_existing(test_session, cache, clock, dispatcher, sample_reservation_data):
    service = _service(test_session, cache, clock, dispatcher)
    created = await service.create_reservation(CreateReservationRequest(**sample_reservation_data))
    await service.update_status(created.id, ReservationStatus.CONFIRMED, "Keep me")

    completed = await service.update_status(created.id, ReservationStatus.COMPLETED, "   ")

    assert completed.admin_notes == "Keep me"


@pytest.mark.asyncio
@pytest.mark.parametrize("path", [
    [ReservationStatus.CANCELLED, ReservationStatus.CONFIRMED],
    [ReservationStatus.CONFIRMED, ReservationStatus.COMPLETED, ReservationStatus.PENDING],
    [ReservationStatus.COMPLETED],
])
async def test_invalid_transitions_are_rejected(
    test_session, cache, clock, dispatcher, sample_reservation_data, path
):
    service = _service(test_session, cache, clock, dispatcher)
    created = await service.create_reservation(CreateReservationRequest(**sample_reservation_data))

    *allowed, rejected = path
    for status in allowed:
        await service.update_status(created.id, status)

    with pytest.raises(InvalidTransitionError):
        await service.update_status(created.id, rejected)


@pytest.mark.asyncio
async def test_update_status_unknown_reservation(test_session, cache, clock, dispatcher):
    with pytest.raises(NotFoundError):
        await _service(test_session, cache, clock, dispatcher).update_status(404, ReservationStatus.CONFIRMED)


@pytest.mark.asyncio
async def test_legacy_row_without_status_reads_as_pending(
    test_session, cache, clock, dispatcher, sample_reservation_data
):
    service = _service(test_session, cache, clock, dispatcher)
    created = await service.create_reservation(CreateReservationRequest(**sample_reservation_data))
    await test_session.execute(update(Reservation).where(Reservation.id == created.id).values(status=None))
    await test_session.commit()

    assert (await service.get_reservation(created.id)).status == ReservationStatus.PENDING
    pending = await service.list_reservations(ReservationStatus.PENDING)
    assert [item.id for item in pending] == [created.id]


@pytest.mark.asyncio
async def test_list_newest_first_with_null_created_last(
    test_session, cache, clock, dispatcher, sample_reservation_data
):
    service = _service(test_session, cache, clock, dispatcher)
    ids = []
    for _ in range(3):
        ids.append((await service.create_reservation(CreateReservationRequest(**sample_reservation_data))).id)
        clock.advance(60)
    await test_session.execute(update(Reservation).where(Reservation.id == ids[2]).values(created_at=None))
    await test_session.commit()

    items = await service.list_reservations()

    assert [item.id for item in items] == [ids[1], ids[0], ids[2]]


@pytest.mark.asyncio
async def test_list_filters_by_status(test_session, cache, clock, dispatcher, sample_reservation_data):
    service = _service(test_session, cache, clock, dispatcher)
    first = await service.create_reservation(CreateReservationRequest(**sample_reservation_data))
    second = await service.create_reservation(CreateReservationRequest(**sample_reservation_data))
    await service.update_status(second.id, ReservationStatus.CANCELLED)

    assert [i.id for i in await service.list_reservations(ReservationStatus.CANCELLED)] == [second.id]
    assert [i.id for i in await service.list_reservations(ReservationStatus.PENDING)] == [first.id]


@pytest.mark.asyncio
async def test_dashboard_summary(test_session, cache, clock, dispatcher, sample_reservation_data):
    service = _service(test_session, cache, clock, dispatcher)
    today = await service.create_reservation(CreateReservationRequest(**sample_reservation_data))
    tomorrow = {**sample_reservation_data, "transfer_date": (TODAY + timedelta(days=1)).isoformat()}
    await service.create_reservation(CreateReservationRequest(**tomorrow))
    await service.update_status(today.id, ReservationStatus.CONFIRMED)

    summary = await service.dashboard_summary()

    assert summary.total_reservations == 2
    assert summary.pending_reservations == 1
    assert summary.todays_transfers == 1
    assert len(summary.recent) == 2


@pytest.mark.asyncio
async def test_delete_reservation(test_session, cache, clock, dispatcher, sample_reservation_data):
    service = _service(test_session, cache, clock, dispatcher)
    created = await service.create_reservation(CreateReservationRequest(**sample_reservation_data))

    await service.delete_reservation(created.id)

    with pytest.raises(NotFoundError):
        await service.get_reservation(created.id)


@pytest.mark.asyncio
async def test_calculate_price_is_flat_fee(test_session, cache, clock, dispatcher, vehicle):
    service = _service(test_session, cache, clock, dispatcher)
    await RateService(test_session, cache, clock).save_rates(40.0, 1.1, 0.8)

    short = await service.calculate_price(vehicle.id, 5)
    long = await service.calculate_price(vehicle.id, 500)

    assert short.success and long.success
    assert short.price == long.price == 45.0
    assert short.currency == "EUR"
    assert short.prices == {"EUR": 45.0, "TRY": 1800.0, "USD": 49.5, "GBP": 36.0}
    assert short.vehicle_name == "Mercedes Vito VIP"


@pytest.mark.asyncio
@pytest.mark.parametrize("vehicle_id,distance,message", [
    (None, 10, "Invalid parameters"),
    (1, 0, "Invalid parameters"),
    (1, -5, "Invalid parameters"),
    (1, float("nan"), "Invalid parameters"),
    (1, float("inf"), "Invalid parameters"),
    (999, 10, "Vehicle not found"),
])
async def test_calculate_price_failures(test_session, cache, clock, dispatcher, vehicle_id, distance, message):
    quote = await _service(test_session, cache, clock, dispatcher).calculate_price(vehicle_id, distance)

    assert quote.success is False
    assert quote.message == message
    assert quote.price is None


@pytest.mark.asyncio
async def test_render_document(test_session, cache, clock, dispatcher, sample_reservation_data):
    service = _service(test_session, cache, clock, dispatcher)
    created = await service.create_reservation(CreateReservationRequest(**sample_reservation_data))

    filename, content = await service.render_document(created.id)

    assert filename == f"Rezervasyon_{created.id}_de.pdf"
    assert content.startswith(b"%PDF")
