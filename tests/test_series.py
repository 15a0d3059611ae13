"""Tests des séries récurrentes / Recurring series tests."""

import pytest

from app.models.availability import AvailabilityException
from app.models.booking import Booking, BookingStatus
from app.models.booking_series import BookingSeries, SeriesStatus
from app.services.booking_service import BookingService
from app.services.results import ErrorCode
from app.services.series_expander import SeriesExpander, SeriesRequest, SkippedDate
from fakes import InMemoryStore, InjectedFailure, flags, make_booking, make_interval, make_provider, make_service

CUSTOMER_ID = 1


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def provider(store):
    return make_provider(store, user_id=100, max_series_occurrences=12)


@pytest.fixture
def service(store, provider):
    return make_service(store, provider, duration_minutes=60, recommended_interval_weeks=6)


def _expander(store, enabled=True):
    return SeriesExpander(store, BookingService(store), flags(recurring_bookings=enabled))


def _request(provider, service, **kwargs):
    values = dict(
        customer_id=CUSTOMER_ID, provider_id=provider.id, service_id=service.id,
        first_booking_date="2026-05-01", start_time="10:00", interval_weeks=2, total_occurrences=4,
    )
    values.update(kwargs)
    return SeriesRequest(**values)


@pytest.mark.asyncio
async def test_series_skips_conflicting_date(store, provider, service):
    make_booking(store, provider, service, customer_id=7, booking_date="2026-05-29", start_time="10:30", end_time="11:30")

    result = await _expander(store).create_series(_request(provider, service))

    assert result.ok
    outcome = result.value
    assert outcome.series.created_count == 3
    assert outcome.series.status == SeriesStatus.ACTIVE
    assert [b.booking_date for b in outcome.created_bookings] == ["2026-05-01", "2026-05-15", "2026-06-12"]
    assert [(s.date, s.reason) for s in outcome.skipped_dates] == [("2026-05-29", "SLOT_CONFLICT")]
    assert outcome.series.created_count + len(outcome.skipped_dates) == outcome.series.total_occurrences
    assert all(b.series_id == outcome.series.id for b in outcome.created_bookings)
    linked = [b for b in store.all(Booking) if b.series_id == outcome.series.id]
    assert len(linked) == 3


@pytest.mark.asyncio
async def test_feature_flag_short_circuits(store, provider, service):
    result = await _expander(store, enabled=False).create_series(_request(provider, service, provider_id=999))
    assert result.error.code == ErrorCode.RECURRING_FEATURE_OFF
    assert store.all(Booking) == []


@pytest.mark.asyncio
async def test_provider_preconditions(store, provider, service):
    expander = _expander(store)

    assert (await expander.create_series(_request(provider, service, provider_id=999))).error.code == ErrorCode.RECURRING_DISABLED

    provider.recurring_enabled = False
    assert (await expander.create_series(_request(provider, service))).error.code == ErrorCode.RECURRING_DISABLED

    provider.recurring_enabled = True
    provider.is_active = False
    assert (await expander.create_series(_request(provider, service))).error.code == ErrorCode.RECURRING_DISABLED
    assert store.all(Booking) == []


@pytest.mark.asyncio
async def test_interval_and_occurrence_ranges(store, provider, service):
    expander = _expander(store)

    for weeks in (0, 53):
        result = await expander.create_series(_request(provider, service, interval_weeks=weeks))
        assert result.error.code == ErrorCode.INVALID_INTERVAL

    for count in (1, 13):
        result = await expander.create_series(_request(provider, service, total_occurrences=count))
        assert result.error.code == ErrorCode.INVALID_OCCURRENCES
    assert result.error.details["max_occurrences"] == 12

    provider.max_series_occurrences = 80
    result = await expander.create_series(_request(provider, service, total_occurrences=53))
    assert result.error.details["max_occurrences"] == 52
    assert store.all(Booking) == []


@pytest.mark.asyncio
async def test_default_interval_from_service_and_horse(store, provider, service):
    expander = _expander(store)

    result = await expander.create_series(_request(provider, service, interval_weeks=None, total_occurrences=2))
    assert result.value.series.interval_weeks == 6
    assert [b.booking_date for b in result.value.created_bookings] == ["2026-05-01", "2026-06-12"]

    make_interval(store, horse_id=3, provider=provider, weeks=4)
    result = await expander.create_series(
        _request(provider, service, interval_weeks=None, total_occurrences=2, horse_id=3, start_time="14:00")
    )
    assert result.value.series.interval_weeks == 4


@pytest.mark.asyncio
async def test_unknown_default_interval(store, provider):
    plain = make_service(store, provider, recommended_interval_weeks=None)
    result = await _expander(store).create_series(_request(provider, plain, interval_weeks=None))
    assert result.error.code == ErrorCode.INVALID_INTERVAL


@pytest.mark.asyncio
async def test_no_bookings_created(store, provider, service):
    for date in ("2026-05-01", "2026-05-15"):
        make_booking(store, provider, service, customer_id=7, booking_date=date, start_time="09:30", end_time="12:00")

    result = await _expander(store).create_series(_request(provider, service, total_occurrences=2))

    assert result.error.code == ErrorCode.NO_BOOKINGS_CREATED
    assert result.error.details["skipped_dates"] == [
        {"date": "2026-05-01", "reason": "SLOT_CONFLICT"},
        {"date": "2026-05-15", "reason": "SLOT_CONFLICT"},
    ]
    assert store.all(BookingSeries) == []
    assert len(store.all(Booking)) == 2


@pytest.mark.asyncio
async def test_skip_reasons_are_itemised(store, provider, service):
    store.add(AvailabilityException(provider_id=provider.id, date="2026-05-15", is_closed=True))
    make_booking(store, provider, service, customer_id=7, booking_date="2026-06-12", start_time="10:00", end_time="11:00")

    result = await _expander(store).create_series(_request(provider, service))

    assert result.value.skipped_dates == [
        SkippedDate("2026-05-15", "PROVIDER_CLOSED", "provider closed"),
        SkippedDate("2026-06-12", "SLOT_CONFLICT", "slot already booked"),
    ]


@pytest.mark.asyncio
async def test_series_persist_failure_keeps_committed_bookings(store, provider, service):
    store.fail_on("link_bookings_to_series")

    with pytest.raises(InjectedFailure):
        await _expander(store).create_series(_request(provider, service))

    # Chaque réservation a sa propre transaction / Each booking committed on its own
    assert store.all(BookingSeries) == []
    assert len(store.all(Booking)) == 4
    assert all(b.series_id is None for b in store.all(Booking))


@pytest.mark.asyncio
async def test_cancel_series_cancels_upcoming(store, provider, service):
    expander = _expander(store)
    series = (await expander.create_series(_request(provider, service))).value.series

    result = await expander.cancel_series(series.id, actor_user_id=CUSTOMER_ID, today="2026-05-20")

    assert result.value == 2
    statuses = {b.booking_date: b.status for b in store.all(Booking)}
    assert statuses == {
        "2026-05-01": BookingStatus.PENDING,
        "2026-05-15": BookingStatus.PENDING,
        "2026-05-29": BookingStatus.CANCELLED,
        "2026-06-12": BookingStatus.CANCELLED,
    }
    assert series.status == SeriesStatus.CANCELLED
    assert series.cancelled_at is not None


@pytest.mark.asyncio
async def test_cancel_series_errors(store, provider, service):
    expander = _expander(store)
    series = (await expander.create_series(_request(provider, service))).value.series

    assert (await expander.cancel_series(999, CUSTOMER_ID, "2026-05-01")).error.code == ErrorCode.SERIES_NOT_FOUND
    assert (await expander.cancel_series(series.id, 555, "2026-05-01")).error.code == ErrorCode.NOT_OWNER

    by_provider = await expander.cancel_series(series.id, provider.user_id, "2026-05-01")
    assert by_provider.value == 4


@pytest.mark.asyncio
async def test_provider_created_series_for_customer(store, provider, service):
    result = await _expander(store).create_series(
        _request(provider, service, customer_id=CUSTOMER_ID, created_by_provider_id=provider.id)
    )

    assert result.ok
    outcome = result.value
    assert outcome.series.created_count == 4
    assert outcome.series.customer_id == CUSTOMER_ID
    assert outcome.series.created_by_provider_id == provider.id
    assert all(b.created_by_provider_id == provider.id for b in outcome.created_bookings)
    assert all(b.customer_id == CUSTOMER_ID for b in outcome.created_bookings)


@pytest.mark.asyncio
async def test_provider_created_series_under_own_name_skips_self_booking_check(store, provider, service):
    # customer_id = compte du prestataire / customer_id is the provider's own account
    result = await _expander(store).create_series(
        _request(provider, service, customer_id=provider.user_id, created_by_provider_id=provider.id, total_occurrences=3)
    )

    assert result.ok
    assert result.value.series.created_count == 3
    assert result.value.skipped_dates == []


@pytest.mark.asyncio
async def test_manual_series_for_another_provider_is_refused(store, provider, service):
    other = make_provider(store, user_id=200)

    result = await _expander(store).create_series(_request(provider, service, created_by_provider_id=other.id))

    assert result.error.code == ErrorCode.NOT_OWNER
    assert store.all(Booking) == []
    assert store.all(BookingSeries) == []
