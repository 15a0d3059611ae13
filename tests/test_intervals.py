"""Tests des intervalles de rappel / Recall interval tests."""

import pytest

from app.models.booking import BookingStatus
from app.services.interval_resolver import IntervalResolver, ReminderService
from fakes import InMemoryStore, make_booking, make_interval, make_provider, make_service

HORSE_ID = 3


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def provider(store):
    return make_provider(store)


@pytest.fixture
def service(store, provider):
    return make_service(store, provider, recommended_interval_weeks=8)


@pytest.mark.asyncio
async def test_override_shorter_than_default(store, provider, service):
    make_interval(store, HORSE_ID, provider, weeks=4)
    assert await IntervalResolver(store).resolve(HORSE_ID, provider.id, service.id, 8) == 4


@pytest.mark.asyncio
async def test_no_override_keeps_default(store, provider, service):
    resolver = IntervalResolver(store)
    assert await resolver.resolve(HORSE_ID, provider.id, service.id, 8) == 8
    assert await resolver.resolve(None, provider.id, service.id, 8) == 8


@pytest.mark.asyncio
async def test_override_longer_than_default_wins(store, provider, service):
    make_interval(store, HORSE_ID, provider, weeks=12)
    assert await IntervalResolver(store).resolve(HORSE_ID, provider.id, service.id, 4) == 12


@pytest.mark.asyncio
async def test_service_override_beats_provider_override(store, provider, service):
    make_interval(store, HORSE_ID, provider, weeks=10)
    make_interval(store, HORSE_ID, provider, weeks=5, service_id=service.id)
    other = make_provider(store, user_id=555)
    make_interval(store, HORSE_ID, other, weeks=2, service_id=service.id)

    resolver = IntervalResolver(store)
    assert await resolver.resolve(HORSE_ID, provider.id, service.id, 8) == 5
    # Autre prestataire : pas de surcharge / Other provider: no override for this one
    assert await resolver.resolve(HORSE_ID, other.id, 77, 8) == 8


@pytest.mark.asyncio
async def test_due_reminders(store, provider, service):
    # Dernière prestation le 2026-01-10 + 8 semaines = 2026-03-07
    make_booking(store, provider, service, horse_id=HORSE_ID, status=BookingStatus.COMPLETED,
                 booking_date="2025-11-15", updated_at="2025-11-15T17:00:00+00:00")
    latest = make_booking(store, provider, service, horse_id=HORSE_ID, status=BookingStatus.COMPLETED,
                          booking_date="2026-01-10", updated_at="2026-01-10T17:00:00+00:00")
    make_booking(store, provider, service, horse_id=HORSE_ID, status=BookingStatus.CONFIRMED, booking_date="2026-01-20")

    reminders = ReminderService(store)
    assert await reminders.find_due_reminders("2026-03-06") == []

    due = await reminders.find_due_reminders("2026-03-07")
    assert len(due) == 1
    assert due[0].booking_id == latest.id
    assert due[0].due_date == "2026-03-07"
    assert due[0].interval_weeks == 8


@pytest.mark.asyncio
async def test_due_reminders_use_override_and_skip_unknown_interval(store, provider, service):
    plain = make_service(store, provider, recommended_interval_weeks=None)
    make_interval(store, HORSE_ID, provider, weeks=2, service_id=service.id)
    make_booking(store, provider, service, horse_id=HORSE_ID, status=BookingStatus.COMPLETED,
                 updated_at="2026-02-01T09:00:00+00:00")
    make_booking(store, provider, plain, customer_id=2, status=BookingStatus.COMPLETED,
                 updated_at="2026-01-01T09:00:00+00:00")

    due = await ReminderService(store).find_due_reminders("2026-02-15")
    assert [(r.service_id, r.due_date) for r in due] == [(service.id, "2026-02-15")]


@pytest.mark.asyncio
async def test_due_reminders_ignore_service_without_recommended_interval(store, provider, service):
    plain = make_service(store, provider, recommended_interval_weeks=None)
    # Surcharge cheval sur une prestation sans intervalle / Horse override on a service without interval
    make_interval(store, HORSE_ID, provider, weeks=2, service_id=plain.id)
    make_booking(store, provider, plain, horse_id=HORSE_ID, status=BookingStatus.COMPLETED,
                 updated_at="2026-01-01T09:00:00+00:00")

    assert await ReminderService(store).find_due_reminders("2026-06-01") == []
