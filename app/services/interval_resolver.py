"""
Résolution de l'intervalle de rappel / Recall interval resolution.

Priorité / Precedence: (cheval, prestataire, prestation) > (cheval, prestataire) > défaut.
Une surcharge remplace toujours le défaut, qu'elle soit plus courte ou plus longue.
An override always replaces the default, shorter or longer.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from app.models.horse import HorseServiceInterval
from app.services.ports import SchedulingStore
from app.services.time_calculator import TimeCalculatorService

logger = logging.getLogger(__name__)


def pick_interval(
    overrides: Sequence[HorseServiceInterval], service_id: int | None, default_weeks: int | None
) -> int | None:
    """Choisir la surcharge la plus spécifique / Pick the most specific override."""
    provider_wide = None
    for override in overrides:
        if service_id is not None and override.service_id == service_id:
            return override.revisit_interval_weeks
        if override.service_id is None:
            provider_wide = override.revisit_interval_weeks
    if provider_wide is not None:
        return provider_wide
    return default_weeks


class IntervalResolver:

    def __init__(self, store: SchedulingStore):
        self.store = store

    async def resolve(
        self, horse_id: int | None, provider_id: int, service_id: int | None, default_weeks: int | None
    ) -> int | None:
        if horse_id is None:
            return default_weeks
        overrides = await self.store.find_horse_intervals(horse_id, provider_id)
        return pick_interval(overrides, service_id, default_weeks)


@dataclass(frozen=True)
class DueReminder:
    """Rappel de reprise de rendez-vous dû / Due rebooking reminder."""
    booking_id: int
    customer_id: int
    provider_id: int
    service_id: int
    horse_id: int | None
    interval_weeks: int
    last_completed: str  # YYYY-MM-DD
    due_date: str  # YYYY-MM-DD


class ReminderService:
    """
    Calcul des rappels dus / Due reminder calculation.
    L'envoi (email, push) est hors du moteur / Delivery is outside the engine.
    """

    def __init__(self, store: SchedulingStore, resolver: IntervalResolver | None = None):
        self.store = store
        self.resolver = resolver or IntervalResolver(store)

    async def find_due_reminders(self, today: str) -> list[DueReminder]:
        # Seule la dernière prestation réalisée par (client, cheval, prestation) compte
        # Only the latest completed booking per (customer, horse, service) counts
        latest = {}
        for booking, service in await self.store.find_completed_bookings():
            key = (booking.customer_id, booking.horse_id, booking.service_id)
            current = latest.get(key)
            if current is None or booking.updated_at > current[0].updated_at:
                latest[key] = (booking, service)

        reminders = []
        for booking, service in latest.values():
            # Prestations sans intervalle recommandé : jamais de rappel, même avec surcharge
            # Services without a recommended interval never remind, even with an override
            if service.recommended_interval_weeks is None:
                continue
            weeks = await self.resolver.resolve(
                booking.horse_id, booking.provider_id, booking.service_id, service.recommended_interval_weeks
            )
            if not weeks:
                continue
            last_completed = booking.updated_at[:10]
            due_date = TimeCalculatorService.add_days(last_completed, weeks * 7)
            if today >= due_date:
                reminders.append(DueReminder(
                    booking_id=booking.id,
                    customer_id=booking.customer_id,
                    provider_id=booking.provider_id,
                    service_id=booking.service_id,
                    horse_id=booking.horse_id,
                    interval_weeks=weeks,
                    last_completed=last_completed,
                    due_date=due_date,
                ))

        logger.info("%d rebooking reminder(s) due on %s", len(reminders), today)
        return sorted(reminders, key=lambda r: (r.due_date, r.booking_id))
