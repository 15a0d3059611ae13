"""
Garde anti-conflit à l'écriture / Write-time booking conflict guard.

Seule autorité sur l'invariant « pas deux réservations actives qui se
chevauchent pour un même prestataire ». Le contrôle de disponibilité en
lecture peut être contourné par deux clients concurrents ; ici on verrouille
le prestataire, on relit dans la transaction, puis on insère.
Sole authority on the no-overlap invariant: lock the provider, re-read inside
the transaction, then insert.
"""

import logging
from typing import Any

from app.models.booking import Booking
from app.services.availability_checker import find_conflict
from app.services.ports import SchedulingStore
from app.services.results import ErrorCode, Result

logger = logging.getLogger(__name__)


class BookingConflictGuard:

    def __init__(self, store: SchedulingStore):
        self.store = store

    async def book(self, data: dict[str, Any]) -> Result[Booking]:
        """
        Créer une réservation si aucun créneau actif ne chevauche /
        Create a booking unless an active booking overlaps.

        Exactement une ligne créée en cas de succès, aucune en cas d'échec.
        Pas de déduplication au-delà du test de chevauchement.
        """
        provider_id = data["provider_id"]
        booking_date = data["booking_date"]

        async def _write(tx: SchedulingStore) -> Result[Booking]:
            await tx.lock_provider(provider_id)
            existing = await tx.find_overlapping_bookings(provider_id, booking_date)
            conflict = find_conflict(data["start_time"], data["end_time"], existing)
            if conflict is not None:
                return Result.failure(
                    ErrorCode.SLOT_CONFLICT,
                    "Ce créneau vient d'être réservé / This slot has just been booked",
                    conflicting_booking_id=conflict.id,
                )
            return Result.success(await tx.create_booking(data))

        result = await self.store.run_in_transaction(_write)

        if result.ok:
            logger.info(
                "Booking %s created: provider %s on %s %s-%s",
                result.value.id, provider_id, booking_date, data["start_time"], data["end_time"],
            )
        else:
            logger.warning(
                "Write-time conflict for provider %s on %s %s-%s (booking %s)",
                provider_id, booking_date, data["start_time"], data["end_time"],
                result.error.details.get("conflicting_booking_id"),
            )
        return result
