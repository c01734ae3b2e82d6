"""
Availability Service - open time slots per specialty and date.

The slot list is a best-effort snapshot: another patient may take the
last place between the moment a list is shown and the moment a time is
picked. The per-doctor check in is_doctor_free is the authoritative gate
used right before a reservation is written.
"""

from collections import Counter
from datetime import date, time
from typing import List, Optional

from loguru import logger

from clinic_booking.services.slot_policy import bookable_times, capacity_for
from clinic_booking.services.store import ClinicStore, get_clinic_store


class AvailabilityService:
    """
    Computes slot availability from the doctor directory and appointment store.
    """

    def __init__(self, store: Optional[ClinicStore] = None):
        self._store = store if store is not None else get_clinic_store()

    async def _booked_counts(self, specialty: str, on: date) -> Counter:
        appointments = await self._store.find_by_specialty_date(specialty, on)
        return Counter(a.time for a in appointments)

    async def open_slots(self, specialty: str, on: date) -> List[time]:
        """
        Bookable times that still have room for the specialty on a date.

        A time is open while its booked count is below
        min(doctors of the specialty, capacity of the time).

        Returns:
            Catalog times in catalog order; empty when fully booked
        """
        total_doctors = await self._store.count_by_specialty(specialty)
        booked = await self._booked_counts(specialty, on)

        slots = [
            at
            for at in bookable_times()
            if booked[at] < min(total_doctors, capacity_for(at))
        ]

        logger.info(
            f"Found {len(slots)} open slots for {specialty} on {on.isoformat()}"
        )
        return slots

    async def has_capacity(self, specialty: str, on: date, at: time) -> bool:
        """Fresh check of the open_slots rule for a single time."""
        total_doctors = await self._store.count_by_specialty(specialty)
        booked = await self._booked_counts(specialty, on)
        return booked[at] < min(total_doctors, capacity_for(at))

    async def is_doctor_free(self, doctor_id: int, on: date, at: time) -> bool:
        """True iff the doctor has no appointment at that exact date and time."""
        existing = await self._store.find_by_doctor_date_time(doctor_id, on, at)
        return existing is None
