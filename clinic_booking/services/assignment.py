"""
Doctor Assignment Resolver.

Picks the doctor for a requested (specialty, date, time). Candidates are
scanned by id ascending and the first free one wins, so the lowest-id
free doctor is always chosen.
"""

from datetime import date, time
from typing import List, Optional

from loguru import logger

from clinic_booking.models.booking import (
    Assignment,
    AssignmentConflict,
    AssignmentResult,
    ConflictReason,
)
from clinic_booking.models.doctor import Doctor
from clinic_booking.services.availability import AvailabilityService
from clinic_booking.services.store import ClinicStore, get_clinic_store


class DoctorAssignmentResolver:
    """
    Deterministic first-free-wins doctor assignment.
    """

    def __init__(
        self,
        availability: AvailabilityService,
        store: Optional[ClinicStore] = None,
    ):
        self._availability = availability
        self._store = store if store is not None else get_clinic_store()

    async def candidates(self, specialty: str, at: time) -> List[Doctor]:
        """Doctors of the specialty whose shift contains the time, by id."""
        doctors = await self._store.list_by_specialty(specialty)
        return [d for d in doctors if d.works_at(at)]

    async def assign(self, specialty: str, on: date, at: time) -> AssignmentResult:
        """
        Choose a free doctor for the slot.

        Returns:
            Assignment with the chosen doctor, or AssignmentConflict when
            nobody is on shift or every doctor on shift is booked
        """
        candidates = await self.candidates(specialty, at)
        if not candidates:
            return AssignmentConflict(
                specialty=specialty,
                date=on,
                time=at,
                reason=ConflictReason.NO_DOCTOR_ON_SHIFT,
            )

        for doctor in candidates:
            if await self._availability.is_doctor_free(doctor.id, on, at):
                return Assignment(doctor=doctor, date=on, time=at)

        logger.info(
            f"All {len(candidates)} {specialty} doctors busy on "
            f"{on.isoformat()} at {at.strftime('%H:%M')}"
        )
        return AssignmentConflict(
            specialty=specialty,
            date=on,
            time=at,
            reason=ConflictReason.ALL_DOCTORS_BUSY,
            candidates_checked=len(candidates),
        )
