"""
Booking Service - commits doctor assignments to the appointment store.

Each attempt re-checks the slot capacity, asks the resolver for a free
doctor and writes through the store's conditional insert/update. A lost
race (SlotTakenError) starts a fresh assignment round; it is never
turned into a double booking.
"""

from datetime import date, time
from typing import Optional

from loguru import logger

from clinic_booking.config import get_settings
from clinic_booking.models.appointment import AppointmentSummary
from clinic_booking.models.booking import (
    Assignment,
    AssignmentConflict,
    BookingOutcome,
    ConflictReason,
)
from clinic_booking.services.assignment import DoctorAssignmentResolver
from clinic_booking.services.availability import AvailabilityService
from clinic_booking.services.store import ClinicStore, SlotTakenError, get_clinic_store


class BookingService:
    """
    Books, moves and cancels appointments without double-booking doctors.

    Store failures other than a lost race propagate as StoreError.
    """

    def __init__(
        self,
        store: Optional[ClinicStore] = None,
        availability: Optional[AvailabilityService] = None,
        resolver: Optional[DoctorAssignmentResolver] = None,
    ):
        self.settings = get_settings()
        self._store = store if store is not None else get_clinic_store()
        self._availability = (
            availability if availability is not None else AvailabilityService(self._store)
        )
        self._resolver = (
            resolver
            if resolver is not None
            else DoctorAssignmentResolver(self._availability, self._store)
        )

    async def _assign_and_commit(self, specialty: str, on: date, at: time, write) -> BookingOutcome:
        last_conflict: Optional[AssignmentConflict] = None

        for attempt in range(1, max(1, self.settings.booking_commit_attempts) + 1):
            if not await self._availability.has_capacity(specialty, on, at):
                return BookingOutcome(
                    success=False,
                    conflict=AssignmentConflict(
                        specialty=specialty, date=on, time=at, reason=ConflictReason.SLOT_FULL
                    ),
                )

            result = await self._resolver.assign(specialty, on, at)
            if isinstance(result, AssignmentConflict):
                return BookingOutcome(success=False, conflict=result)

            try:
                appointment = await write(result)
            except SlotTakenError as e:
                logger.warning(f"Lost race on attempt {attempt}: {e}")
                last_conflict = AssignmentConflict(
                    specialty=specialty,
                    date=on,
                    time=at,
                    reason=ConflictReason.ALL_DOCTORS_BUSY,
                )
                continue

            return BookingOutcome(success=True, appointment=appointment)

        return BookingOutcome(success=False, conflict=last_conflict)

    async def book(
        self, patient_id: str, specialty: str, on: date, at: time
    ) -> BookingOutcome:
        """
        Book a new appointment with the first free doctor on shift.

        Args:
            patient_id: Patient CPF
            specialty: Specialty from the catalog
            on: Appointment date
            at: Catalog time

        Returns:
            BookingOutcome with the appointment, or the conflict to report
        """

        async def write(assignment: Assignment) -> AppointmentSummary:
            return await self._store.insert(
                patient_id, assignment.doctor.id, assignment.date, assignment.time
            )

        outcome = await self._assign_and_commit(specialty, on, at, write)
        if outcome.success:
            self._log_action("BOOKED", outcome.appointment)
        return outcome

    async def reschedule(
        self, appointment_id: int, specialty: str, on: date, at: time
    ) -> BookingOutcome:
        """
        Move an existing appointment to a new specialty, date and time.

        The appointment keeps its id and patient; doctor, date and time
        are reassigned.
        """

        async def write(assignment: Assignment) -> AppointmentSummary:
            return await self._store.update(
                appointment_id, assignment.doctor.id, assignment.date, assignment.time
            )

        outcome = await self._assign_and_commit(specialty, on, at, write)
        if outcome.success:
            self._log_action("RESCHEDULED", outcome.appointment)
        return outcome

    async def cancel(self, appointment: AppointmentSummary) -> None:
        """Delete an appointment."""
        await self._store.delete(appointment.id)
        self._log_action("CANCELLED", appointment)

    def _log_action(self, action: str, appointment: AppointmentSummary) -> None:
        logger.info("=" * 60)
        logger.info(f"📅 APPOINTMENT {action}")
        logger.info(f"Appointment ID: {appointment.id}")
        logger.info(f"Patient: {appointment.patient_id}")
        logger.info(f"Date/Time: {appointment.formatted_date} {appointment.formatted_time}")
        logger.info(f"Doctor: {appointment.doctor_name} ({appointment.specialty})")
        logger.info("=" * 60)
