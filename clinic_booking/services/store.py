"""
Appointment store and doctor directory.

In-memory implementation with lock-guarded writes. The conditional
insert/update re-checks the (doctor, date, time) uniqueness inside the
lock, which is the atomic check-then-reserve primitive the booking
service relies on. A database-backed store must offer the same
guarantee (e.g. a UNIQUE constraint on doctor_id, date, time).
"""

import asyncio
from datetime import date, time
from typing import Dict, List, Optional

from loguru import logger

from clinic_booking.config import DOCTOR_SEED
from clinic_booking.models.appointment import Appointment, AppointmentSummary
from clinic_booking.models.doctor import Doctor


class StoreError(Exception):
    """Base class for appointment store failures."""


class SlotTakenError(StoreError):
    """The doctor already has an appointment at that date and time."""

    def __init__(self, doctor_id: int, on: date, at: time):
        super().__init__(
            f"Doctor {doctor_id} is already booked on {on.isoformat()} at {at.strftime('%H:%M')}"
        )
        self.doctor_id = doctor_id
        self.date = on
        self.time = at


class AppointmentNotFoundError(StoreError):
    """No appointment with the given id."""


class ClinicStore:
    """
    In-memory doctor directory and appointment store.

    In production, this should be replaced with a relational database
    keeping the same uniqueness guarantee on write.
    """

    def __init__(self):
        self._doctors: Dict[int, Doctor] = {}
        self._appointments: Dict[int, Appointment] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()
        self._initialized = False

    # Public accessors for testing
    @property
    def doctors(self) -> Dict[int, Doctor]:
        """Access to doctors dictionary."""
        return self._doctors

    @property
    def appointments(self) -> Dict[int, Appointment]:
        """Access to appointments dictionary."""
        return self._appointments

    def seed_doctors(self) -> None:
        """Load the clinic's doctors, ids assigned in seed order."""
        if self._initialized:
            return

        for doctor_id, (name, specialty, (start, end)) in enumerate(DOCTOR_SEED, 1):
            self._doctors[doctor_id] = Doctor(
                id=doctor_id,
                name=name,
                specialty=specialty,
                shift_start=start,
                shift_end=end,
            )

        self._initialized = True
        logger.info(f"Seeded {len(self._doctors)} doctors")

    def reset(self) -> None:
        """Drop every appointment and doctor."""
        self._doctors.clear()
        self._appointments.clear()
        self._next_id = 1
        self._initialized = False

    # ------------------------------------------------------------------
    # Doctor directory
    # ------------------------------------------------------------------

    async def list_by_specialty(self, specialty: str) -> List[Doctor]:
        """Doctors of a specialty, by id ascending."""
        return sorted(
            (d for d in self._doctors.values() if d.specialty == specialty),
            key=lambda d: d.id,
        )

    async def count_by_specialty(self, specialty: str) -> int:
        return sum(1 for d in self._doctors.values() if d.specialty == specialty)

    # ------------------------------------------------------------------
    # Appointment queries
    # ------------------------------------------------------------------

    def _summarize(self, appointment: Appointment) -> AppointmentSummary:
        doctor = self._doctors.get(appointment.doctor_id)
        return AppointmentSummary(
            **appointment.model_dump(),
            doctor_name=doctor.name if doctor else "Doutor removido",
            specialty=doctor.specialty if doctor else "-",
        )

    def _sorted_summaries(self, appointments) -> List[AppointmentSummary]:
        return [
            self._summarize(a)
            for a in sorted(appointments, key=lambda a: (a.date, a.time, a.id))
        ]

    async def find_all(self) -> List[AppointmentSummary]:
        """Every appointment of the clinic, by date and time."""
        return self._sorted_summaries(self._appointments.values())

    async def find_by_patient(self, patient_id: str) -> List[AppointmentSummary]:
        """All appointments of a patient, by date and time."""
        return self._sorted_summaries(
            a for a in self._appointments.values() if a.patient_id == patient_id
        )

    async def find_upcoming_by_patient(
        self, patient_id: str, on_or_after: date
    ) -> List[AppointmentSummary]:
        """Appointments of a patient dated on or after the given day."""
        return self._sorted_summaries(
            a
            for a in self._appointments.values()
            if a.patient_id == patient_id and a.date >= on_or_after
        )

    async def find_by_doctor_date_time(
        self, doctor_id: int, on: date, at: time
    ) -> Optional[Appointment]:
        for appointment in self._appointments.values():
            if (
                appointment.doctor_id == doctor_id
                and appointment.date == on
                and appointment.time == at
            ):
                return appointment
        return None

    async def find_by_specialty_date(self, specialty: str, on: date) -> List[Appointment]:
        """Appointments on a date with any doctor of the specialty."""
        return [
            a
            for a in self._appointments.values()
            if a.date == on
            and a.doctor_id in self._doctors
            and self._doctors[a.doctor_id].specialty == specialty
        ]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _ensure_free(
        self, doctor_id: int, on: date, at: time, ignore_id: Optional[int] = None
    ) -> None:
        for appointment in self._appointments.values():
            if appointment.id == ignore_id:
                continue
            if (
                appointment.doctor_id == doctor_id
                and appointment.date == on
                and appointment.time == at
            ):
                raise SlotTakenError(doctor_id, on, at)

    async def insert(
        self, patient_id: str, doctor_id: int, on: date, at: time
    ) -> AppointmentSummary:
        """
        Create an appointment if the doctor is still free.

        Raises:
            SlotTakenError: the (doctor, date, time) triple is already booked
        """
        async with self._lock:
            self._ensure_free(doctor_id, on, at)

            appointment = Appointment(
                id=self._next_id,
                patient_id=patient_id,
                doctor_id=doctor_id,
                date=on,
                time=at,
            )
            self._appointments[appointment.id] = appointment
            self._next_id += 1
            return self._summarize(appointment)

    async def update(
        self, appointment_id: int, doctor_id: int, on: date, at: time
    ) -> AppointmentSummary:
        """
        Move an appointment to another doctor/date/time if that doctor is free.

        Raises:
            AppointmentNotFoundError: unknown appointment id
            SlotTakenError: another appointment holds the target triple
        """
        async with self._lock:
            current = self._appointments.get(appointment_id)
            if current is None:
                raise AppointmentNotFoundError(f"Appointment {appointment_id} not found")

            self._ensure_free(doctor_id, on, at, ignore_id=appointment_id)

            updated = current.model_copy(
                update={"doctor_id": doctor_id, "date": on, "time": at}
            )
            self._appointments[appointment_id] = updated
            return self._summarize(updated)

    async def delete(self, appointment_id: int) -> None:
        """
        Remove an appointment.

        Raises:
            AppointmentNotFoundError: unknown appointment id
        """
        async with self._lock:
            if appointment_id not in self._appointments:
                raise AppointmentNotFoundError(f"Appointment {appointment_id} not found")
            del self._appointments[appointment_id]


# Singleton instance for reuse
_clinic_store: Optional[ClinicStore] = None


def get_clinic_store() -> ClinicStore:
    """Get the singleton clinic store instance."""
    global _clinic_store
    if _clinic_store is None:
        _clinic_store = ClinicStore()
    return _clinic_store
