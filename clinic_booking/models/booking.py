"""
Booking-related data models.
"""

import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field

from clinic_booking.models.appointment import AppointmentSummary
from clinic_booking.models.doctor import Doctor


class ConflictReason(str, Enum):
    """Why a (specialty, date, time) request could not be given a doctor."""

    NO_DOCTOR_ON_SHIFT = "no_doctor_on_shift"
    ALL_DOCTORS_BUSY = "all_doctors_busy"
    SLOT_FULL = "slot_full"


class Assignment(BaseModel):
    """
    A free doctor chosen for a requested slot.
    """

    doctor: Doctor
    date: datetime.date
    time: datetime.time


class AssignmentConflict(BaseModel):
    """
    No doctor is free for the requested slot; the patient must pick again.
    """

    specialty: str
    date: datetime.date
    time: datetime.time
    reason: ConflictReason
    candidates_checked: int = Field(default=0, description="Doctors on shift that were scanned")


AssignmentResult = Union[Assignment, AssignmentConflict]


class BookingOutcome(BaseModel):
    """
    Result of a booking or rescheduling attempt.
    """

    success: bool = Field(description="Whether the appointment was written")
    appointment: Optional[AppointmentSummary] = Field(
        default=None, description="The booked or updated appointment"
    )
    conflict: Optional[AssignmentConflict] = Field(
        default=None, description="Why no doctor could be assigned"
    )
