"""
Data models for the clinic booking chat.
"""

from .appointment import Appointment, AppointmentSummary
from .booking import (
    Assignment,
    AssignmentConflict,
    AssignmentResult,
    BookingOutcome,
    ConflictReason,
)
from .doctor import Doctor
from .session import SessionState, Step

__all__ = [
    "Appointment",
    "AppointmentSummary",
    "Assignment",
    "AssignmentConflict",
    "AssignmentResult",
    "BookingOutcome",
    "ConflictReason",
    "Doctor",
    "SessionState",
    "Step",
]
