"""
Services layer for the clinic booking chat.
"""

from .assignment import DoctorAssignmentResolver
from .availability import AvailabilityService
from .booking import BookingService
from .conversation import ConversationEngine
from .sessions import InMemorySessionStore, SessionStore
from .store import AppointmentNotFoundError, ClinicStore, SlotTakenError, StoreError

__all__ = [
    "AppointmentNotFoundError",
    "AvailabilityService",
    "BookingService",
    "ClinicStore",
    "ConversationEngine",
    "DoctorAssignmentResolver",
    "InMemorySessionStore",
    "SessionStore",
    "SlotTakenError",
    "StoreError",
]
