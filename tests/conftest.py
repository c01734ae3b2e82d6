"""
Shared fixtures: a seeded in-memory clinic and services wired to it.

Dates are pinned to a fixed "today" so weekday and past-date rules are
deterministic.
"""

from datetime import date

import pytest

from clinic_booking.services.assignment import DoctorAssignmentResolver
from clinic_booking.services.availability import AvailabilityService
from clinic_booking.services.booking import BookingService
from clinic_booking.services.conversation import ConversationEngine
from clinic_booking.services.sessions import InMemorySessionStore
from clinic_booking.services.store import ClinicStore

TODAY = date(2030, 3, 4)  # Monday


@pytest.fixture
def store():
    """Clinic store seeded with the default doctors."""
    clinic = ClinicStore()
    clinic.seed_doctors()
    return clinic


@pytest.fixture
def availability(store):
    return AvailabilityService(store)


@pytest.fixture
def resolver(availability, store):
    return DoctorAssignmentResolver(availability, store)


@pytest.fixture
def booking(store, availability):
    return BookingService(store, availability)


@pytest.fixture
def sessions():
    return InMemorySessionStore(ttl_seconds=1800)


@pytest.fixture
def engine(store, sessions, availability, booking):
    """Conversation engine whose "today" is TODAY."""
    return ConversationEngine(
        store=store,
        sessions=sessions,
        availability=availability,
        booking=booking,
        today=lambda: TODAY,
    )
