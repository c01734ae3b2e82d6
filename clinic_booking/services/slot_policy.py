"""
Slot Policy - which clock times are bookable and how many
appointments each of them tolerates per specialty.

Pure and stateless; identical for every specialty. The specialty-level
ceiling (number of doctors) is applied by the availability service.
"""

from datetime import time
from typing import Tuple

from clinic_booking.config import BOOKABLE_TIMES, DOUBLE_CAPACITY_TIMES

SINGLE = 1
DOUBLE = 2


def bookable_times() -> Tuple[time, ...]:
    """The fixed daily catalog, in display order."""
    return BOOKABLE_TIMES


def is_bookable_time(at: time) -> bool:
    """True iff the time belongs to the catalog."""
    return at in BOOKABLE_TIMES


def capacity_for(at: time) -> int:
    """
    Concurrency class of a catalog time.

    Raises:
        ValueError: if the time is not bookable
    """
    if not is_bookable_time(at):
        raise ValueError(f"{at.strftime('%H:%M')} is not a bookable time")
    return DOUBLE if at in DOUBLE_CAPACITY_TIMES else SINGLE
