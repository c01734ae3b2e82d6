"""
Unit tests for the slot policy.
"""

from datetime import time

import pytest

from clinic_booking.services.slot_policy import (
    DOUBLE,
    SINGLE,
    bookable_times,
    capacity_for,
    is_bookable_time,
)


class TestBookableTimes:
    """Test the fixed daily catalog."""

    def test_catalog_order(self):
        """Catalog is hourly from 07:00 to 18:00 without the lunch hour."""
        assert [t.hour for t in bookable_times()] == [7, 8, 9, 10, 11, 13, 14, 15, 16, 17, 18]

    def test_catalog_times_are_bookable(self):
        for at in bookable_times():
            assert is_bookable_time(at)

    @pytest.mark.parametrize("at", [time(6), time(12), time(19), time(7, 30)])
    def test_off_catalog_times(self, at):
        assert is_bookable_time(at) is False


class TestCapacity:
    """Test capacity classes."""

    @pytest.mark.parametrize("hour", [10, 11, 13, 14, 15])
    def test_overlapping_shift_hours_are_double(self, hour):
        assert capacity_for(time(hour)) == DOUBLE

    @pytest.mark.parametrize("hour", [7, 8, 9, 16, 17, 18])
    def test_edge_hours_are_single(self, hour):
        assert capacity_for(time(hour)) == SINGLE

    def test_capacity_of_unbookable_time(self):
        with pytest.raises(ValueError):
            capacity_for(time(12))
