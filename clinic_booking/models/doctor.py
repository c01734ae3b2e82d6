"""
Doctor reference data.
"""

from datetime import time

from pydantic import BaseModel, Field


class Doctor(BaseModel):
    """
    A doctor of the clinic, seeded once and never mutated.
    """

    id: int = Field(description="Doctor identifier, also the assignment tie-break key")
    name: str = Field(description="Display name")
    specialty: str = Field(description="Specialty from the fixed catalog")
    shift_start: time = Field(description="First bookable time of the shift")
    shift_end: time = Field(description="Last bookable time of the shift")

    def works_at(self, at: time) -> bool:
        """Whether the shift window (inclusive on both ends) contains the time."""
        return self.shift_start <= at <= self.shift_end

    model_config = {"frozen": True}
