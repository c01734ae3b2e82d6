"""
Appointment data models.
"""

import datetime

from pydantic import BaseModel, Field


def format_date_br(value: datetime.date) -> str:
    """DD/MM/YYYY, the format patients type and read."""
    return value.strftime("%d/%m/%Y")


def format_time(value: datetime.time) -> str:
    """24h HH:MM."""
    return value.strftime("%H:%M")


class Appointment(BaseModel):
    """
    A booked appointment.

    At most one appointment may exist for a given
    (doctor_id, date, time) triple; the store enforces it on write.
    """

    id: int = Field(description="Appointment identifier")
    patient_id: str = Field(description="Patient CPF")
    doctor_id: int = Field(description="Assigned doctor")
    date: datetime.date = Field(description="Calendar date of the appointment")
    time: datetime.time = Field(description="Start time (24h)")

    @property
    def formatted_date(self) -> str:
        return format_date_br(self.date)

    @property
    def formatted_time(self) -> str:
        return format_time(self.time)


class AppointmentSummary(Appointment):
    """
    Appointment joined with the doctor's display data, as listed to patients.
    """

    doctor_name: str = Field(description="Name of the assigned doctor")
    specialty: str = Field(description="Specialty of the assigned doctor")

    def describe(self) -> str:
        """One-line description used in listings and confirmations."""
        return (
            f"📆 {self.formatted_date} às {self.formatted_time} "
            f"com {self.doctor_name} ({self.specialty})"
        )

    def to_listing(self) -> dict:
        """Serializable row with the date in BR format."""
        return {
            "id": self.id,
            "cpf": self.patient_id,
            "especialidade": self.specialty,
            "nome": self.doctor_name,
            "data": self.formatted_date,
            "hora": self.formatted_time,
        }
