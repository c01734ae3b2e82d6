"""
Conversation session models.
"""

import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from clinic_booking.models.appointment import AppointmentSummary


class Step(str, Enum):
    """Stages of a patient's dialogue."""

    MENU = "menu"

    AGENDAR_ESPECIALIDADE = "agendar_especialidade"
    AGENDAR_DATA = "agendar_data"
    AGENDAR_HORA = "agendar_hora"

    EDITAR_CONSULTA = "editar_consulta"
    EDITAR_ESPECIALIDADE = "editar_especialidade"
    EDITAR_DATA_NOVA = "editar_data_nova"
    EDITAR_HORA = "editar_hora"

    CANCELAR_CONSULTA = "cancelar_consulta"
    CANCELAR_CONFIRMAR = "cancelar_confirmar"


class SessionState(BaseModel):
    """
    Per-patient dialogue state, replaced on every handled turn.

    Step-scoped fields accumulate across turns and are cleared when the
    dialogue returns to the menu.
    """

    step: Step = Field(default=Step.MENU, description="Current step")

    specialty: Optional[str] = Field(default=None, description="Chosen specialty")
    date: Optional[datetime.date] = Field(default=None, description="Chosen date")
    offered_times: List[datetime.time] = Field(
        default_factory=list,
        description="Times most recently offered; the next time input must be one of them",
    )

    appointment_options: List[AppointmentSummary] = Field(
        default_factory=list,
        description="Future appointments offered for edit or cancel selection",
    )
    selected: Optional[AppointmentSummary] = Field(
        default=None, description="Appointment under edit or cancellation"
    )

    def advance(self, step: Step, **changes) -> "SessionState":
        """Copy of this state moved to another step with some fields changed."""
        changes["step"] = step
        return self.model_copy(update=changes)

    def reset(self) -> "SessionState":
        """Fresh state back at the menu."""
        return SessionState()
