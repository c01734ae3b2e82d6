"""
Conversation engine - the per-patient booking dialogue.

Every inbound message is dispatched to the handler of the patient's
current step. A handler takes the session state and the raw text and
returns the reply plus the next state; slot computation and persistence
go through the availability and booking services.

Replies that hand control back to the top-level menu end with
MENU_SENTINEL so the transport can show the menu again.
"""

from datetime import date
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from loguru import logger

from clinic_booking.config import (
    MENU_SENTINEL,
    SPECIALTIES,
    format_specialty_menu,
    get_specialty_by_index,
)
from clinic_booking.models.appointment import AppointmentSummary, format_time
from clinic_booking.models.booking import AssignmentConflict, BookingOutcome, ConflictReason
from clinic_booking.models.session import SessionState, Step
from clinic_booking.services.availability import AvailabilityService
from clinic_booking.services.booking import BookingService
from clinic_booking.services.parsing import (
    InputError,
    parse_appointment_date,
    parse_choice,
    parse_clock_time,
)
from clinic_booking.services.sessions import SessionStore, get_session_store
from clinic_booking.services.store import (
    AppointmentNotFoundError,
    ClinicStore,
    StoreError,
    get_clinic_store,
)

MISSING_PATIENT_REPLY = "CPF não informado."
RESET_REPLY = f"Algo deu errado. Voltando ao menu.{MENU_SENTINEL}"
FAILURE_REPLY = f"Ocorreu um erro ao processar sua solicitação. Tente novamente.{MENU_SENTINEL}"
GONE_REPLY = f"Essa consulta não existe mais.{MENU_SENTINEL}"
EXPIRED_REPLY = f"Sua sessão expirou. Voltando ao menu.{MENU_SENTINEL}"

Reply = Tuple[str, SessionState]
Handler = Callable[[str, SessionState, str], Awaitable[Reply]]


class SessionStateError(Exception):
    """The session lacks data its current step depends on."""


def _require(condition: object, step: Step) -> None:
    if not condition:
        raise SessionStateError(f"Session at step '{step.value}' is missing required data")


def _numbered(appointments: List[AppointmentSummary]) -> str:
    return "\n".join(f"{i}. {a.describe()}" for i, a in enumerate(appointments, 1))


def _conflict_reply(conflict: Optional[AssignmentConflict], specialty: str) -> str:
    if conflict is not None and conflict.reason == ConflictReason.NO_DOCTOR_ON_SHIFT:
        return f"Nenhum doutor de {specialty} disponível nesse horário. Escolha outro."
    return f"Todos os doutores de {specialty} estão ocupados nesse horário. Escolha outro."


class ConversationEngine:
    """
    Turn-based state machine driving listing, booking, editing and cancelling.

    Handlers never raise to the caller: validation problems re-prompt the
    same step, store failures reset the dialogue to the menu.
    """

    def __init__(
        self,
        store: Optional[ClinicStore] = None,
        sessions: Optional[SessionStore] = None,
        availability: Optional[AvailabilityService] = None,
        booking: Optional[BookingService] = None,
        today: Callable[[], date] = date.today,
    ):
        self._store = store if store is not None else get_clinic_store()
        self._sessions = sessions if sessions is not None else get_session_store()
        self._availability = (
            availability if availability is not None else AvailabilityService(self._store)
        )
        self._booking = (
            booking if booking is not None else BookingService(self._store, self._availability)
        )
        self._today = today

        self._handlers: Dict[Step, Handler] = {
            Step.MENU: self._menu,
            Step.AGENDAR_ESPECIALIDADE: self._book_specialty,
            Step.AGENDAR_DATA: self._book_date,
            Step.AGENDAR_HORA: self._book_time,
            Step.EDITAR_CONSULTA: self._edit_choose,
            Step.EDITAR_ESPECIALIDADE: self._edit_specialty,
            Step.EDITAR_DATA_NOVA: self._edit_date,
            Step.EDITAR_HORA: self._edit_time,
            Step.CANCELAR_CONSULTA: self._cancel_choose,
            Step.CANCELAR_CONFIRMAR: self._cancel_confirm,
        }

    async def handle_message(self, patient_id: Optional[str], text: Optional[str]) -> str:
        """
        Process one patient turn.

        Args:
            patient_id: Patient CPF
            text: Raw message

        Returns:
            The reply to show the patient
        """
        if not patient_id:
            logger.warning("Message received without patient identifier")
            return MISSING_PATIENT_REPLY

        text = (text or "").strip()
        state = await self._sessions.get(patient_id)
        if state is None:
            expired = await self._sessions.pop_expired(patient_id)
            if expired is not None and expired.step != Step.MENU:
                logger.info(f"Session of {patient_id} expired at step {expired.step.value}")
                await self._sessions.put(patient_id, SessionState())
                return EXPIRED_REPLY
            state = SessionState()

        reply, next_state = await self._dispatch(patient_id, state, text)
        await self._sessions.put(patient_id, next_state)
        return reply

    async def _dispatch(self, patient_id: str, state: SessionState, text: str) -> Reply:
        handler = self._handlers.get(state.step)
        if handler is None:
            logger.warning(f"No handler for step {state.step!r}, resetting {patient_id}")
            return RESET_REPLY, state.reset()

        try:
            return await handler(patient_id, state, text)
        except SessionStateError as e:
            logger.warning(f"Resetting session of {patient_id}: {e}")
            return RESET_REPLY, state.reset()
        except StoreError as e:
            logger.error(f"Store error at step {state.step.value} for {patient_id}: {e}")
            return FAILURE_REPLY, state.reset()
        except Exception as e:
            logger.exception(f"Unexpected error at step {state.step.value}: {e}")
            return FAILURE_REPLY, state.reset()

    # ------------------------------------------------------------------
    # Menu
    # ------------------------------------------------------------------

    async def _menu(self, patient_id: str, state: SessionState, text: str) -> Reply:
        if text == "1":
            appointments = await self._store.find_by_patient(patient_id)
            if not appointments:
                return f"Você não tem consultas agendadas.{MENU_SENTINEL}", state.reset()
            listing = "\n".join(a.describe() for a in appointments)
            return f"Aqui estão suas consultas:\n{listing}{MENU_SENTINEL}", state.reset()

        if text == "2":
            return (
                f"Qual especialidade deseja agendar?\n{format_specialty_menu()}",
                state.reset().advance(Step.AGENDAR_ESPECIALIDADE),
            )

        if text in ("3", "4"):
            upcoming = await self._store.find_upcoming_by_patient(patient_id, self._today())
            action = "editar" if text == "3" else "cancelar"
            if not upcoming:
                return (
                    f"Você não possui consultas futuras para {action}.{MENU_SENTINEL}",
                    state.reset(),
                )
            step = Step.EDITAR_CONSULTA if text == "3" else Step.CANCELAR_CONSULTA
            return (
                f"Escolha a consulta para {action}:\n{_numbered(upcoming)}",
                state.reset().advance(step, appointment_options=upcoming),
            )

        return "Opção inválida. Digite 1, 2, 3 ou 4.", state.reset()

    # ------------------------------------------------------------------
    # Steps shared by booking and editing
    # ------------------------------------------------------------------

    async def _collect_date(self, state: SessionState, text: str, next_step: Step) -> Reply:
        _require(state.specialty, state.step)

        try:
            chosen = parse_appointment_date(text, self._today())
        except InputError as e:
            return e.message, state.advance(state.step)

        slots = await self._availability.open_slots(state.specialty, chosen)
        if not slots:
            return (
                f"Nenhum horário disponível para {state.specialty} em {text}. "
                f"Escolha outra data.",
                state.advance(state.step),
            )

        listing = "\n".join(f"🕒 {format_time(at)}" for at in slots)
        return (
            f"Horários disponíveis para {state.specialty} em {text}:\n{listing}\n\n"
            f"Digite o horário desejado (HH:MM):",
            state.advance(next_step, date=chosen, offered_times=slots),
        )

    async def _collect_time(
        self,
        state: SessionState,
        text: str,
        commit: Callable[..., Awaitable[BookingOutcome]],
    ) -> Tuple[Optional[str], Optional[AppointmentSummary], SessionState]:
        _require(state.specialty and state.date and state.offered_times, state.step)

        try:
            chosen = parse_clock_time(text)
        except InputError as e:
            return e.message, None, state.advance(state.step)

        if chosen not in state.offered_times:
            return (
                "Horário não disponível. Escolha um dos horários listados.",
                None,
                state.advance(state.step),
            )

        outcome = await commit(state.specialty, state.date, chosen)
        if not outcome.success:
            return _conflict_reply(outcome.conflict, state.specialty), None, state.advance(state.step)

        return None, outcome.appointment, state.reset()

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    async def _book_specialty(self, patient_id: str, state: SessionState, text: str) -> Reply:
        index = parse_choice(text, len(SPECIALTIES))
        if index is None:
            return "Especialidade inválida, digite novamente.", state.advance(state.step)
        return (
            "Qual data deseja? (DD/MM/AAAA)",
            state.advance(Step.AGENDAR_DATA, specialty=get_specialty_by_index(index + 1)),
        )

    async def _book_date(self, patient_id: str, state: SessionState, text: str) -> Reply:
        return await self._collect_date(state, text, Step.AGENDAR_HORA)

    async def _book_time(self, patient_id: str, state: SessionState, text: str) -> Reply:
        async def commit(specialty, on, at):
            return await self._booking.book(patient_id, specialty, on, at)

        reply, appointment, next_state = await self._collect_time(state, text, commit)
        if appointment is None:
            return reply, next_state

        return (
            f"✅ Consulta agendada com {appointment.doctor_name} ({appointment.specialty}) "
            f"em {appointment.formatted_date} às {appointment.formatted_time}.{MENU_SENTINEL}",
            next_state,
        )

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    async def _edit_choose(self, patient_id: str, state: SessionState, text: str) -> Reply:
        _require(state.appointment_options, state.step)

        index = parse_choice(text, len(state.appointment_options))
        if index is None:
            return (
                "Escolha inválida. Digite o número da consulta que deseja editar.",
                state.advance(state.step),
            )

        selected = state.appointment_options[index]
        return (
            f"Você escolheu editar a consulta com {selected.doctor_name} ({selected.specialty}) "
            f"em {selected.formatted_date} às {selected.formatted_time}.\n"
            f"Qual nova especialidade deseja?\n{format_specialty_menu()}",
            state.advance(Step.EDITAR_ESPECIALIDADE, selected=selected),
        )

    async def _edit_specialty(self, patient_id: str, state: SessionState, text: str) -> Reply:
        _require(state.selected, state.step)

        index = parse_choice(text, len(SPECIALTIES))
        if index is None:
            return "Especialidade inválida. Digite um número válido.", state.advance(state.step)
        return (
            "Digite a nova data (DD/MM/AAAA):",
            state.advance(Step.EDITAR_DATA_NOVA, specialty=get_specialty_by_index(index + 1)),
        )

    async def _edit_date(self, patient_id: str, state: SessionState, text: str) -> Reply:
        _require(state.selected, state.step)
        return await self._collect_date(state, text, Step.EDITAR_HORA)

    async def _edit_time(self, patient_id: str, state: SessionState, text: str) -> Reply:
        _require(state.selected, state.step)
        appointment_id = state.selected.id

        async def commit(specialty, on, at):
            return await self._booking.reschedule(appointment_id, specialty, on, at)

        try:
            reply, appointment, next_state = await self._collect_time(state, text, commit)
        except AppointmentNotFoundError:
            return GONE_REPLY, state.reset()

        if appointment is None:
            return reply, next_state

        return (
            f"✅ Consulta atualizada com {appointment.doctor_name} ({appointment.specialty}) "
            f"para {appointment.formatted_date} às {appointment.formatted_time}.{MENU_SENTINEL}",
            next_state,
        )

    # ------------------------------------------------------------------
    # Cancelling
    # ------------------------------------------------------------------

    async def _cancel_choose(self, patient_id: str, state: SessionState, text: str) -> Reply:
        _require(state.appointment_options, state.step)

        index = parse_choice(text, len(state.appointment_options))
        if index is None:
            return (
                "Escolha inválida. Digite o número da consulta que deseja cancelar.",
                state.advance(state.step),
            )

        selected = state.appointment_options[index]
        return (
            f"⚠️ Tem certeza que deseja cancelar a consulta com {selected.doctor_name} "
            f"({selected.specialty}) em {selected.formatted_date} às {selected.formatted_time}?"
            f"\n\n1. Sim\n2. Não",
            state.advance(Step.CANCELAR_CONFIRMAR, selected=selected),
        )

    async def _cancel_confirm(self, patient_id: str, state: SessionState, text: str) -> Reply:
        selected = state.selected
        if selected is None:
            return f"Nenhuma consulta selecionada para cancelar.{MENU_SENTINEL}", state.reset()

        if text != "1":
            return f"Cancelamento abortado.{MENU_SENTINEL}", state.reset()

        try:
            await self._booking.cancel(selected)
        except AppointmentNotFoundError:
            return GONE_REPLY, state.reset()

        return (
            f"❌ Consulta com {selected.doctor_name} em {selected.formatted_date} "
            f"às {selected.formatted_time} foi cancelada com sucesso.{MENU_SENTINEL}",
            state.reset(),
        )


# Singleton instance
_conversation_engine: Optional[ConversationEngine] = None


def get_conversation_engine() -> ConversationEngine:
    """Get the singleton conversation engine instance."""
    global _conversation_engine
    if _conversation_engine is None:
        _conversation_engine = ConversationEngine()
    return _conversation_engine
