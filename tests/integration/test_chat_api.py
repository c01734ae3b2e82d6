"""
Integration tests for the Chat API.
"""

from datetime import date, timedelta

import pytest
from httpx import ASGITransport, AsyncClient

import clinic_booking.services.conversation as conversation
from clinic_booking.api.chat_server import app
from clinic_booking.client import ChatClient
from clinic_booking.models.session import Step
from clinic_booking.services.conversation import ConversationEngine
from clinic_booking.services.sessions import InMemorySessionStore
from clinic_booking.services.store import get_clinic_store

PATIENT = "11144477735"


def next_monday() -> date:
    today = date.today()
    return today + timedelta(days=7 - today.weekday())


@pytest.fixture(autouse=True)
def sessions(monkeypatch):
    """Fresh doctors, appointments and sessions for each test."""
    store = get_clinic_store()
    store.reset()
    store.seed_doctors()
    session_store = InMemorySessionStore(ttl_seconds=1800)
    monkeypatch.setattr(
        conversation,
        "_conversation_engine",
        ConversationEngine(store=store, sessions=session_store),
    )
    yield session_store
    store.reset()


@pytest.fixture
async def client():
    """Create an async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def chat(client, message, cpf=PATIENT):
    response = await client.post("/chat", json={"cpf": cpf, "message": message})
    assert response.status_code == 200
    return response.json()["reply"]


class TestHealthEndpoint:
    """Test health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestChatEndpoint:
    """Test the turn endpoint."""

    @pytest.mark.asyncio
    async def test_missing_cpf(self, client):
        response = await client.post("/chat", json={"message": "1"})
        assert response.json() == {"reply": "CPF não informado."}

    @pytest.mark.asyncio
    async def test_missing_message_is_handled(self, client):
        reply = await chat(client, None)
        assert reply == "Opção inválida. Digite 1, 2, 3 ou 4."

    @pytest.mark.asyncio
    async def test_booking_over_http(self, client):
        day = next_monday().strftime("%d/%m/%Y")

        await chat(client, "2")
        await chat(client, "1")
        slots_reply = await chat(client, day)
        assert "🕒 07:00" in slots_reply

        reply = await chat(client, "07:00")
        assert reply.startswith("✅ Consulta agendada com Dr. Dudu (Clínico Geral)")
        assert reply.endswith("$MENU$")

    @pytest.mark.asyncio
    async def test_turns_use_the_test_session_store(self, client, sessions):
        assert len(sessions) == 0

        await chat(client, "2")

        state = await sessions.get(PATIENT)
        assert state.step == Step.AGENDAR_ESPECIALIDADE


class TestAppointmentsEndpoint:
    """Test appointment listings."""

    @pytest.mark.asyncio
    async def test_patient_listing(self, client):
        day = next_monday()
        for message in ("2", "1", day.strftime("%d/%m/%Y"), "07:00"):
            await chat(client, message)
        for message in ("2", "4", day.strftime("%d/%m/%Y"), "10:00"):
            await chat(client, message, cpf="22255588846")

        response = await client.post("/chat/consultas", json={"cpf": PATIENT})

        assert response.status_code == 200
        rows = response.json()
        assert len(rows) == 1
        assert rows[0]["data"] == day.strftime("%d/%m/%Y")
        assert rows[0]["hora"] == "07:00"
        assert rows[0]["nome"] == "Dr. Dudu"
        assert rows[0]["especialidade"] == "Clínico Geral"

    @pytest.mark.asyncio
    async def test_admin_listing(self, client):
        day = next_monday().strftime("%d/%m/%Y")
        for message in ("2", "1", day, "07:00"):
            await chat(client, message)
        for message in ("2", "1", day, "08:00"):
            await chat(client, message, cpf="22255588846")

        response = await client.post("/chat/consultas", json={"cpf": PATIENT, "tipo": "admin"})

        rows = response.json()
        assert [row["hora"] for row in rows] == ["07:00", "08:00"]
        assert {row["cpf"] for row in rows} == {PATIENT, "22255588846"}


class TestChatClientAgainstApp:
    """The console client talking to the real app."""

    @pytest.mark.asyncio
    async def test_sentinel_is_consumed(self):
        chat_client = ChatClient(PATIENT, transport=ASGITransport(app=app))
        try:
            reply = await chat_client.send("1")
        finally:
            await chat_client.close()

        assert reply.text == "Você não tem consultas agendadas."
        assert reply.back_to_menu is True
