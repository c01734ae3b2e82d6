"""
Chat API Server.

A FastAPI transport in front of the conversation engine: one POST per
patient turn, plus an appointment listing endpoint.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel

from clinic_booking.config import get_settings
from clinic_booking.services.conversation import get_conversation_engine
from clinic_booking.services.store import StoreError, get_clinic_store

# ============================================================================
# Data Models
# ============================================================================


class ChatRequest(BaseModel):
    """One patient turn."""

    cpf: Optional[str] = None
    message: Optional[str] = None


class ChatResponse(BaseModel):
    """Reply to show; may end with the menu sentinel."""

    reply: str


class AppointmentsRequest(BaseModel):
    """Listing request; tipo "admin" lists the whole clinic."""

    cpf: Optional[str] = None
    tipo: Optional[str] = None


class AppointmentRow(BaseModel):
    """Appointment row with the date in DD/MM/YYYY."""

    id: int
    cpf: str
    especialidade: str
    nome: str
    data: str
    hora: str


# ============================================================================
# FastAPI Application
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting Chat API Server")
    get_clinic_store().seed_doctors()
    yield
    # Shutdown
    logger.info("Shutting down Chat API Server")


app = FastAPI(
    title="Clinic Booking Chat API",
    description="Turn-based chat for booking medical appointments",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware for the browser chat widget
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# API Endpoints
# ============================================================================


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@app.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest):
    """
    Handle one patient message.

    The engine always produces a reply, including for a missing CPF
    or a lost session.
    """
    reply = await get_conversation_engine().handle_message(request.cpf, request.message)
    return ChatResponse(reply=reply)


@app.post("/chat/consultas", response_model=List[AppointmentRow])
async def list_appointments(request: AppointmentsRequest):
    """List a patient's appointments, or every appointment for "admin"."""
    store = get_clinic_store()

    try:
        if request.tipo == "admin":
            appointments = await store.find_all()
        else:
            appointments = await store.find_by_patient(request.cpf or "")
    except StoreError as e:
        logger.error(f"Error listing appointments: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erro ao buscar consultas.",
        )

    return [AppointmentRow(**a.to_listing()) for a in appointments]


# ============================================================================
# Run Server
# ============================================================================


def run_server(host: Optional[str] = None, port: Optional[int] = None):
    """Run the chat API server."""
    import uvicorn

    settings = get_settings()

    # Sessions and appointments live in process memory: a single worker only
    uvicorn.run(
        "clinic_booking.api.chat_server:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=False,
        workers=1,
    )


if __name__ == "__main__":
    run_server()
