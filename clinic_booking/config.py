"""
Configuration management for the clinic booking chat.

This module provides centralized configuration using Pydantic settings
for type-safe environment variable management, plus the clinic's fixed
business catalogs (specialties, bookable times, seeded doctors).
"""

from datetime import time
from functools import lru_cache
from typing import List, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Configuration
    app_name: str = Field(default="clinic-booking", alias="APP_NAME")
    clinic_name: str = Field(default="Clínica Saúde Integrada", alias="CLINIC_NAME")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Conversation sessions
    session_ttl_seconds: int = Field(default=1800, alias="SESSION_TTL_SECONDS")

    # Number of assign-and-commit rounds before a late conflict is reported
    booking_commit_attempts: int = Field(default=3, alias="BOOKING_COMMIT_ATTEMPTS")

    # Console client
    chat_api_url: str = Field(default="http://localhost:3000", alias="CHAT_API_URL")
    chat_api_timeout: int = Field(default=10, alias="CHAT_API_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once,
    improving performance for repeated access.
    """
    return Settings()


# Reply suffix telling the transport to show the top-level menu again
MENU_SENTINEL = "$MENU$"

MENU_TEXT = (
    "Como posso ajudar?\n"
    "1. Ver minhas consultas\n"
    "2. Agendar consulta\n"
    "3. Editar consulta\n"
    "4. Cancelar consulta"
)

# Ordered specialty catalog, shown 1-based in every prompt
SPECIALTIES: Tuple[str, ...] = (
    "Clínico Geral",
    "Nutrologo",
    "Dermatologista",
    "Pediatra",
    "Otorrinolaringologista",
    "Cardiologista",
    "Psiquiatra",
    "Oftalmologista",
    "Endocrinologista",
    "Neurologista",
)

# Bookable clock times, hourly ticks across the morning and afternoon shifts
BOOKABLE_TIMES: Tuple[time, ...] = tuple(
    time(hour) for hour in (7, 8, 9, 10, 11, 13, 14, 15, 16, 17, 18)
)

# Times covered by both shifts, so two appointments may run in parallel
DOUBLE_CAPACITY_TIMES: Tuple[time, ...] = tuple(
    time(hour) for hour in (10, 11, 13, 14, 15)
)

MORNING_SHIFT = (time(7), time(16))
AFTERNOON_SHIFT = (time(10), time(19))

# (name, specialty, shift) - ids are assigned in this order when seeding
DOCTOR_SEED: List[Tuple[str, str, Tuple[time, time]]] = [
    ("Dr. Dudu", "Clínico Geral", MORNING_SHIFT),
    ("Dr. Guilherme Arana", "Clínico Geral", AFTERNOON_SHIFT),
    ("Dr. Alan Franco", "Nutrologo", MORNING_SHIFT),
    ("Dr. Jonathan Calleri", "Nutrologo", AFTERNOON_SHIFT),
    ("Dra. Martha", "Dermatologista", MORNING_SHIFT),
    ("Dra. Cristiane", "Dermatologista", AFTERNOON_SHIFT),
    ("Dr. Ronaldinho Gaúcho", "Pediatra", MORNING_SHIFT),
    ("Dr. Ricardo Kaka", "Pediatra", AFTERNOON_SHIFT),
    ("Dr. Denervoso", "Otorrinolaringologista", MORNING_SHIFT),
    ("Dr. Dida", "Otorrinolaringologista", AFTERNOON_SHIFT),
    ("Dr. Rogério Ceni", "Cardiologista", MORNING_SHIFT),
    ("Dra. Ana Júlia", "Cardiologista", AFTERNOON_SHIFT),
    ("Dra. Soraia", "Psiquiatra", MORNING_SHIFT),
    ("Dra. Judite", "Psiquiatra", AFTERNOON_SHIFT),
    ("Dr. Carlito", "Oftalmologista", MORNING_SHIFT),
    ("Dra. Joaquina", "Oftalmologista", AFTERNOON_SHIFT),
    ("Dr. Kendrick LaMar", "Endocrinologista", MORNING_SHIFT),
    ("Dra. Eva Rios", "Endocrinologista", AFTERNOON_SHIFT),
    ("Dr. Doidão", "Neurologista", MORNING_SHIFT),
    ("Dr. Mickey", "Neurologista", AFTERNOON_SHIFT),
]


def get_specialty_by_index(index: int) -> str | None:
    """Get a specialty by its 1-based position in the catalog."""
    if 1 <= index <= len(SPECIALTIES):
        return SPECIALTIES[index - 1]
    return None


def format_specialty_menu() -> str:
    """Numbered specialty list for display."""
    return "\n".join(f"{i}. {name}" for i, name in enumerate(SPECIALTIES, 1))
