"""
Validation of raw patient input.

Each parser returns the parsed value or raises InputError carrying the
re-prompt message for the current step. Nothing is silently coerced.
"""

import re
from datetime import date, datetime, time
from typing import Optional

DATE_PATTERN = re.compile(r"^\d{2}/\d{2}/\d{4}$", re.ASCII)
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$", re.ASCII)
CHOICE_PATTERN = re.compile(r"^\d+$", re.ASCII)

INVALID_DATE_MESSAGE = "Data inválida, digite novamente (DD/MM/AAAA)."
PAST_DATE_MESSAGE = "Essa data já passou. Digite uma data a partir de hoje (DD/MM/AAAA)."
WEEKEND_MESSAGE = "Agendamentos só são permitidos de segunda a sexta. Escolha uma nova data."
INVALID_TIME_MESSAGE = "Formato de horário inválido. Digite no formato HH:MM."


class InputError(ValueError):
    """Raised when patient input cannot be accepted at the current step."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def parse_appointment_date(text: str, today: date) -> date:
    """
    Parse a DD/MM/YYYY date a patient wants to book.

    Args:
        text: Raw input
        today: Reference day; earlier dates are rejected

    Returns:
        The calendar date

    Raises:
        InputError: malformed, impossible (e.g. 31/02), past or weekend date
    """
    if not DATE_PATTERN.match(text):
        raise InputError(INVALID_DATE_MESSAGE)

    try:
        parsed = datetime.strptime(text, "%d/%m/%Y").date()
    except ValueError:
        raise InputError(INVALID_DATE_MESSAGE)

    if parsed < today:
        raise InputError(PAST_DATE_MESSAGE)
    if parsed.weekday() >= 5:
        raise InputError(WEEKEND_MESSAGE)

    return parsed


def parse_clock_time(text: str) -> time:
    """
    Parse a 24h HH:MM time.

    Raises:
        InputError: if the text is not a valid HH:MM time
    """
    match = TIME_PATTERN.match(text)
    if not match:
        raise InputError(INVALID_TIME_MESSAGE)
    return time(int(match.group(1)), int(match.group(2)))


def parse_choice(text: str, size: int) -> Optional[int]:
    """
    Parse a 1-based menu choice.

    Returns:
        The zero-based index, or None if the text is not a number in 1..size
    """
    if not CHOICE_PATTERN.match(text):
        return None
    choice = int(text)
    if choice < 1 or choice > size:
        return None
    return choice - 1
