import math
import re
from datetime import date

from services.errors import ValidationError
from services.formatting import DATE_FORMAT

DATE_PATTERN = re.compile(r"^(\d{2})\.(\d{2})\.(\d{4})$")
WEIGHT_PATTERN = re.compile(r"^\d+(?:[.,]\d+)?$", re.ASCII)
REPS_PATTERN = re.compile(r"^\d+$", re.ASCII)

# Largest value an SQLite INTEGER column holds.
MAX_INTEGER = 2**63 - 1
MIN_TEXT_LENGTH = 2


class InputParser:
    """Parses user text input into validated values, raising ValidationError otherwise."""

    def parse_weight(self, text: str) -> float:
        """Parses a positive, finite weight. Accepts both '82.5' and '82,5'."""
        clean_text = text.strip()
        if not WEIGHT_PATTERN.match(clean_text):
            raise ValidationError(f"'{text}' is not a number.")
        weight = float(clean_text.replace(",", "."))

        if not math.isfinite(weight) or weight <= 0:
            raise ValidationError(f"Weight must be greater than 0, got '{text}'.")
        return weight

    def parse_reps(self, text: str) -> int:
        """Parses a positive whole number of repetitions."""
        clean_text = text.strip()
        if not REPS_PATTERN.match(clean_text):
            raise ValidationError(f"'{text}' is not a whole number.")

        reps = int(clean_text)
        if not 0 < reps <= MAX_INTEGER:
            raise ValidationError(f"Reps must be between 1 and {MAX_INTEGER}, got '{text}'.")
        return reps

    def parse_label(self, text: str, min_length: int = MIN_TEXT_LENGTH) -> str:
        """Trims a free-text name or category and checks its minimum length."""
        clean_text = text.strip()
        if len(clean_text) < min_length:
            raise ValidationError(f"Must be at least {min_length} characters long.")
        return clean_text

    def parse_date(self, text: str) -> date:
        """
        Parses a zero-padded DD.MM.YYYY date.

        The parts must round-trip through a real calendar date, so 31.04.2024
        or 29.02.2023 are rejected rather than rolled over.
        """
        clean_text = text.strip()
        match = DATE_PATTERN.match(clean_text)
        if not match:
            raise ValidationError(f"'{text}' does not match DD.MM.YYYY.")

        day, month, year = (int(part) for part in match.groups())
        try:
            parsed = date(year, month, day)
        except ValueError:
            raise ValidationError(f"'{text}' is not a calendar date.") from None

        if parsed.strftime(DATE_FORMAT) != clean_text:
            raise ValidationError(f"'{text}' is not a calendar date.")
        return parsed
