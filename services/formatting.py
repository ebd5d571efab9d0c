"""
Helpers for rendering values in bot messages.
"""
from datetime import date, datetime
from typing import List

# Telegram rejects messages over 4096 characters.
MAX_MESSAGE_LENGTH = 4000

DATE_FORMAT = "%d.%m.%Y"


def chunk_list(items: List, chunk_size: int) -> List[List]:
    """Splits a list into sublists of fixed size."""
    if chunk_size < 1:
        chunk_size = 1
    return [items[i:i + chunk_size] for i in range(0, len(items), chunk_size)]


def format_weight(weight: float) -> str:
    """Formats a weight without a trailing '.0' for whole numbers."""
    return f"{weight:.10g}"


def format_day(day: date) -> str:
    return day.strftime(DATE_FORMAT)


def format_time(moment: datetime) -> str:
    """Returns the time of day as HH:MM, or '' for midnight-only timestamps."""
    if moment.hour == moment.minute == moment.second == 0:
        return ""
    return moment.strftime("%H:%M")


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """
    Splits text into ordered chunks of at most ``limit`` characters.

    Lines are kept whole where they fit; a single line longer than the limit
    is cut into fixed-size pieces.
    """
    if limit < 1:
        raise ValueError("limit must be positive")
    if len(text) <= limit:
        return [text]

    chunks: List[str] = []
    current = ""
    for line in text.splitlines(keepends=True):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        if len(current) + len(line) > limit:
            chunks.append(current)
            current = ""
        current += line
    if current:
        chunks.append(current)
    return chunks
