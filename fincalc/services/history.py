"""
Calculation history.

Each calculation served by the API leaves a short plain-text summary of
its inputs and result. The engine never touches this module; callers
inject a HistoryRecorder instead.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from typing import Deque, List, Optional, Protocol

from fincalc.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    """A recorded calculation."""

    calculator: str
    input: str
    result: str
    timestamp: datetime = field(default_factory=datetime.now)


class HistoryRecorder(Protocol):
    """Receives a summary of every calculation."""

    def record(self, entry: HistoryEntry) -> None:  # pragma: no cover - interface
        ...


class InMemoryHistory:
    """Bounded, newest-first history held in process memory."""

    def __init__(self, limit: int = 100):
        self._entries: Deque[HistoryEntry] = deque(maxlen=limit)

    def record(self, entry: HistoryEntry) -> None:
        self._entries.appendleft(entry)
        logger.info(f"[{entry.calculator}] {entry.input} -> {entry.result}")

    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()


def format_amount(value: Optional[float], symbol: Optional[str] = None) -> str:
    """Format a currency amount with two decimals and thousands separators."""
    if value is None:
        return "N/A"
    if symbol is None:
        symbol = get_settings().currency_symbol
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


@lru_cache()
def get_history() -> InMemoryHistory:
    """Get the process-wide history instance."""
    return InMemoryHistory(limit=get_settings().history_limit)
