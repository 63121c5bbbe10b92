"""
Services used by the API layer around the calculation engine.
"""

from fincalc.services.history import (
    HistoryEntry,
    HistoryRecorder,
    InMemoryHistory,
    format_amount,
    get_history,
)

__all__ = [
    "HistoryEntry",
    "HistoryRecorder",
    "InMemoryHistory",
    "format_amount",
    "get_history",
]
