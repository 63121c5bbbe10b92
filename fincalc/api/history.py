"""
Calculation history API endpoints.
"""

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from fincalc.services.history import InMemoryHistory, get_history

router = APIRouter()


class HistoryEntryResponse(BaseModel):
    """A recorded calculation summary."""

    calculator: str
    input: str
    result: str
    timestamp: datetime


@router.get("", response_model=List[HistoryEntryResponse])
async def list_history(history: InMemoryHistory = Depends(get_history)):
    """List recorded calculations, newest first."""
    return [
        HistoryEntryResponse(
            calculator=entry.calculator,
            input=entry.input,
            result=entry.result,
            timestamp=entry.timestamp,
        )
        for entry in history.entries()
    ]


@router.delete("", status_code=204)
async def clear_history(history: InMemoryHistory = Depends(get_history)):
    """Remove all recorded calculations."""
    history.clear()
