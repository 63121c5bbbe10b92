"""
API routes for the financial calculators.
"""

from fastapi import APIRouter

from fincalc.api import calculations, history

router = APIRouter()

# Include sub-routers
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
router.include_router(history.router, prefix="/history", tags=["history"])
