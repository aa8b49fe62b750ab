"""
API routes for the rental property calculator.
"""

from fastapi import APIRouter

from rental_analysis.api import calculations, reports

router = APIRouter()

# Include sub-routers
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
router.include_router(reports.router, prefix="/reports", tags=["reports"])
