"""
Financial Calculation Engine

Core calculation modules for rental property analysis.
Rates passed to the mortgage helpers are decimals; everything the form
collects is a whole percentage.
"""

from rental_analysis.calculations import (
    amortization,
    analysis,
    irr,
    metrics,
    projections,
    temporary_financing,
)

__all__ = ["amortization", "analysis", "irr", "metrics", "projections", "temporary_financing"]
