"""
IRR and NPV Calculations

Implements IRR using Newton-Raphson method, matching Excel's IRR/NPV functions.
"""

import logging
import math
from typing import List, Optional, Sequence

from rental_analysis.calculations.projections import YearProjection

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 100
TOLERANCE = 1e-7
DEFAULT_GUESS = 0.1


def calculate_npv(cash_flows: Sequence[float], discount_rate: float) -> float:
    """
    Calculate NPV (Net Present Value) of cash flows.

    The first cash flow is at period 0 and is not discounted.

    Args:
        cash_flows: Array of cash flows (negative = outflow, positive = inflow)
        discount_rate: Periodic discount rate (e.g., 0.10 for 10%)

    Returns:
        NPV value
    """
    npv = 0.0
    for period, cf in enumerate(cash_flows):
        npv += cf / ((1 + discount_rate) ** period)
    return npv


def _npv_derivative(cash_flows: Sequence[float], rate: float) -> float:
    """Calculate derivative of NPV with respect to rate (for Newton-Raphson)."""
    dnpv = 0.0
    for period, cf in enumerate(cash_flows):
        dnpv -= (period * cf) / ((1 + rate) ** (period + 1))
    return dnpv


def calculate_irr(cash_flows: Sequence[float], guess: float = DEFAULT_GUESS) -> float:
    """
    Calculate IRR (Internal Rate of Return) using Newton-Raphson method.

    Matches Excel's IRR() function behavior for periodic cash flows.

    Args:
        cash_flows: Array of periodic cash flows
        guess: Initial guess for rate (default 0.1 = 10%)

    Returns:
        Periodic IRR as decimal (e.g., 0.15 for 15%)

    Raises:
        ValueError: If IRR cannot be calculated
    """
    if len(cash_flows) < 2:
        raise ValueError("At least 2 cash flows required")

    has_positive = any(cf > 0 for cf in cash_flows)
    has_negative = any(cf < 0 for cf in cash_flows)

    if not has_positive or not has_negative:
        raise ValueError("Cash flows must contain both positive and negative values")

    rate = guess

    for _ in range(MAX_ITERATIONS):
        try:
            npv = calculate_npv(cash_flows, rate)
            dnpv = _npv_derivative(cash_flows, rate)
        except (OverflowError, ZeroDivisionError):
            # Discount factors left float range; the iteration has diverged
            raise ValueError("IRR calculation did not converge")

        if abs(dnpv) < TOLERANCE:
            raise ValueError("IRR calculation failed: derivative too small")

        new_rate = rate - npv / dnpv

        if not math.isfinite(new_rate):
            raise ValueError("IRR calculation did not converge")

        if new_rate <= -1:
            # Keep the discount factor defined
            new_rate = (rate - 1) / 2

        if abs(new_rate - rate) < TOLERANCE:
            return new_rate

        rate = new_rate

    raise ValueError("IRR calculation did not converge")


def calculate_multiple(cash_flows: Sequence[float]) -> float:
    """
    Calculate equity multiple.

    Args:
        cash_flows: Array of cash flows (investments are negative)

    Returns:
        Multiple (e.g., 2.0 = 2.0x return)
    """
    total_inflows = sum(cf for cf in cash_flows if cf > 0)
    total_outflows = abs(sum(cf for cf in cash_flows if cf < 0))

    if total_outflows == 0:
        raise ValueError("No investment (outflows) found")

    return total_inflows / total_outflows


def calculate_profit(cash_flows: Sequence[float]) -> float:
    """Calculate profit (total inflows minus total outflows)."""
    return sum(cash_flows)


def hold_period_cash_flows(
    initial_investment: float, projections: List[YearProjection]
) -> List[float]:
    """Investment at year 0, annual cash flows, plus equity in the final year."""
    flows = [-initial_investment]
    flows.extend(p.annual_cash_flow for p in projections)
    if projections:
        flows[-1] += projections[-1].equity
    return flows


def calculate_hold_period_irr(
    initial_investment: float, projections: List[YearProjection]
) -> Optional[float]:
    """
    Annual IRR over the projection horizon, as decimal.

    Returns None when no cash is invested or the IRR is undefined.
    """
    if initial_investment <= 0 or not projections:
        return None

    try:
        return calculate_irr(hold_period_cash_flows(initial_investment, projections))
    except ValueError as e:
        logger.debug(f"Hold period IRR unavailable: {e}")
        return None
