"""
Temporary Financing Calculations (BRRRR)

Buy, Rehab, Rent, Refinance, Repeat: short-term financing (hard money or
bridge loans) carries the purchase and renovation, then a cash-out
refinance against the after-repair value (ARV) pays it off.

The analysis chains four steps:
    interest + points cost -> total invested capital
    -> refinance proceeds -> cash left in the deal,
and dates the long-term rental analysis from the end of the temporary loan.
"""

import logging
from dataclasses import dataclass, field, asdict
from datetime import date
from typing import List, Optional

from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

LTV_WARNING_THRESHOLD = 80.0
RATE_WARNING_THRESHOLD = 20.0
TERM_WARNING_THRESHOLD_MONTHS = 12


@dataclass
class TemporaryFinancingInputs:
    """Inputs for a BRRRR / temporary financing analysis.

    Rates, points and LTV are whole percentages.
    """

    initial_cash_investment: float = 0.0
    renovation_costs: float = 0.0
    temp_financing_amount: float = 0.0
    temp_interest_rate: float = 0.0
    origination_points: float = 0.0
    temp_loan_term_months: int = 6
    after_repair_value: float = 0.0
    cash_out_ltv: float = 75.0
    # Only used for validation
    purchase_price: float = 0.0


@dataclass
class TemporaryFinancingCosts:
    interest_cost: float = 0.0
    points_cost: float = 0.0
    total_cost: float = 0.0


@dataclass
class RefinanceResult:
    new_loan_amount: float
    cash_returned: float
    loan_to_value_used: float


@dataclass
class TemporaryFinancingAnalysis:
    temp_financing_costs: TemporaryFinancingCosts
    total_initial_investment: float
    refinance_results: RefinanceResult
    final_cash_left_in_deal: float
    analysis_start_date: date
    temp_loan_term_months: int
    is_using_temporary_financing: bool = True

    def to_dict(self) -> dict:
        data = asdict(self)
        data["analysis_start_date"] = self.analysis_start_date.isoformat()
        return data


@dataclass
class TemporaryFinancingValidation:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


def calculate_temporary_financing_costs(
    amount: float,
    interest_rate: float,
    term_months: float,
    points: float,
) -> TemporaryFinancingCosts:
    """
    Calculate the cost of carrying a temporary loan.

    Interest is simple interest over the term; points are charged once on
    the loan amount.

    Args:
        amount: Temporary financing amount
        interest_rate: Annual interest rate (e.g., 12 for 12%)
        term_months: Loan term in months
        points: Origination points (e.g., 2 for 2%)

    Returns:
        Interest, points and total cost
    """
    if amount <= 0:
        return TemporaryFinancingCosts()

    interest_cost = amount * (interest_rate / 100) * (term_months / 12)
    points_cost = amount * (points / 100)

    return TemporaryFinancingCosts(
        interest_cost=interest_cost,
        points_cost=points_cost,
        total_cost=interest_cost + points_cost,
    )


def calculate_cash_out_refinance(
    after_repair_value: float,
    refinance_ltv: float,
    temp_loan_balance: float,
) -> RefinanceResult:
    """
    Size the cash-out refinance against the ARV.

    Cash returned is what is left of the new loan after paying off the
    temporary loan, never negative.
    """
    new_loan_amount = after_repair_value * (refinance_ltv / 100)
    cash_returned = max(0.0, new_loan_amount - temp_loan_balance)

    return RefinanceResult(
        new_loan_amount=new_loan_amount,
        cash_returned=cash_returned,
        loan_to_value_used=refinance_ltv,
    )


def calculate_total_initial_investment(
    initial_cash: float, renovation_costs: float, temp_financing_costs: float
) -> float:
    return initial_cash + renovation_costs + temp_financing_costs


def calculate_final_cash_left_in_deal(
    total_initial_investment: float, cash_returned_at_refinance: float
) -> float:
    """Net cash remaining in the investment after the refinance (floored at 0)."""
    return max(0.0, total_initial_investment - cash_returned_at_refinance)


def calculate_analysis_start_date(
    renovation_months: int,
    refinance_process_months: int = 1,
    today: Optional[date] = None,
) -> date:
    """Date the long-term rental analysis begins: after renovation and refinance."""
    if today is None:
        today = date.today()
    return today + relativedelta(months=renovation_months + refinance_process_months)


def calculate_temporary_financing_analysis(
    inputs: TemporaryFinancingInputs,
    today: Optional[date] = None,
    refinance_process_months: int = 1,
) -> TemporaryFinancingAnalysis:
    """
    Run the full temporary financing analysis.

    The temporary loan is assumed to be paid off in full by the refinance,
    and its term is used as the renovation period for the start date.
    """
    temp_costs = calculate_temporary_financing_costs(
        inputs.temp_financing_amount,
        inputs.temp_interest_rate,
        inputs.temp_loan_term_months,
        inputs.origination_points,
    )

    total_initial_investment = calculate_total_initial_investment(
        inputs.initial_cash_investment,
        inputs.renovation_costs,
        temp_costs.total_cost,
    )

    refinance_results = calculate_cash_out_refinance(
        inputs.after_repair_value,
        inputs.cash_out_ltv,
        inputs.temp_financing_amount,
    )

    final_cash_left_in_deal = calculate_final_cash_left_in_deal(
        total_initial_investment,
        refinance_results.cash_returned,
    )

    analysis_start_date = calculate_analysis_start_date(
        inputs.temp_loan_term_months, refinance_process_months, today=today
    )

    logger.debug(
        f"Temporary financing: invested={total_initial_investment:.2f} "
        f"returned={refinance_results.cash_returned:.2f} "
        f"left_in_deal={final_cash_left_in_deal:.2f}"
    )

    return TemporaryFinancingAnalysis(
        temp_financing_costs=temp_costs,
        total_initial_investment=total_initial_investment,
        refinance_results=refinance_results,
        final_cash_left_in_deal=final_cash_left_in_deal,
        analysis_start_date=analysis_start_date,
        temp_loan_term_months=inputs.temp_loan_term_months,
    )


def validate_temporary_financing_inputs(
    inputs: TemporaryFinancingInputs,
) -> TemporaryFinancingValidation:
    """
    Check temporary financing inputs against common lending practice.

    Warnings are advisory. An error means the refinance cannot retire the
    temporary loan.
    """
    result = TemporaryFinancingValidation()

    if (
        inputs.after_repair_value > 0
        and inputs.after_repair_value <= inputs.purchase_price + inputs.renovation_costs
    ):
        result.warnings.append(
            "ARV should typically be higher than purchase price + renovation costs"
        )

    if inputs.cash_out_ltv > LTV_WARNING_THRESHOLD:
        result.warnings.append(
            "Cash-out refinance LTV above 80% may be difficult to obtain"
        )

    if inputs.temp_interest_rate > RATE_WARNING_THRESHOLD:
        result.warnings.append("Temporary interest rate above 20% is very expensive")

    if inputs.temp_loan_term_months > TERM_WARNING_THRESHOLD_MONTHS:
        result.warnings.append(
            "Temporary financing terms longer than 12 months are uncommon"
        )

    if inputs.after_repair_value > 0 and inputs.temp_financing_amount > 0:
        max_refinance_amount = inputs.after_repair_value * (inputs.cash_out_ltv / 100)
        if max_refinance_amount < inputs.temp_financing_amount:
            result.errors.append(
                "Refinance loan amount may not cover temporary financing balance"
            )

    return result
