"""
Rental Property Analysis

Recomputes every metric shown on the calculator from the form inputs.
This is the single entry point used by the API, the HTML results
fragment and the markdown report.
"""

import logging
from dataclasses import dataclass, field, asdict, replace
from datetime import date
from typing import Dict, List, Optional

from rental_analysis.calculations import metrics
from rental_analysis.calculations.amortization import (
    calculate_loan_amount,
    calculate_mortgage_payment,
)
from rental_analysis.calculations.irr import calculate_hold_period_irr
from rental_analysis.calculations.projections import (
    YearProjection,
    calculate_return_on_equity,
    generate_projections,
)
from rental_analysis.calculations.temporary_financing import (
    TemporaryFinancingAnalysis,
    TemporaryFinancingInputs,
    TemporaryFinancingValidation,
    calculate_temporary_financing_analysis,
    validate_temporary_financing_inputs,
)
from rental_analysis.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class PropertyInputs:
    """Everything the calculator form collects.

    Rates, growth and management fee are whole percentages.
    """

    property_address: str = ""

    # Property
    purchase_price: float = 0.0
    purchase_closing_costs: float = 0.0
    estimated_repair_costs: float = 0.0

    # Financing
    down_payment: float = 0.0
    loan_interest_rate: float = 0.0
    amortized_over: int = 30
    loan_fees: float = 0.0

    # Income & expenses (monthly unless noted)
    monthly_rent: float = 0.0
    monthly_property_taxes: float = 0.0
    monthly_insurance: float = 0.0
    monthly_management: float = 0.0
    quarterly_hoa_fees: float = 0.0
    electricity_utility: float = 0.0
    gas_utility: float = 0.0
    water_sewer_utility: float = 0.0
    garbage_utility: float = 0.0
    other_monthly_expenses: float = 0.0

    # Growth (annual %)
    annual_income_growth: float = 0.0
    annual_expense_growth: float = 0.0
    annual_property_value_growth: float = 0.0

    # Temporary financing (BRRRR)
    use_temporary_financing: bool = False
    temporary_financing: Optional[TemporaryFinancingInputs] = None

    @property
    def utilities(self) -> Dict[str, float]:
        return {
            "electricity": self.electricity_utility,
            "gas": self.gas_utility,
            "water_sewer": self.water_sewer_utility,
            "garbage": self.garbage_utility,
        }

    @property
    def uses_temporary_financing(self) -> bool:
        return self.use_temporary_financing and self.temporary_financing is not None


@dataclass
class CalculationTexts:
    """Helper texts shown under individual inputs."""

    annualized_tax_rate: float
    monthly_hoa: float
    annual_hoa: float
    closing_costs_percent: float
    down_payment_percent: float


@dataclass
class RentalAnalysis:
    """All derived metrics for a set of inputs."""

    total_cost_of_project: float
    total_cash_needed: float
    loan_amount: float
    monthly_payment: float
    monthly_management_fee: float
    monthly_hoa_fees: float
    total_monthly_expenses: float
    monthly_cash_flow: float
    annual_cash_flow: float
    cash_on_cash_roi: Optional[float]
    annual_income: float
    annual_operating_expenses: float
    annual_noi: float
    cap_rate: float
    gross_rent_multiplier: float
    annual_debt_service: float
    debt_coverage_ratio: float
    return_on_equity: float
    hold_period_irr: Optional[float]
    texts: CalculationTexts
    projections: List[YearProjection] = field(default_factory=list)
    temporary_financing: Optional[TemporaryFinancingAnalysis] = None
    temporary_financing_validation: Optional[TemporaryFinancingValidation] = None

    @property
    def cash_invested(self) -> float:
        """Cash basis used for ROI: cash left in deal under BRRRR."""
        if self.temporary_financing is not None:
            return self.temporary_financing.final_cash_left_in_deal
        return self.total_cash_needed

    def to_dict(self) -> dict:
        data = asdict(self)
        data["projections"] = [p.to_dict() for p in self.projections]
        if self.temporary_financing is not None:
            data["temporary_financing"] = self.temporary_financing.to_dict()
        if self.temporary_financing_validation is not None:
            data["temporary_financing_validation"] = (
                self.temporary_financing_validation.to_dict()
            )
        data["cash_invested"] = self.cash_invested
        return data


def calculate_calculation_texts(inputs: PropertyInputs) -> CalculationTexts:
    price = inputs.purchase_price
    return CalculationTexts(
        annualized_tax_rate=metrics.annual_tax_rate_from_monthly(
            inputs.monthly_property_taxes, price
        ),
        monthly_hoa=metrics.calculate_hoa_monthly(inputs.quarterly_hoa_fees),
        annual_hoa=inputs.quarterly_hoa_fees * 4,
        closing_costs_percent=(
            (inputs.purchase_closing_costs / price) * 100 if price > 0 else 0.0
        ),
        down_payment_percent=(inputs.down_payment / price) * 100 if price > 0 else 0.0,
    )


def calculate_rental_analysis(
    inputs: PropertyInputs,
    today: Optional[date] = None,
    projection_years: Optional[int] = None,
) -> RentalAnalysis:
    """
    Calculate all metrics for the calculator form.

    With temporary financing the long-term loan is the cash-out refinance
    loan and returns are measured against the cash left in the deal.
    """
    settings = get_settings()
    if projection_years is None:
        projection_years = settings.projection_years

    total_cost_of_project = metrics.calculate_total_cost_of_project(
        inputs.purchase_price,
        inputs.purchase_closing_costs,
        inputs.estimated_repair_costs,
    )
    total_cash_needed = metrics.calculate_total_cash_needed(
        inputs.down_payment,
        inputs.purchase_closing_costs,
        inputs.estimated_repair_costs,
        inputs.loan_fees,
    )

    temp_analysis = None
    temp_validation = None
    property_value = inputs.purchase_price

    if inputs.uses_temporary_financing:
        temp_inputs = inputs.temporary_financing
        if not temp_inputs.purchase_price:
            temp_inputs = replace(temp_inputs, purchase_price=inputs.purchase_price)
        temp_analysis = calculate_temporary_financing_analysis(
            temp_inputs,
            today=today,
            refinance_process_months=settings.refinance_process_months,
        )
        temp_validation = validate_temporary_financing_inputs(temp_inputs)
        loan_amount = temp_analysis.refinance_results.new_loan_amount
        cash_invested = temp_analysis.final_cash_left_in_deal
        initial_equity = cash_invested
        if temp_inputs.after_repair_value > 0:
            property_value = temp_inputs.after_repair_value
    else:
        loan_amount = calculate_loan_amount(inputs.purchase_price, inputs.down_payment)
        cash_invested = total_cash_needed
        initial_equity = inputs.down_payment + inputs.estimated_repair_costs

    monthly_payment = calculate_mortgage_payment(
        loan_amount, inputs.loan_interest_rate / 100, inputs.amortized_over
    )

    monthly_management_fee = metrics.calculate_management_fee(
        inputs.monthly_rent, inputs.monthly_management / 100
    )
    monthly_hoa_fees = metrics.calculate_hoa_monthly(inputs.quarterly_hoa_fees)

    total_monthly_expenses = metrics.calculate_total_monthly_expenses(
        mortgage_payment=monthly_payment,
        property_taxes=inputs.monthly_property_taxes,
        insurance=inputs.monthly_insurance,
        hoa_fees=monthly_hoa_fees,
        management=monthly_management_fee,
        utilities=inputs.utilities,
        custom_expenses=inputs.other_monthly_expenses,
    )

    monthly_cash_flow = metrics.calculate_monthly_cash_flow(
        inputs.monthly_rent, total_monthly_expenses
    )
    annual_cash_flow = monthly_cash_flow * 12

    if cash_invested > 0:
        cash_on_cash_roi = metrics.calculate_cash_on_cash_roi(annual_cash_flow, cash_invested)
    elif temp_analysis is not None:
        # Nothing left in the deal: infinite return
        cash_on_cash_roi = None
    else:
        cash_on_cash_roi = 0.0

    annual_income = inputs.monthly_rent * 12
    # NOI excludes debt service
    annual_operating_expenses = (total_monthly_expenses - monthly_payment) * 12
    annual_noi = metrics.calculate_noi(annual_income, annual_operating_expenses)
    cap_rate = (
        metrics.calculate_cap_rate(annual_noi, total_cost_of_project)
        if total_cost_of_project > 0
        else 0.0
    )

    gross_rent_multiplier = metrics.calculate_gross_rent_multiplier(
        inputs.purchase_price, annual_income
    )
    annual_debt_service = monthly_payment * 12
    debt_coverage_ratio = metrics.calculate_debt_coverage_ratio(
        annual_noi, annual_debt_service
    )

    projections = generate_projections(
        loan_amount=loan_amount,
        monthly_rate=(inputs.loan_interest_rate / 100) / 12,
        total_payments=int(inputs.amortized_over * 12),
        monthly_payment=monthly_payment,
        monthly_income=inputs.monthly_rent,
        monthly_operating_expenses=total_monthly_expenses - monthly_payment,
        property_value=property_value,
        income_growth_rate=inputs.annual_income_growth,
        expense_growth_rate=inputs.annual_expense_growth,
        property_value_growth_rate=inputs.annual_property_value_growth,
        years=projection_years,
    )

    return_on_equity = 0.0
    if projections:
        return_on_equity = calculate_return_on_equity(
            projections[0],
            property_value,
            inputs.annual_property_value_growth,
            initial_equity,
        )

    hold_period_irr = calculate_hold_period_irr(cash_invested, projections)

    logger.debug(
        f"Analysis for '{inputs.property_address}': cash_flow={monthly_cash_flow:.2f} "
        f"noi={annual_noi:.2f} cap_rate={cap_rate:.2f}"
    )

    return RentalAnalysis(
        total_cost_of_project=total_cost_of_project,
        total_cash_needed=total_cash_needed,
        loan_amount=loan_amount,
        monthly_payment=monthly_payment,
        monthly_management_fee=monthly_management_fee,
        monthly_hoa_fees=monthly_hoa_fees,
        total_monthly_expenses=total_monthly_expenses,
        monthly_cash_flow=monthly_cash_flow,
        annual_cash_flow=annual_cash_flow,
        cash_on_cash_roi=cash_on_cash_roi,
        annual_income=annual_income,
        annual_operating_expenses=annual_operating_expenses,
        annual_noi=annual_noi,
        cap_rate=cap_rate,
        gross_rent_multiplier=gross_rent_multiplier,
        annual_debt_service=annual_debt_service,
        debt_coverage_ratio=debt_coverage_ratio,
        return_on_equity=return_on_equity,
        hold_period_irr=hold_period_irr,
        texts=calculate_calculation_texts(inputs),
        projections=projections,
        temporary_financing=temp_analysis,
        temporary_financing_validation=temp_validation,
    )
