"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results.
Used by HTMX for real-time updates.
"""

from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from rental_analysis.calculations import amortization, irr
from rental_analysis.calculations.analysis import PropertyInputs, calculate_rental_analysis
from rental_analysis.calculations.projections import (
    generate_projections,
    projections_to_chart_series,
)
from rental_analysis.calculations.temporary_financing import (
    TemporaryFinancingInputs,
    calculate_temporary_financing_analysis,
    validate_temporary_financing_inputs,
)
from rental_analysis.config import get_settings
from rental_analysis.validation import validate_property_inputs

router = APIRouter()
settings = get_settings()


class TemporaryFinancingInput(BaseModel):
    """Input for a temporary financing (BRRRR) analysis. Percentages are whole numbers."""

    initial_cash_investment: float = 0.0
    renovation_costs: float = 0.0
    temp_financing_amount: float = 0.0
    temp_interest_rate: float = 0.0
    origination_points: float = 0.0
    temp_loan_term_months: int = Field(default_factory=lambda: settings.default_temp_loan_term_months)
    after_repair_value: float = 0.0
    cash_out_ltv: float = Field(default_factory=lambda: settings.default_cash_out_ltv)
    purchase_price: float = 0.0

    def to_inputs(self) -> TemporaryFinancingInputs:
        return TemporaryFinancingInputs(**self.model_dump())


class PropertyInput(BaseModel):
    """Calculator form inputs."""

    property_address: str = ""

    # Property
    purchase_price: float = 0.0
    purchase_closing_costs: float = 0.0
    estimated_repair_costs: float = 0.0

    # Financing
    down_payment: float = 0.0
    loan_interest_rate: float = 0.0
    amortized_over: int = Field(default=30, ge=1, le=50)
    loan_fees: float = 0.0

    # Income & expenses
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

    # Growth
    annual_income_growth: float = 0.0
    annual_expense_growth: float = 0.0
    annual_property_value_growth: float = 0.0

    # Temporary financing
    use_temporary_financing: bool = False
    temporary_financing: Optional[TemporaryFinancingInput] = None

    def to_inputs(self) -> PropertyInputs:
        data = self.model_dump(exclude={"temporary_financing"})
        if self.temporary_financing is not None:
            data["temporary_financing"] = self.temporary_financing.to_inputs()
        return PropertyInputs(**data)


@router.post("/analysis")
async def calculate_analysis(inputs: PropertyInput):
    """Recalculate every metric for the calculator form."""
    analysis = calculate_rental_analysis(inputs.to_inputs())
    return analysis.to_dict()


class MortgageInput(BaseModel):
    """Input for mortgage payment calculation."""

    principal: float
    annual_rate: float  # Decimal, e.g. 0.06
    years: int = Field(default=30, ge=1, le=50)


@router.post("/mortgage")
async def calculate_mortgage(inputs: MortgageInput):
    """Calculate the monthly principal and interest payment."""
    payment = amortization.calculate_mortgage_payment(
        inputs.principal, inputs.annual_rate, inputs.years
    )
    return {
        "monthly_payment": payment,
        "total_payments": payment * inputs.years * 12,
    }


class AmortizationInput(BaseModel):
    """Input for amortization calculation."""

    principal: float
    annual_rate: float
    years: int = Field(default=30, ge=1, le=50)
    extra_monthly_principal: float = 0.0
    lump_sum_payments: Dict[int, float] = {}
    start_date: Optional[date] = None


@router.post("/amortization")
async def calculate_amortization(inputs: AmortizationInput):
    """Generate loan amortization schedule."""
    schedule = amortization.generate_amortization_schedule(
        principal=inputs.principal,
        annual_rate=inputs.annual_rate,
        years=inputs.years,
        extra_monthly_principal=inputs.extra_monthly_principal,
        lump_sum_payments=inputs.lump_sum_payments,
        start_date=inputs.start_date,
    )

    return {
        "schedule": schedule,
        "months": len(schedule),
        "total_interest": amortization.calculate_total_interest(schedule),
        "total_principal": sum(row["principal"] + row["extra_principal"] for row in schedule),
    }


class IRRInput(BaseModel):
    """Input for IRR calculation."""

    cash_flows: List[float]


class IRRResponse(BaseModel):
    """Response with IRR calculation."""

    irr: float
    multiple: float
    profit: float
    npv_at_10_percent: float


@router.post("/irr", response_model=IRRResponse)
async def calculate_irr_endpoint(inputs: IRRInput):
    """Calculate IRR for given cash flows."""
    try:
        return IRRResponse(
            irr=irr.calculate_irr(inputs.cash_flows),
            multiple=irr.calculate_multiple(inputs.cash_flows),
            profit=irr.calculate_profit(inputs.cash_flows),
            npv_at_10_percent=irr.calculate_npv(inputs.cash_flows, 0.10),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/temporary-financing")
async def calculate_temporary_financing(inputs: TemporaryFinancingInput):
    """Run the BRRRR analysis: carrying costs, refinance and cash left in deal."""
    temp_inputs = inputs.to_inputs()
    analysis = calculate_temporary_financing_analysis(
        temp_inputs, refinance_process_months=settings.refinance_process_months
    )
    validation = validate_temporary_financing_inputs(temp_inputs)
    return {
        "analysis": analysis.to_dict(),
        "validation": validation.to_dict(),
    }


@router.post("/temporary-financing/validate")
async def validate_temporary_financing(inputs: TemporaryFinancingInput):
    """Check temporary financing inputs for warnings and errors."""
    return validate_temporary_financing_inputs(inputs.to_inputs()).to_dict()


class ProjectionInput(BaseModel):
    """Input for long-term projections. Growth rates are whole percentages."""

    loan_amount: float = 0.0
    annual_rate: float = 0.0  # Whole percent
    amortization_years: int = Field(default=30, ge=1, le=50)
    monthly_income: float = 0.0
    monthly_operating_expenses: float = 0.0
    property_value: float = 0.0
    income_growth_rate: float = 0.0
    expense_growth_rate: float = 0.0
    property_value_growth_rate: float = 0.0
    years: int = Field(default_factory=lambda: settings.projection_years, ge=1, le=100)


@router.post("/projections")
async def calculate_projections(inputs: ProjectionInput):
    """Year-by-year income, expense, value and equity projections."""
    monthly_payment = amortization.calculate_mortgage_payment(
        inputs.loan_amount, inputs.annual_rate / 100, inputs.amortization_years
    )
    projections = generate_projections(
        loan_amount=inputs.loan_amount,
        monthly_rate=(inputs.annual_rate / 100) / 12,
        total_payments=inputs.amortization_years * 12,
        monthly_payment=monthly_payment,
        monthly_income=inputs.monthly_income,
        monthly_operating_expenses=inputs.monthly_operating_expenses,
        property_value=inputs.property_value,
        income_growth_rate=inputs.income_growth_rate,
        expense_growth_rate=inputs.expense_growth_rate,
        property_value_growth_rate=inputs.property_value_growth_rate,
        years=inputs.years,
    )
    return {
        "monthly_payment": monthly_payment,
        "projections": [p.to_dict() for p in projections],
        "chart": projections_to_chart_series(projections),
    }


@router.post("/validate")
async def validate_inputs(inputs: PropertyInput):
    """Validate form fields; returns a message per invalid field."""
    errors = validate_property_inputs(inputs.to_inputs())
    return {"is_valid": not errors, "errors": errors}
