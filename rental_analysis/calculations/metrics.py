"""
Investment Metric Calculations

Single-formula metrics used by the rental analysis: returns, income,
project costs and monthly expenses.
"""

from typing import Mapping, Optional


def calculate_cash_on_cash_roi(
    annual_cash_flow: float, total_cash_invested: float
) -> float:
    """
    Calculate Cash-on-Cash Return on Investment.

    Args:
        annual_cash_flow: Annual cash flow after all expenses
        total_cash_invested: Down payment + closing costs + repairs (+ fees)

    Returns:
        ROI as a whole percentage (e.g., 5.0 for 5%)

    Raises:
        ValueError: If total cash invested is zero
    """
    if total_cash_invested == 0:
        raise ValueError("Total cash invested cannot be zero")

    return (annual_cash_flow / total_cash_invested) * 100


def calculate_noi(annual_income: float, annual_operating_expenses: float) -> float:
    """Net Operating Income: income minus operating expenses (no debt service)."""
    return annual_income - annual_operating_expenses


def calculate_cap_rate(noi: float, total_cost_of_project: float) -> float:
    """
    Calculate Capitalization Rate.

    Raises:
        ValueError: If total cost is zero
    """
    if total_cost_of_project == 0:
        raise ValueError("Total cost cannot be zero")

    return (noi / total_cost_of_project) * 100


def calculate_gross_rent_multiplier(purchase_price: float, annual_income: float) -> float:
    """Calculate Gross Rent Multiplier (GRM). Zero when there is no income."""
    if annual_income == 0:
        return 0.0
    return purchase_price / annual_income


def calculate_debt_coverage_ratio(noi: float, annual_debt_service: float) -> float:
    """Calculate Debt Coverage Ratio (DCR). Zero when there is no debt."""
    if annual_debt_service == 0:
        return 0.0
    return noi / annual_debt_service


def calculate_total_cost_of_project(
    purchase_price: float, closing_costs: float, repair_costs: float
) -> float:
    return purchase_price + closing_costs + repair_costs


def calculate_total_cash_needed(
    down_payment: float,
    closing_costs: float,
    repair_costs: float,
    loan_fees: float = 0.0,
) -> float:
    return down_payment + closing_costs + repair_costs + loan_fees


def calculate_management_fee(monthly_rent: float, management_input: float) -> float:
    """
    Calculate monthly management fee.

    Inputs below 1 are a decimal fraction, inputs up to 100 are a whole
    percentage, anything larger is a flat monthly dollar amount.
    """
    if management_input < 1:
        return monthly_rent * management_input
    if management_input <= 100:
        return monthly_rent * (management_input / 100)
    return management_input


def calculate_hoa_monthly(quarterly_hoa_fees: float) -> float:
    return quarterly_hoa_fees / 3


def calculate_total_monthly_expenses(
    mortgage_payment: float = 0.0,
    property_taxes: float = 0.0,
    insurance: float = 0.0,
    hoa_fees: float = 0.0,
    management: float = 0.0,
    utilities: Optional[Mapping[str, Optional[float]]] = None,
    custom_expenses: float = 0.0,
) -> float:
    """Calculate total monthly expenses including debt service."""
    utilities_total = sum((amount or 0.0) for amount in (utilities or {}).values())

    return (
        mortgage_payment
        + property_taxes
        + insurance
        + hoa_fees
        + management
        + utilities_total
        + custom_expenses
    )


def calculate_monthly_cash_flow(monthly_income: float, total_monthly_expenses: float) -> float:
    return monthly_income - total_monthly_expenses


def apply_compound_growth(initial_value: float, growth_rate: float, years: float) -> float:
    """Grow a value at an annual percentage rate for a number of years."""
    return initial_value * (1 + growth_rate / 100) ** years


# Property tax can be entered as a monthly amount or as an annual rate


def monthly_tax_from_annual_rate(property_value: float, annual_tax_rate: float) -> float:
    """Monthly tax amount from an annual tax rate (e.g., 1.25 for 1.25%)."""
    if not property_value or not annual_tax_rate:
        return 0.0
    return property_value * (annual_tax_rate / 100) / 12


def annual_tax_rate_from_monthly(monthly_tax_amount: float, property_value: float) -> float:
    """Annualized tax rate (whole percent) implied by a monthly tax amount."""
    if not property_value or not monthly_tax_amount:
        return 0.0
    return (abs(monthly_tax_amount) * 12 / property_value) * 100
