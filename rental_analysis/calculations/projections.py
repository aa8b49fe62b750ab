"""
Growth Projections

Year-by-year projections of income, expenses, cash flow, property value
and loan paydown for a rental property.
"""

from typing import List, Iterable
from dataclasses import dataclass, asdict

from rental_analysis.calculations.amortization import calculate_loan_balance


@dataclass
class YearProjection:
    """A single projected year."""

    year: int
    annual_income: float
    annual_expenses: float
    annual_cash_flow: float
    property_value: float
    loan_balance: float
    equity: float
    principal_payment: float
    interest_payment: float
    debt_service: float

    def to_dict(self) -> dict:
        return asdict(self)


def generate_projections(
    loan_amount: float,
    monthly_rate: float,
    total_payments: int,
    monthly_payment: float,
    monthly_income: float,
    monthly_operating_expenses: float,
    property_value: float,
    income_growth_rate: float,
    expense_growth_rate: float,
    property_value_growth_rate: float,
    years: int = 30,
) -> List[YearProjection]:
    """
    Generate yearly projections.

    Growth rates are whole percentages and are applied before a year is
    reported, so year 1 already reflects one year of growth.

    Args:
        loan_amount: Initial long-term loan amount
        monthly_rate: Monthly loan rate as decimal
        total_payments: Number of monthly payments in the loan term
        monthly_payment: Monthly P&I payment
        monthly_income: Current monthly rent
        monthly_operating_expenses: Current monthly expenses excluding P&I
        property_value: Starting property value
        income_growth_rate: Annual rent growth (%)
        expense_growth_rate: Annual expense growth (%)
        property_value_growth_rate: Annual appreciation (%)
        years: Number of years to project

    Returns:
        List of YearProjection, one per year
    """
    projections = []
    annual_income = monthly_income * 12
    annual_expenses = monthly_operating_expenses * 12
    current_value = property_value

    for year in range(1, years + 1):
        annual_income *= 1 + income_growth_rate / 100
        annual_expenses *= 1 + expense_growth_rate / 100
        current_value *= 1 + property_value_growth_rate / 100

        first_month = (year - 1) * 12
        last_month = year * 12

        if loan_amount > 0:
            previous_balance = (
                loan_amount
                if year == 1
                else calculate_loan_balance(loan_amount, monthly_rate, total_payments, first_month)
            )
            remaining_balance = calculate_loan_balance(
                loan_amount, monthly_rate, total_payments, last_month
            )
        else:
            previous_balance = 0.0
            remaining_balance = 0.0

        # Only payments inside the loan term count as debt service
        payments_this_year = max(0, min(last_month, total_payments) - first_month)
        debt_service = monthly_payment * payments_this_year
        principal_payment = previous_balance - remaining_balance
        interest_payment = max(0.0, debt_service - principal_payment)

        annual_cash_flow = annual_income - annual_expenses - debt_service

        projections.append(
            YearProjection(
                year=year,
                annual_income=annual_income,
                annual_expenses=annual_expenses,
                annual_cash_flow=annual_cash_flow,
                property_value=current_value,
                loan_balance=remaining_balance,
                equity=current_value - remaining_balance,
                principal_payment=principal_payment,
                interest_payment=interest_payment,
                debt_service=debt_service,
            )
        )

    return projections


def calculate_return_on_equity(
    first_year: YearProjection,
    purchase_price: float,
    property_value_growth_rate: float,
    initial_equity: float,
) -> float:
    """
    First-year return on equity as a whole percentage.

    (cash flow + principal paydown + appreciation) / initial equity
    """
    if initial_equity <= 0:
        return 0.0

    appreciation = purchase_price * (property_value_growth_rate / 100)
    total_return = first_year.annual_cash_flow + first_year.principal_payment + appreciation
    return (total_return / initial_equity) * 100


def select_report_years(
    projections: List[YearProjection], years: Iterable[int] = (1, 5, 10, 20, 30)
) -> List[YearProjection]:
    """Pick the milestone years shown in reports."""
    wanted = set(years)
    return [p for p in projections if p.year in wanted]


def projections_to_chart_series(projections: List[YearProjection]) -> dict:
    """Column-oriented series for the income, equity and amortization charts."""
    return {
        "years": [p.year for p in projections],
        "annual_income": [round(p.annual_income, 2) for p in projections],
        "annual_expenses": [round(p.annual_expenses, 2) for p in projections],
        "annual_cash_flow": [round(p.annual_cash_flow, 2) for p in projections],
        "property_value": [round(p.property_value, 2) for p in projections],
        "equity": [round(p.equity, 2) for p in projections],
        "loan_balance": [round(p.loan_balance, 2) for p in projections],
        "principal_payment": [round(p.principal_payment, 2) for p in projections],
        "interest_payment": [round(p.interest_payment, 2) for p in projections],
    }
