"""
Mortgage Calculations

Implements the monthly mortgage payment (PMT), remaining loan balance and
a month-by-month amortization schedule with optional prepayments.
"""

from typing import List, Dict, Optional
from datetime import date
from dateutil.relativedelta import relativedelta


def calculate_mortgage_payment(
    principal: float, annual_rate: float, years: float
) -> float:
    """
    Calculate monthly mortgage payment.

    Matches Excel's PMT() function, rounded to cents.

    Args:
        principal: Loan amount
        annual_rate: Annual interest rate as decimal (e.g., 0.06 for 6%)
        years: Loan term in years

    Returns:
        Monthly payment amount (positive number)
    """
    if principal <= 0 or years <= 0:
        return 0.0

    number_of_payments = years * 12

    if annual_rate == 0:
        return principal / number_of_payments

    monthly_rate = annual_rate / 12

    try:
        payment = (
            principal
            * (monthly_rate * (1 + monthly_rate) ** number_of_payments)
            / (((1 + monthly_rate) ** number_of_payments) - 1)
        )
    except OverflowError:
        # Very long terms or rates: use the discount form, which tends to principal * rate
        try:
            payment = principal * monthly_rate / (1 - (1 + monthly_rate) ** -number_of_payments)
        except (OverflowError, ZeroDivisionError):
            return 0.0

    return round(payment, 2)


def calculate_loan_balance(
    loan_amount: float,
    monthly_rate: float,
    total_payments: int,
    payments_made: int,
) -> float:
    """Calculate remaining loan balance after N payments."""
    if loan_amount <= 0 or payments_made >= total_payments:
        return 0.0

    if monthly_rate == 0:
        principal_per_payment = loan_amount / total_payments
        return loan_amount - principal_per_payment * payments_made

    try:
        numerator = (1 + monthly_rate) ** total_payments - (1 + monthly_rate) ** payments_made
        denominator = (1 + monthly_rate) ** total_payments - 1
    except OverflowError:
        growth = 1 + monthly_rate
        try:
            numerator = 1 - growth ** (payments_made - total_payments)
            denominator = 1 - growth ** -total_payments
        except OverflowError:
            return 0.0

    if denominator == 0:
        return 0.0

    return loan_amount * (numerator / denominator)


def calculate_loan_amount(purchase_price: float, down_payment: float) -> float:
    """Loan amount is whatever the down payment does not cover."""
    return max(0.0, purchase_price - down_payment)


def generate_amortization_schedule(
    principal: float,
    annual_rate: float,
    years: int,
    extra_monthly_principal: float = 0.0,
    lump_sum_payments: Optional[Dict[int, float]] = None,
    start_date: Optional[date] = None,
) -> List[Dict]:
    """
    Generate a full amortization schedule.

    Args:
        principal: Loan principal amount
        annual_rate: Annual interest rate as decimal
        years: Loan term in years
        extra_monthly_principal: Additional principal paid every month
        lump_sum_payments: One-off principal payments keyed by month number
        start_date: Date of first payment

    Returns:
        List of amortization rows
    """
    schedule = []
    if principal <= 0 or years <= 0:
        return schedule

    lump_sum_payments = lump_sum_payments or {}
    total_months = int(years * 12)
    monthly_rate = annual_rate / 12
    payment = calculate_mortgage_payment(principal, annual_rate, years)
    balance = principal

    if start_date is None:
        start_date = date.today()

    for month in range(1, total_months + 1):
        period_date = start_date + relativedelta(months=month - 1)

        interest = balance * monthly_rate

        if month == total_months:
            # Final payment clears any rounding residual
            scheduled_principal = balance
        else:
            scheduled_principal = min(max(payment - interest, 0.0), balance)

        remaining = balance - scheduled_principal
        extra = min(
            extra_monthly_principal + lump_sum_payments.get(month, 0.0), remaining
        )
        extra = max(extra, 0.0)

        ending_balance = remaining - extra

        schedule.append(
            {
                "month": month,
                "date": period_date.isoformat(),
                "payment": round(scheduled_principal + interest, 2),
                "interest": round(interest, 2),
                "principal": round(scheduled_principal, 2),
                "extra_principal": round(extra, 2),
                "balance": round(max(0.0, ending_balance), 2),
            }
        )

        balance = max(0.0, ending_balance)

        # Stop if balance is paid off
        if balance < 0.005:
            break

    return schedule


def calculate_total_interest(schedule: List[Dict]) -> float:
    """Calculate total interest paid over loan term."""
    return sum(row["interest"] for row in schedule)


def calculate_debt_service(
    schedule: List[Dict], start_month: int, end_month: int
) -> float:
    """Calculate total debt service (P+I plus prepayments) for a range of months."""
    return sum(
        row["payment"] + row["extra_principal"]
        for row in schedule
        if start_month <= row["month"] <= end_month
    )
