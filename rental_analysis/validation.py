"""
Form field validation.

Each validator accepts a number or the raw form string and returns
whether it is acceptable; `validate_field` maps a field to the message
shown beside it on the form.
"""

import math
from dataclasses import fields
from typing import Any, Dict, Optional

from rental_analysis.calculations.analysis import PropertyInputs

MAX_PURCHASE_PRICE = 50_000_000
MAX_MONTHLY_RENT = 100_000
MIN_INTEREST_RATE = 0.1
MAX_INTEREST_RATE = 15.0
MAX_GROWTH_RATE = 20.0
MIN_LOAN_TERM_YEARS = 1
MAX_LOAN_TERM_YEARS = 50

GROWTH_FIELDS = (
    "annual_income_growth",
    "annual_expense_growth",
    "annual_property_value_growth",
)

ERROR_MESSAGES = {
    "purchase_price": "Purchase price must be between $1,000 and $50,000,000",
    "down_payment": "Down payment cannot exceed purchase price",
    "loan_interest_rate": "Interest rate must be between 0.1% and 15.0%",
    "monthly_rent": "Monthly rent must be greater than $0",
    "amortized_over": "Loan term must be between 1 and 50 years",
    "growth": "Growth rate must be between 0% and 20%",
    "default": "Please enter a valid number",
}


def _to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def validate_purchase_price(value: Any) -> bool:
    number = _to_number(value)
    return number is not None and 0 < number <= MAX_PURCHASE_PRICE


def validate_down_payment(down_payment: Any, purchase_price: Any) -> bool:
    down = _to_number(down_payment)
    price = _to_number(purchase_price)
    return down is not None and price is not None and 0 <= down <= price


def validate_interest_rate(value: Any) -> bool:
    number = _to_number(value)
    return number is not None and MIN_INTEREST_RATE <= number <= MAX_INTEREST_RATE


def validate_monthly_rent(value: Any) -> bool:
    number = _to_number(value)
    return number is not None and 0 < number <= MAX_MONTHLY_RENT


def validate_loan_term(value: Any) -> bool:
    number = _to_number(value)
    return number is not None and MIN_LOAN_TERM_YEARS <= number <= MAX_LOAN_TERM_YEARS


def validate_growth_rate(value: Any) -> bool:
    number = _to_number(value)
    return number is not None and 0 <= number <= MAX_GROWTH_RATE


def validate_field(name: str, value: Any, purchase_price: Any = 0) -> Optional[str]:
    """Return the form error message for a field, or None if it is valid."""
    if name == "purchase_price":
        valid = validate_purchase_price(value)
    elif name == "down_payment":
        valid = validate_down_payment(value, purchase_price or 0)
    elif name == "loan_interest_rate":
        valid = validate_interest_rate(value)
    elif name == "monthly_rent":
        valid = validate_monthly_rent(value)
    elif name == "amortized_over":
        valid = validate_loan_term(value)
    elif name in GROWTH_FIELDS:
        valid = validate_growth_rate(value)
        name = "growth"
    else:
        number = _to_number(value)
        valid = number is not None and number >= 0
        name = "default"

    return None if valid else ERROR_MESSAGES[name]


def validate_property_inputs(inputs: PropertyInputs) -> Dict[str, str]:
    """Validate every numeric form field. Returns {field: message} for failures."""
    errors = {}
    for f in fields(inputs):
        value = getattr(inputs, f.name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        message = validate_field(f.name, value, inputs.purchase_price)
        if message:
            errors[f.name] = message
    return errors
