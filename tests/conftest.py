"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os
from datetime import date

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rental_analysis.calculations.analysis import PropertyInputs
from rental_analysis.calculations.temporary_financing import TemporaryFinancingInputs


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture(scope="session")
def anyio_backend():
    """Backend for async tests."""
    return "asyncio"


@pytest.fixture
def today():
    """Fixed date for start-date calculations."""
    return date(2025, 1, 15)


@pytest.fixture
def property_inputs():
    """Conventional purchase: $200k, 20% down at 6% over 30 years."""
    return PropertyInputs(
        property_address="123 Main St, Springfield",
        purchase_price=200000,
        purchase_closing_costs=5000,
        estimated_repair_costs=10000,
        down_payment=40000,
        loan_interest_rate=6,
        amortized_over=30,
        loan_fees=0,
        monthly_rent=2000,
        monthly_property_taxes=200,
        monthly_insurance=100,
        monthly_management=8,
        quarterly_hoa_fees=150,
        electricity_utility=0,
        gas_utility=0,
        water_sewer_utility=50,
        garbage_utility=25,
        other_monthly_expenses=0,
        annual_income_growth=3,
        annual_expense_growth=2,
        annual_property_value_growth=3,
    )


@pytest.fixture
def brrrr_inputs():
    """Hard money purchase refinanced at 75% of ARV."""
    return TemporaryFinancingInputs(
        initial_cash_investment=50000,
        renovation_costs=30000,
        temp_financing_amount=150000,
        temp_interest_rate=12,
        origination_points=2,
        temp_loan_term_months=6,
        after_repair_value=300000,
        cash_out_ltv=75,
        purchase_price=180000,
    )
