"""
Tests for temporary financing (BRRRR) calculations.
"""

import pytest
from datetime import date

from rental_analysis.calculations.temporary_financing import (
    TemporaryFinancingInputs,
    calculate_analysis_start_date,
    calculate_cash_out_refinance,
    calculate_final_cash_left_in_deal,
    calculate_temporary_financing_analysis,
    calculate_temporary_financing_costs,
    calculate_total_initial_investment,
    validate_temporary_financing_inputs,
)


class TestTemporaryFinancingCosts:
    """Test interest and points on the temporary loan."""

    def test_interest_only(self):
        """Six months at 12% on $100k is $6,000."""
        result = calculate_temporary_financing_costs(100000, 12, 6, 0)
        assert result.interest_cost == pytest.approx(6000)
        assert result.points_cost == 0
        assert result.total_cost == pytest.approx(6000)

    def test_points_only(self):
        result = calculate_temporary_financing_costs(100000, 0, 6, 2)
        assert result.interest_cost == 0
        assert result.points_cost == pytest.approx(2000)
        assert result.total_cost == pytest.approx(2000)

    def test_interest_and_points(self):
        result = calculate_temporary_financing_costs(200000, 15, 12, 3)
        assert result.interest_cost == pytest.approx(30000)
        assert result.points_cost == pytest.approx(6000)
        assert result.total_cost == pytest.approx(36000)

    def test_partial_year_term(self):
        result = calculate_temporary_financing_costs(150000, 18, 9, 1.5)
        assert result.interest_cost == pytest.approx(20250)
        assert result.points_cost == pytest.approx(2250)
        assert result.total_cost == pytest.approx(22500)

    def test_zero_amount_has_no_cost(self):
        result = calculate_temporary_financing_costs(0, 12, 6, 2)
        assert result.total_cost == 0

    def test_negative_amount_has_no_cost(self):
        result = calculate_temporary_financing_costs(-5000, 12, 6, 2)
        assert result.interest_cost == 0
        assert result.points_cost == 0

    def test_multi_year_term(self):
        result = calculate_temporary_financing_costs(100000, 12, 24, 2)
        assert result.interest_cost == pytest.approx(24000)


class TestCashOutRefinance:
    """Test refinance sizing against the ARV."""

    def test_cash_returned(self):
        result = calculate_cash_out_refinance(400000, 75, 200000)
        assert result.new_loan_amount == pytest.approx(300000)
        assert result.cash_returned == pytest.approx(100000)
        assert result.loan_to_value_used == 75

    def test_conservative_ltv(self):
        result = calculate_cash_out_refinance(350000, 65, 150000)
        assert result.new_loan_amount == pytest.approx(227500)
        assert result.cash_returned == pytest.approx(77500)

    def test_underwater_refinance_returns_no_cash(self):
        """Cash returned is floored at zero when the new loan can't cover the balance."""
        result = calculate_cash_out_refinance(300000, 70, 250000)
        assert result.new_loan_amount == pytest.approx(210000)
        assert result.cash_returned == 0

    def test_exact_payoff(self):
        result = calculate_cash_out_refinance(400000, 75, 300000)
        assert result.cash_returned == 0


class TestInvestmentTotals:
    """Test initial investment and cash left in the deal."""

    def test_total_initial_investment(self):
        assert calculate_total_initial_investment(50000, 30000, 8000) == pytest.approx(88000)
        assert calculate_total_initial_investment(0, 25000, 12000) == pytest.approx(37000)

    def test_cash_left_in_deal(self):
        assert calculate_final_cash_left_in_deal(100000, 60000) == pytest.approx(40000)

    def test_all_cash_recovered(self):
        assert calculate_final_cash_left_in_deal(80000, 80000) == 0
        assert calculate_final_cash_left_in_deal(70000, 90000) == 0


class TestAnalysisStartDate:
    """Test the date the rental analysis begins."""

    def test_term_plus_refinance_month(self, today):
        assert calculate_analysis_start_date(6, 1, today=today) == date(2025, 8, 15)

    def test_crosses_year_boundary(self):
        assert calculate_analysis_start_date(12, 1, today=date(2025, 6, 30)) == date(2026, 7, 30)

    def test_clamps_to_month_end(self):
        """Jan 31 + 1 month lands on the last day of February."""
        assert calculate_analysis_start_date(0, 1, today=date(2025, 1, 31)) == date(2025, 2, 28)


class TestTemporaryFinancingAnalysis:
    """Test complete BRRRR scenarios."""

    def test_all_cash_purchase_fully_recovered(self, today):
        inputs = TemporaryFinancingInputs(
            initial_cash_investment=250000,
            renovation_costs=50000,
            temp_financing_amount=0,
            temp_loan_term_months=6,
            after_repair_value=400000,
            cash_out_ltv=75,
        )
        result = calculate_temporary_financing_analysis(inputs, today=today)

        assert result.total_initial_investment == pytest.approx(300000)
        assert result.refinance_results.new_loan_amount == pytest.approx(300000)
        assert result.refinance_results.cash_returned == pytest.approx(300000)
        assert result.final_cash_left_in_deal == 0
        assert result.is_using_temporary_financing is True

    def test_hard_money_with_renovation(self, today):
        inputs = TemporaryFinancingInputs(
            initial_cash_investment=100000,
            renovation_costs=40000,
            temp_financing_amount=200000,
            temp_interest_rate=12,
            origination_points=2,
            temp_loan_term_months=9,
            after_repair_value=450000,
            cash_out_ltv=70,
        )
        result = calculate_temporary_financing_analysis(inputs, today=today)

        assert result.temp_financing_costs.total_cost == pytest.approx(22000)
        assert result.total_initial_investment == pytest.approx(162000)
        assert result.refinance_results.new_loan_amount == pytest.approx(315000)
        assert result.refinance_results.cash_returned == pytest.approx(115000)
        assert result.final_cash_left_in_deal == pytest.approx(47000)
        assert result.analysis_start_date == date(2025, 11, 15)

    def test_conservative_financing(self, today):
        inputs = TemporaryFinancingInputs(
            initial_cash_investment=150000,
            renovation_costs=25000,
            temp_financing_amount=100000,
            temp_interest_rate=8,
            origination_points=1,
            temp_loan_term_months=12,
            after_repair_value=350000,
            cash_out_ltv=65,
        )
        result = calculate_temporary_financing_analysis(inputs, today=today)

        assert result.temp_financing_costs.total_cost == pytest.approx(9000)
        assert result.final_cash_left_in_deal == pytest.approx(56500)

    def test_low_arv_leaves_cash_in_deal(self, today):
        inputs = TemporaryFinancingInputs(
            initial_cash_investment=200000,
            renovation_costs=60000,
            after_repair_value=280000,
            cash_out_ltv=70,
        )
        result = calculate_temporary_financing_analysis(inputs, today=today)
        assert result.final_cash_left_in_deal == pytest.approx(64000)

    def test_refinance_process_months_shift_start(self, today):
        inputs = TemporaryFinancingInputs(temp_loan_term_months=6)
        result = calculate_temporary_financing_analysis(
            inputs, today=today, refinance_process_months=2
        )
        assert result.analysis_start_date == date(2025, 9, 15)

    def test_to_dict_serializes_start_date(self, brrrr_inputs, today):
        data = calculate_temporary_financing_analysis(brrrr_inputs, today=today).to_dict()
        assert data["analysis_start_date"] == "2025-08-15"
        assert data["refinance_results"]["new_loan_amount"] == pytest.approx(225000)
        assert data["temp_financing_costs"]["total_cost"] == pytest.approx(12000)


class TestTemporaryFinancingValidation:
    """Test lending-practice warnings and errors."""

    def test_valid_inputs(self):
        inputs = TemporaryFinancingInputs(
            initial_cash_investment=100000,
            renovation_costs=30000,
            temp_financing_amount=150000,
            temp_interest_rate=12,
            temp_loan_term_months=6,
            after_repair_value=350000,
            cash_out_ltv=75,
            purchase_price=250000,
        )
        result = validate_temporary_financing_inputs(inputs)
        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []

    def test_low_arv_warning(self):
        inputs = TemporaryFinancingInputs(
            after_repair_value=200000, purchase_price=180000, renovation_costs=30000
        )
        result = validate_temporary_financing_inputs(inputs)
        assert result.warnings[0].startswith("ARV should typically be higher")

    def test_high_ltv_warning(self):
        inputs = TemporaryFinancingInputs(
            cash_out_ltv=85, after_repair_value=400000, temp_financing_amount=200000
        )
        result = validate_temporary_financing_inputs(inputs)
        assert any("LTV above 80%" in w for w in result.warnings)

    def test_high_rate_warning(self):
        inputs = TemporaryFinancingInputs(
            temp_interest_rate=25, after_repair_value=400000, temp_financing_amount=200000
        )
        result = validate_temporary_financing_inputs(inputs)
        assert any("above 20%" in w for w in result.warnings)

    def test_long_term_warning(self):
        inputs = TemporaryFinancingInputs(temp_loan_term_months=18)
        result = validate_temporary_financing_inputs(inputs)
        assert "Temporary financing terms longer than 12 months are uncommon" in result.warnings

    def test_refinance_shortfall_is_error(self):
        inputs = TemporaryFinancingInputs(
            after_repair_value=300000, cash_out_ltv=70, temp_financing_amount=250000
        )
        result = validate_temporary_financing_inputs(inputs)
        assert not result.is_valid
        assert any("may not cover" in e for e in result.errors)
        assert result.to_dict()["is_valid"] is False
