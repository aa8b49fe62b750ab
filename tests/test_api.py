"""
Tests for calculation, report and page endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from rental_analysis.main import app, inputs_from_form


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def property_payload():
    return {
        "property_address": "123 Main St, Springfield",
        "purchase_price": 200000,
        "purchase_closing_costs": 5000,
        "estimated_repair_costs": 10000,
        "down_payment": 40000,
        "loan_interest_rate": 6,
        "amortized_over": 30,
        "monthly_rent": 2000,
        "monthly_property_taxes": 200,
        "monthly_insurance": 100,
        "monthly_management": 8,
        "quarterly_hoa_fees": 150,
        "water_sewer_utility": 50,
        "garbage_utility": 25,
        "annual_income_growth": 3,
        "annual_expense_growth": 2,
        "annual_property_value_growth": 3,
    }


@pytest.fixture
def brrrr_payload():
    return {
        "initial_cash_investment": 50000,
        "renovation_costs": 30000,
        "temp_financing_amount": 150000,
        "temp_interest_rate": 12,
        "origination_points": 2,
        "temp_loan_term_months": 6,
        "after_repair_value": 300000,
        "cash_out_ltv": 75,
        "purchase_price": 180000,
    }


class TestPages:
    """Test HTML pages and health check."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": "0.1.0"}

    def test_home(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "Rental Property Analysis Calculator" in response.text
        assert 'hx-post="/partials/results"' in response.text

    def test_static_assets(self, client):
        assert client.get("/static/styles.css").status_code == 200

    def test_results_partial(self, client, property_payload):
        form = {key: str(value) for key, value in property_payload.items()}
        response = client.post("/partials/results", data=form)
        assert response.status_code == 200
        assert "$455.72" in response.text
        assert "Temporary Financing (BRRRR)" not in response.text

    def test_results_partial_brrrr(self, client, property_payload, brrrr_payload):
        form = {key: str(value) for key, value in {**property_payload, **brrrr_payload}.items()}
        form["purchase_price"] = "200000"
        form["use_temporary_financing"] = "on"
        response = client.post("/partials/results", data=form)
        assert response.status_code == 200
        assert "Temporary Financing (BRRRR)" in response.text
        assert "$17,000.00" in response.text

    def test_results_partial_field_errors(self, client):
        response = client.post("/partials/results", data={"purchase_price": "0"})
        assert response.status_code == 200
        assert "Purchase price must be between $1,000 and $50,000,000" in response.text

    def test_form_parsing(self):
        inputs = inputs_from_form(
            {
                "property_address": "<b>7 Pine Rd</b>",
                "purchase_price": "150000abc",
                "monthly_rent": "",
                "amortized_over": "15",
                "temp_loan_term_months": "9",
            }
        )
        assert inputs.property_address == "<b>7 Pine Rd</b>"
        assert inputs.purchase_price == 150000
        assert inputs.monthly_rent == 0
        assert inputs.amortized_over == 15
        assert inputs.use_temporary_financing is False
        assert inputs.temporary_financing is None

    def test_form_parsing_out_of_range_term(self):
        inputs = inputs_from_form({"amortized_over": "1e999", "temp_loan_term_months": "1e999"})
        assert inputs.amortized_over == 30

    def test_results_partial_out_of_range_term(self, client, property_payload):
        form = {key: str(value) for key, value in property_payload.items()}
        form["amortized_over"] = "1e999"
        response = client.post("/partials/results", data=form)
        assert response.status_code == 200
        assert "$455.72" in response.text

    def test_results_partial_extreme_rate(self, client, property_payload):
        form = {key: str(value) for key, value in property_payload.items()}
        form["loan_interest_rate"] = "100000"
        response = client.post("/partials/results", data=form)
        assert response.status_code == 200
        assert "Interest rate must be between 0.1% and 15.0%" in response.text

    def test_results_partial_long_term(self, client, property_payload):
        form = {key: str(value) for key, value in property_payload.items()}
        form["amortized_over"] = "20000"
        response = client.post("/partials/results", data=form)
        assert response.status_code == 200
        assert "Loan term must be between 1 and 50 years" in response.text


class TestCalculationEndpoints:
    """Test /api/calculate endpoints."""

    def test_analysis(self, client, property_payload):
        response = client.post("/api/calculate/analysis", json=property_payload)
        assert response.status_code == 200
        data = response.json()
        assert data["loan_amount"] == pytest.approx(160000)
        assert data["monthly_payment"] == pytest.approx(959.28)
        assert data["monthly_cash_flow"] == pytest.approx(455.72)
        assert len(data["projections"]) == 30

    def test_analysis_brrrr(self, client, property_payload, brrrr_payload):
        payload = {
            **property_payload,
            "use_temporary_financing": True,
            "temporary_financing": brrrr_payload,
        }
        data = client.post("/api/calculate/analysis", json=payload).json()
        assert data["loan_amount"] == pytest.approx(225000)
        assert data["cash_invested"] == pytest.approx(17000)
        assert data["temporary_financing"]["final_cash_left_in_deal"] == pytest.approx(17000)

    def test_analysis_without_irr(self, client):
        response = client.post(
            "/api/calculate/analysis",
            json={
                "purchase_price": 10,
                "down_payment": 10,
                "estimated_repair_costs": 99990,
                "loan_interest_rate": 6,
                "amortized_over": 30,
                "monthly_rent": 0,
                "other_monthly_expenses": 1 / 12,
            },
        )
        assert response.status_code == 200
        assert response.json()["hold_period_irr"] is None

    def test_analysis_rejects_loan_term_out_of_range(self, client, property_payload):
        for years in (0, 51, 20000):
            payload = {**property_payload, "amortized_over": years}
            response = client.post("/api/calculate/analysis", json=payload)
            assert response.status_code == 422

    def test_mortgage_rejects_loan_term_out_of_range(self, client):
        response = client.post(
            "/api/calculate/mortgage",
            json={"principal": 100000, "annual_rate": 0.06, "years": 20000},
        )
        assert response.status_code == 422

    def test_analysis_rejects_bad_types(self, client):
        response = client.post("/api/calculate/analysis", json={"purchase_price": "lots"})
        assert response.status_code == 422

    def test_mortgage(self, client):
        response = client.post(
            "/api/calculate/mortgage",
            json={"principal": 200000, "annual_rate": 0.06, "years": 30},
        )
        assert response.json()["monthly_payment"] == pytest.approx(1199.10)

    def test_amortization(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={"principal": 100000, "annual_rate": 0.06, "years": 5},
        )
        data = response.json()
        assert data["months"] == 60
        assert data["total_principal"] == pytest.approx(100000, abs=0.5)

    def test_irr(self, client):
        response = client.post("/api/calculate/irr", json={"cash_flows": [-100, 110]})
        assert response.status_code == 200
        assert response.json()["irr"] == pytest.approx(0.10, abs=1e-4)

    def test_irr_invalid(self, client):
        response = client.post("/api/calculate/irr", json={"cash_flows": [100, 50]})
        assert response.status_code == 400
        assert "positive and negative" in response.json()["detail"]

    def test_temporary_financing(self, client, brrrr_payload):
        response = client.post("/api/calculate/temporary-financing", json=brrrr_payload)
        data = response.json()
        assert data["analysis"]["temp_financing_costs"]["total_cost"] == pytest.approx(12000)
        assert data["analysis"]["final_cash_left_in_deal"] == pytest.approx(17000)
        assert data["validation"]["is_valid"] is True

    def test_temporary_financing_defaults(self, client):
        data = client.post("/api/calculate/temporary-financing", json={}).json()
        assert data["analysis"]["temp_loan_term_months"] == 6
        assert data["analysis"]["refinance_results"]["loan_to_value_used"] == 75

    def test_temporary_financing_validate(self, client):
        response = client.post(
            "/api/calculate/temporary-financing/validate",
            json={"after_repair_value": 300000, "cash_out_ltv": 85, "temp_financing_amount": 280000},
        )
        data = response.json()
        assert data["is_valid"] is False
        assert "Cash-out refinance LTV above 80% may be difficult to obtain" in data["warnings"]

    def test_projections(self, client):
        response = client.post(
            "/api/calculate/projections",
            json={
                "loan_amount": 160000,
                "annual_rate": 6,
                "monthly_income": 2000,
                "monthly_operating_expenses": 585,
                "property_value": 200000,
                "years": 10,
            },
        )
        data = response.json()
        assert data["monthly_payment"] == pytest.approx(959.28)
        assert len(data["projections"]) == 10
        assert data["chart"]["years"] == list(range(1, 11))

    def test_validate(self, client):
        data = client.post("/api/calculate/validate", json={"purchase_price": 0}).json()
        assert data["is_valid"] is False
        assert "purchase_price" in data["errors"]


class TestReportEndpoints:
    """Test markdown save and load."""

    def test_save_report(self, client, property_payload):
        response = client.post("/api/reports/markdown", json=property_payload)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/markdown")
        assert "123_Main_St__Springfield_analysis_" in response.headers["content-disposition"]
        assert response.text.startswith("# Rental Property Financial Analysis Report")

    def test_save_then_load(self, client, property_payload):
        report = client.post("/api/reports/markdown", json=property_payload).text
        response = client.post(
            "/api/reports/load",
            files={"file": ("report.md", report.encode("utf-8"), "text/markdown")},
        )
        assert response.status_code == 200
        inputs = response.json()["inputs"]
        assert inputs["purchase_price"] == pytest.approx(200000)
        assert inputs["monthly_management"] == pytest.approx(8)
        assert inputs["property_address"] == "123 Main St, Springfield"

    def test_save_without_blank_fields_uses_defaults(self, client, property_payload):
        payload = {k: v for k, v in property_payload.items() if k != "amortized_over"}
        report = client.post("/api/reports/markdown", json=payload).text
        assert "* **Amortized Over:** 30 years" in report

    def test_save_rejects_fractional_loan_term(self, client, property_payload):
        payload = {**property_payload, "amortized_over": 29.5}
        assert client.post("/api/reports/markdown", json=payload).status_code == 422

    def test_load_rejects_html(self, client):
        response = client.post(
            "/api/reports/load",
            files={"file": ("page.md", b"<!DOCTYPE html><html></html>", "text/markdown")},
        )
        assert response.status_code == 400
        assert response.json()["detail"].startswith("File validation failed")

    def test_load_rejects_binary(self, client):
        response = client.post(
            "/api/reports/load",
            files={"file": ("report.md", b"\xff\xfe\x00binary", "application/octet-stream")},
        )
        assert response.status_code == 400
