"""
Markdown report service.

Saves an analysis as a human-readable markdown report and loads the
inputs back out of one. Only input fields are read on load; derived
metrics in the file are recalculated, never trusted.
"""

import logging
import re
from dataclasses import fields, replace
from datetime import date, datetime
from typing import Any, Dict, Optional

from rental_analysis.calculations.analysis import PropertyInputs, RentalAnalysis
from rental_analysis.calculations.projections import select_report_years
from rental_analysis.calculations.temporary_financing import TemporaryFinancingInputs
from rental_analysis.config import get_settings
from rental_analysis.formatting import (
    format_currency,
    format_number,
    format_percentage,
    parse_numeric_input,
)
from rental_analysis.security import (
    FIELD_LINE,
    sanitize_property_address,
    validate_markdown_structure,
)

logger = logging.getLogger(__name__)
settings = get_settings()

REPORT_TITLE = "Rental Property Financial Analysis Report"

# Report label (lowercase) -> PropertyInputs field
INPUT_LABELS = {
    "property address": "property_address",
    "address": "property_address",
    "purchase price": "purchase_price",
    "purchase closing costs": "purchase_closing_costs",
    "estimated repair costs": "estimated_repair_costs",
    "down payment": "down_payment",
    "loan interest rate": "loan_interest_rate",
    "interest rate": "loan_interest_rate",
    "amortized over": "amortized_over",
    "loan fees": "loan_fees",
    "monthly rent": "monthly_rent",
    "monthly property taxes": "monthly_property_taxes",
    "monthly insurance": "monthly_insurance",
    "quarterly hoa fees": "quarterly_hoa_fees",
    "monthly management fee": "monthly_management",
    "monthly management": "monthly_management",
    "electricity": "electricity_utility",
    "gas": "gas_utility",
    "water & sewer": "water_sewer_utility",
    "garbage": "garbage_utility",
    "other monthly expenses": "other_monthly_expenses",
    "annual income growth": "annual_income_growth",
    "annual expense growth": "annual_expense_growth",
    "annual property value growth": "annual_property_value_growth",
}

# Report label (lowercase) -> TemporaryFinancingInputs field
TEMPORARY_FINANCING_LABELS = {
    "initial cash investment": "initial_cash_investment",
    "renovation costs": "renovation_costs",
    "temporary financing amount": "temp_financing_amount",
    "temporary interest rate": "temp_interest_rate",
    "origination points": "origination_points",
    "temporary loan term": "temp_loan_term_months",
    "after repair value (arv)": "after_repair_value",
    "after repair value": "after_repair_value",
    "cash-out refinance ltv": "cash_out_ltv",
}

INTEGER_FIELDS = {"amortized_over", "temp_loan_term_months"}


class MarkdownValidationError(ValueError):
    """Raised when an uploaded report fails validation."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("File validation failed: " + "; ".join(self.errors))


def _parse_value(field_name: str, raw: str) -> Any:
    if field_name == "property_address":
        if raw.strip().upper() == "N/A":
            return ""
        return sanitize_property_address(raw)

    cleaned = re.sub(r"[$,%\s]", "", raw)
    number = parse_numeric_input(cleaned)
    if field_name in INTEGER_FIELDS:
        return int(number)
    return number


class MarkdownReportService:
    """Builds and reads markdown analysis reports."""

    def __init__(self):
        self.report_years = settings.report_years

    def report_filename(self, property_address: str, generated_on: date) -> str:
        """File name for a saved report, e.g. 123_Main_St_analysis_10-18-2026.md"""
        name = re.sub(r"[^a-zA-Z0-9]", "_", property_address or "") or "rental_property"
        stamp = f"{generated_on.month}-{generated_on.day}-{generated_on.year}"
        return f"{name}_analysis_{stamp}.md"

    def build_report(
        self,
        inputs: PropertyInputs,
        analysis: RentalAnalysis,
        generated_at: Optional[datetime] = None,
    ) -> str:
        """
        Render the markdown report.

        Args:
            inputs: Form inputs the analysis was run with
            analysis: Result of calculate_rental_analysis(inputs)
            generated_at: Timestamp printed in the header (defaults to now)

        Returns:
            Markdown text
        """
        if generated_at is None:
            generated_at = datetime.now()

        date_text = f"{generated_at.month}/{generated_at.day}/{generated_at.year}"
        time_text = generated_at.strftime("%I:%M:%S %p").lstrip("0")
        address = sanitize_property_address(inputs.property_address) or "N/A"

        lines = [
            f"# {REPORT_TITLE}",
            "",
            f"*Generated on: {date_text} at {time_text}*",
            "",
            "## Property Information",
            "",
            f"* **Property Address:** {address}",
            f"* **Purchase Price:** {format_currency(inputs.purchase_price)}",
            f"* **Purchase Closing Costs:** {format_currency(inputs.purchase_closing_costs)}",
            f"* **Estimated Repair Costs:** {format_currency(inputs.estimated_repair_costs)}",
            "",
            "## Financing Information",
            "",
            f"* **Down Payment:** {format_currency(inputs.down_payment)}",
            f"* **Loan Interest Rate:** {format_percentage(inputs.loan_interest_rate)}",
            f"* **Amortized Over:** {inputs.amortized_over} years",
            f"* **Loan Fees:** {format_currency(inputs.loan_fees)}",
            "",
        ]

        temp = analysis.temporary_financing
        if inputs.uses_temporary_financing and temp is not None:
            tf = inputs.temporary_financing
            lines += [
                "## Temporary Financing (BRRRR)",
                "",
                f"* **Initial Cash Investment:** {format_currency(tf.initial_cash_investment)}",
                f"* **Renovation Costs:** {format_currency(tf.renovation_costs)}",
                f"* **Temporary Financing Amount:** {format_currency(tf.temp_financing_amount)}",
                f"* **Temporary Interest Rate:** {format_percentage(tf.temp_interest_rate)}",
                f"* **Origination Points:** {format_percentage(tf.origination_points)}",
                f"* **Temporary Loan Term:** {tf.temp_loan_term_months} months",
                f"* **After Repair Value (ARV):** {format_currency(tf.after_repair_value)}",
                f"* **Cash-Out Refinance LTV:** {format_percentage(tf.cash_out_ltv)}",
                f"* **Temporary Financing Costs:** {format_currency(temp.temp_financing_costs.total_cost)}",
                f"* **Total Initial Investment:** {format_currency(temp.total_initial_investment)}",
                f"* **Refinance Loan Amount:** {format_currency(temp.refinance_results.new_loan_amount)}",
                f"* **Cash Returned at Refinance:** {format_currency(temp.refinance_results.cash_returned)}",
                f"* **Cash Left in Deal:** {format_currency(temp.final_cash_left_in_deal)}",
                f"* **Analysis Start Date:** {temp.analysis_start_date.isoformat()}",
                "",
            ]

        lines += [
            "## Income & Expenses",
            "",
            f"* **Monthly Rent:** {format_currency(inputs.monthly_rent)}",
            f"* **Monthly Property Taxes:** {format_currency(inputs.monthly_property_taxes)}",
            f"* **Monthly Insurance:** {format_currency(inputs.monthly_insurance)}",
            f"* **Quarterly HOA Fees:** {format_currency(inputs.quarterly_hoa_fees)}",
            f"* **Monthly Management Fee:** {format_percentage(inputs.monthly_management)}",
            f"* **Electricity:** {format_currency(inputs.electricity_utility)}",
            f"* **Gas:** {format_currency(inputs.gas_utility)}",
            f"* **Water & Sewer:** {format_currency(inputs.water_sewer_utility)}",
            f"* **Garbage:** {format_currency(inputs.garbage_utility)}",
            f"* **Other Monthly Expenses:** {format_currency(inputs.other_monthly_expenses)}",
            "",
            "## Growth Projections",
            "",
            f"* **Annual Income Growth:** {format_percentage(inputs.annual_income_growth)}",
            f"* **Annual Expense Growth:** {format_percentage(inputs.annual_expense_growth)}",
            f"* **Annual Property Value Growth:** {format_percentage(inputs.annual_property_value_growth)}",
            "",
            "## Key Financial Metrics",
            "",
            f"* **Total Cost of Project:** {format_currency(analysis.total_cost_of_project)}",
            f"* **Total Cash Needed:** {format_currency(analysis.total_cash_needed)}",
            f"* **Loan Amount:** {format_currency(analysis.loan_amount)}",
            f"* **Monthly P&I:** {format_currency(analysis.monthly_payment)}",
            f"* **Total Monthly Expenses:** {format_currency(analysis.total_monthly_expenses)}",
            f"* **Monthly Cash Flow:** {format_currency(analysis.monthly_cash_flow)}",
            f"* **Cash-on-Cash ROI:** {_format_optional_percentage(analysis.cash_on_cash_roi, 'Infinite')}",
            f"* **Annual NOI:** {format_currency(analysis.annual_noi)}",
            f"* **Pro Forma Cap Rate:** {format_percentage(analysis.cap_rate)}",
            f"* **Gross Rent Multiplier (GRM):** {format_number(analysis.gross_rent_multiplier, 2)}",
            f"* **Debt Coverage Ratio (DCR):** {format_number(analysis.debt_coverage_ratio, 2)}",
            f"* **Return on Equity (ROE) (Year 1):** {format_percentage(analysis.return_on_equity)}",
            f"* **Projected IRR:** {_format_optional_percentage(_irr_percent(analysis), 'N/A')}",
            "",
            f"## {len(analysis.projections)}-Year Projections (Selected Years)",
            "",
            "| Year | Property Value | Equity | Annual Cash Flow |",
            "|---|---|---|---|",
        ]

        for p in select_report_years(analysis.projections, self.report_years):
            lines.append(
                f"| {p.year} | {format_currency(p.property_value)} | "
                f"{format_currency(p.equity)} | {format_currency(p.annual_cash_flow)} |"
            )

        lines += [
            "",
            "---",
            "",
            "*Report generated by Rental Property Analysis Calculator*",
            "*This analysis is for informational purposes only and does not constitute investment advice.*",
            "",
        ]

        logger.info(f"Built markdown report for '{address}'")
        return "\n".join(lines)

    def parse_report(self, markdown: str) -> Dict[str, Any]:
        """
        Read input fields back out of a report.

        Returns only the fields present in the file, keyed by PropertyInputs
        field name. Temporary financing fields are nested under
        "temporary_financing" and switch "use_temporary_financing" on.

        Raises:
            MarkdownValidationError: If the file fails structural validation
        """
        validation = validate_markdown_structure(markdown)
        if not validation.is_valid:
            logger.warning(f"Rejected markdown report: {validation.errors}")
            raise MarkdownValidationError(validation.errors)

        values: Dict[str, Any] = {}
        temp_values: Dict[str, Any] = {}

        for line in markdown.splitlines():
            match = FIELD_LINE.search(line)
            if not match:
                continue
            label = match.group(1).strip().lower()
            raw_value = match.group(2).strip()

            if label in INPUT_LABELS:
                field_name = INPUT_LABELS[label]
                values[field_name] = _parse_value(field_name, raw_value)
            elif label in TEMPORARY_FINANCING_LABELS:
                field_name = TEMPORARY_FINANCING_LABELS[label]
                temp_values[field_name] = _parse_value(field_name, raw_value)

        if temp_values:
            values["use_temporary_financing"] = True
            values["temporary_financing"] = temp_values

        logger.info(f"Loaded {len(values)} fields from markdown report")
        return values

    def apply_report_values(
        self, values: Dict[str, Any], base: Optional[PropertyInputs] = None
    ) -> PropertyInputs:
        """Overlay parsed report values on existing inputs; absent fields are kept."""
        base = base or PropertyInputs()
        known = {f.name for f in fields(PropertyInputs)}
        updates = {k: v for k, v in values.items() if k in known and k != "temporary_financing"}

        temp_values = values.get("temporary_financing")
        if temp_values:
            temp_base = base.temporary_financing or TemporaryFinancingInputs(
                cash_out_ltv=settings.default_cash_out_ltv,
                temp_loan_term_months=settings.default_temp_loan_term_months,
            )
            updates["temporary_financing"] = replace(temp_base, **temp_values)

        return replace(base, **updates)


def _irr_percent(analysis: RentalAnalysis) -> Optional[float]:
    if analysis.hold_period_irr is None:
        return None
    return analysis.hold_period_irr * 100


def _format_optional_percentage(value: Optional[float], missing: str) -> str:
    if value is None:
        return missing
    return format_percentage(value)


# Singleton instance
_report_service: Optional[MarkdownReportService] = None


def get_markdown_report_service() -> MarkdownReportService:
    """Get the markdown report service singleton."""
    global _report_service
    if _report_service is None:
        _report_service = MarkdownReportService()
    return _report_service
