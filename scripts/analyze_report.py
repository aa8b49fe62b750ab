"""
Recalculate a saved markdown report and print the key metrics.

Usage: python scripts/analyze_report.py path/to/report.md
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rental_analysis.calculations.analysis import calculate_rental_analysis
from rental_analysis.calculations.projections import select_report_years
from rental_analysis.config import get_settings
from rental_analysis.formatting import format_currency, format_percentage
from rental_analysis.services.markdown_report import (
    MarkdownValidationError,
    get_markdown_report_service,
)

def main():
    if len(sys.argv) != 2:
        print("Usage: python scripts/analyze_report.py path/to/report.md")
        sys.exit(1)

    path = sys.argv[1]
    service = get_markdown_report_service()

    with open(path, encoding="utf-8") as f:
        text = f.read()

    try:
        values = service.parse_report(text)
    except MarkdownValidationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    inputs = service.apply_report_values(values)
    analysis = calculate_rental_analysis(inputs)

    print(f"Property: {inputs.property_address or 'N/A'}")
    print(f"  Loaded {len(values)} fields from {path}")

    if analysis.temporary_financing is not None:
        temp = analysis.temporary_financing
        print("\nTemporary financing (BRRRR):")
        print(f"  Total initial investment: {format_currency(temp.total_initial_investment)}")
        print(f"  Refinance loan:           {format_currency(temp.refinance_results.new_loan_amount)}")
        print(f"  Cash left in deal:        {format_currency(temp.final_cash_left_in_deal)}")
        for message in analysis.temporary_financing_validation.errors:
            print(f"  ERROR: {message}")
        for message in analysis.temporary_financing_validation.warnings:
            print(f"  Warning: {message}")

    roi = analysis.cash_on_cash_roi
    print("\nKey metrics:")
    print(f"  Monthly cash flow:  {format_currency(analysis.monthly_cash_flow)}")
    print(f"  Cash-on-cash ROI:   {'Infinite' if roi is None else format_percentage(roi)}")
    print(f"  Cap rate:           {format_percentage(analysis.cap_rate)}")
    print(f"  DCR:                {analysis.debt_coverage_ratio:.2f}")

    print("\nProjections:")
    for p in select_report_years(analysis.projections, get_settings().report_years):
        print(
            f"  Year {p.year:>2}: value {format_currency(p.property_value)}, "
            f"equity {format_currency(p.equity)}, cash flow {format_currency(p.annual_cash_flow)}"
        )

if __name__ == "__main__":
    main()
