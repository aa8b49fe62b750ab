"""
Tests for command-line scripts.
"""

import os
import runpy
import sys
from datetime import datetime

import pytest

from rental_analysis.calculations.analysis import calculate_rental_analysis
from rental_analysis.config import get_settings
from rental_analysis.services.markdown_report import get_markdown_report_service

SCRIPT = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "scripts", "analyze_report.py"
)


@pytest.fixture
def report_path(tmp_path, property_inputs):
    service = get_markdown_report_service()
    analysis = calculate_rental_analysis(property_inputs)
    markdown = service.build_report(property_inputs, analysis, datetime(2025, 1, 15, 9, 30))
    path = tmp_path / "report.md"
    path.write_text(markdown, encoding="utf-8")
    return path


def run_script(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", [SCRIPT, *args])
    runpy.run_path(SCRIPT, run_name="__main__")


class TestAnalyzeReport:
    """Test scripts/analyze_report.py."""

    def test_prints_metrics(self, monkeypatch, capsys, report_path):
        run_script(monkeypatch, str(report_path))
        out = capsys.readouterr().out
        assert "Property: 123 Main St, Springfield" in out
        assert "Monthly cash flow:  $455.72" in out
        assert "Year  1:" in out
        assert "Year 30:" in out

    def test_projection_years_follow_settings(self, monkeypatch, capsys, report_path):
        monkeypatch.setattr(get_settings(), "report_years", [2, 3])
        run_script(monkeypatch, str(report_path))
        out = capsys.readouterr().out
        assert "Year  2:" in out
        assert "Year  3:" in out
        assert "Year  1:" not in out
        assert "Year 30:" not in out

    def test_usage(self, monkeypatch, capsys):
        with pytest.raises(SystemExit):
            run_script(monkeypatch)
        assert "Usage:" in capsys.readouterr().out
