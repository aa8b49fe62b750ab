"""
Application services module.
"""

from rental_analysis.services.markdown_report import (
    MarkdownReportService,
    MarkdownValidationError,
    get_markdown_report_service,
)

__all__ = ["MarkdownReportService", "MarkdownValidationError", "get_markdown_report_service"]
