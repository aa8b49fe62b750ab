"""
Markdown report API endpoints.

Save an analysis as a markdown file and load inputs back from one.
"""

import logging
from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import Response

from rental_analysis.api.calculations import PropertyInput
from rental_analysis.calculations.analysis import calculate_rental_analysis
from rental_analysis.config import get_settings
from rental_analysis.services.markdown_report import (
    MarkdownValidationError,
    get_markdown_report_service,
)

logger = logging.getLogger(__name__)
router = APIRouter()
settings = get_settings()


@router.post("/markdown")
async def save_markdown_report(inputs: PropertyInput):
    """Download the current analysis as a markdown report."""
    service = get_markdown_report_service()
    property_inputs = inputs.to_inputs()
    analysis = calculate_rental_analysis(property_inputs)

    content = service.build_report(property_inputs, analysis)
    filename = service.report_filename(property_inputs.property_address, date.today())

    return Response(
        content=content,
        media_type="text/markdown",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/load")
async def load_markdown_report(file: UploadFile = File(...)):
    """Read calculator inputs from an uploaded markdown report."""
    raw = await file.read(settings.markdown_max_bytes + 1)
    if len(raw) > settings.markdown_max_bytes:
        raise HTTPException(status_code=400, detail="File size too large. Maximum size is 1MB.")

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=400,
            detail="File contains invalid characters. Please ensure it is a valid text file.",
        )

    service = get_markdown_report_service()
    try:
        values = service.parse_report(text)
    except MarkdownValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    inputs = service.apply_report_values(values)
    logger.info(f"Loaded report '{file.filename}'")
    return {
        "inputs": asdict(inputs),
        "fields_loaded": sorted(values),
    }
