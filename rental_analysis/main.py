"""
Main FastAPI application entry point.
"""

import logging
from dataclasses import fields, replace
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from rental_analysis.api import router as api_router
from rental_analysis.calculations.analysis import PropertyInputs, calculate_rental_analysis
from rental_analysis.calculations.projections import select_report_years
from rental_analysis.calculations.temporary_financing import TemporaryFinancingInputs
from rental_analysis.config import get_settings
from rental_analysis.formatting import (
    format_currency,
    format_number,
    format_percentage,
    parse_numeric_input,
)
from rental_analysis.security import sanitize_property_address
from rental_analysis.validation import validate_property_inputs

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

UI_DIR = Path(__file__).parent / "ui"

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Rental property and BRRRR investment analysis calculator",
    version="0.1.0",
    debug=settings.debug,
)

# Mount static files
app.mount("/static", StaticFiles(directory=UI_DIR / "static"), name="static")

# Set up templates
templates = Jinja2Templates(directory=UI_DIR / "templates")
templates.env.filters["currency"] = format_currency
templates.env.filters["percent"] = format_percentage
templates.env.filters["number"] = format_number

# Include API routes
app.include_router(api_router, prefix="/api")

INTEGER_FIELDS = {"amortized_over", "temp_loan_term_months"}


def _form_values(form, dataclass_type, defaults) -> dict:
    values = {}
    for f in fields(dataclass_type):
        default = getattr(defaults, f.name)
        if isinstance(default, bool) or not isinstance(default, (int, float)):
            continue
        if f.name in form:
            number = parse_numeric_input(form.get(f.name), default)
            values[f.name] = int(number) if f.name in INTEGER_FIELDS else number
    return values


def inputs_from_form(form) -> PropertyInputs:
    """Build calculator inputs from a submitted form; blank fields fall back to defaults."""
    defaults = PropertyInputs()
    values = _form_values(form, PropertyInputs, defaults)
    values["property_address"] = sanitize_property_address(form.get("property_address", ""))
    values["use_temporary_financing"] = form.get("use_temporary_financing") in ("on", "true", "1")

    if values["use_temporary_financing"]:
        temp_defaults = TemporaryFinancingInputs(
            temp_loan_term_months=settings.default_temp_loan_term_months,
            cash_out_ltv=settings.default_cash_out_ltv,
        )
        temp_values = _form_values(form, TemporaryFinancingInputs, temp_defaults)
        values["temporary_financing"] = replace(temp_defaults, **temp_values)

    return PropertyInputs(**values)


@app.get("/", response_class=HTMLResponse)
async def home(request: Request):
    """Render the calculator form."""
    inputs = PropertyInputs(
        temporary_financing=TemporaryFinancingInputs(
            temp_loan_term_months=settings.default_temp_loan_term_months,
            cash_out_ltv=settings.default_cash_out_ltv,
        )
    )
    analysis = calculate_rental_analysis(inputs)
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "title": settings.app_name,
            "inputs": inputs,
            "analysis": analysis,
            "errors": {},
            "milestones": select_report_years(analysis.projections, settings.report_years),
        },
    )


@app.post("/partials/results", response_class=HTMLResponse)
async def results_partial(request: Request):
    """Recalculated results fragment, swapped in by HTMX as the form changes."""
    form = await request.form()
    inputs = inputs_from_form(form)
    analysis = calculate_rental_analysis(inputs)
    logger.debug(f"Recalculated results for '{inputs.property_address}'")

    return templates.TemplateResponse(
        request,
        "partials/results.html",
        {
            "inputs": inputs,
            "analysis": analysis,
            "errors": validate_property_inputs(inputs),
            "milestones": select_report_years(analysis.projections, settings.report_years),
        },
    )


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": "0.1.0"}
