"""
Quote endpoints.

POST /api/assessments/{id}/quote prices a finished assessment and stores the
Quote. Generation is idempotent: an assessment that already has a quote gets
the existing one back. This is also the only place incomplete wizard data is
refused; steps 1-3 must validate first.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models
from ..auth import generate_url_token, get_current_user
from ..config import settings
from ..database import get_db
from ..pdf_generator import generate_quote_pdf
from ..pricing_engine import PricingEngine
from ..quote_lines import build_quote_presentation, sow_library
from ..wizard.steps import quote_gate_missing
from .assessments import assessment_fields, assessment_to_dict, get_owned_assessment

logger = logging.getLogger(__name__)

router = APIRouter(tags=["quotes"])

QUOTE_GATE_STEPS = (1, 2, 3)

AMOUNT_COLUMNS = {
    "surveyHours": "survey_hours",
    "surveyCost": "survey_cost",
    "installationHours": "installation_hours",
    "installationCost": "installation_cost",
    "configurationHours": "configuration_hours",
    "configurationCost": "configuration_cost",
    "laborHoldHours": "labor_hold_hours",
    "laborHoldCost": "labor_hold_cost",
    "removalHours": "removal_hours",
    "removalCost": "removal_cost",
    "hardwareCost": "hardware_cost",
    "trainingCost": "training_cost",
    "totalCost": "total_cost",
    "hourlyRate": "hourly_rate",
}


def generate_quote_number(assessment: models.Assessment) -> str:
    year = datetime.utcnow().year
    return f"Q-{year}-{str(assessment.id).zfill(4)}"


def decimal_str(value):
    """Decimal string with two places, None stays None."""
    if value is None:
        return None
    return f"{Decimal(str(value)):.2f}"


def _iso(dt):
    return dt.isoformat() if dt else None


def quote_to_dict(q: models.Quote) -> dict:
    data = {key: decimal_str(getattr(q, column)) for key, column in AMOUNT_COLUMNS.items()}
    data.update({
        "id": q.id,
        "assessmentId": q.assessment_id,
        "quoteNumber": q.quote_number,
        "status": q.status,
        "portalToken": q.portal_token,
        "customerFeedback": q.customer_feedback,
        "pdfUrl": q.pdf_url,
        "emailSent": q.email_sent,
        "approvedAt": _iso(q.approved_at),
        "rejectedAt": _iso(q.rejected_at),
        "expiresAt": _iso(q.expires_at),
        "createdAt": _iso(q.created_at),
        "updatedAt": _iso(q.updated_at),
    })
    return data


def quote_presentation(quote: models.Quote) -> dict:
    """Line items and statement of work for a stored quote."""
    presentation = build_quote_presentation(quote_to_dict(quote), assessment_fields(quote.assessment))
    presentation["statementOfWork"] = sow_library.get(presentation["statementOfWorkKey"])
    return presentation


def portal_url(quote: models.Quote) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/customer/quote/{quote.portal_token}"


def company_header(assessment: models.Assessment) -> dict:
    org = assessment.organization
    return {
        "name": settings.COMPANY_NAME,
        "email": settings.COMPANY_EMAIL,
        "partner": org.name if org else None,
    }


def get_owned_quote(db: Session, quote_id: int, user: models.User) -> models.Quote:
    quote = db.query(models.Quote).join(models.Assessment).filter(
        models.Quote.id == quote_id,
        models.Assessment.user_id == user.id,
    ).first()
    if not quote:
        raise HTTPException(status_code=404, detail="Quote not found")
    return quote


# --- Endpoints ---

@router.post("/assessments/{assessment_id}/quote")
def generate_quote(
    assessment_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Price the assessment and create its Quote.

    Returns the existing quote if there is one. Otherwise steps 1-3 must be
    complete (400 lists what is missing per step), the quote is created and
    the assessment is marked completed with the quote total.
    """
    assessment = get_owned_assessment(db, assessment_id, current_user)

    existing = db.query(models.Quote).filter(
        models.Quote.assessment_id == assessment.id,
    ).order_by(models.Quote.id).first()
    if existing:
        return quote_to_dict(existing)

    data = assessment_fields(assessment)
    missing = {str(step): quote_gate_missing(step, data) for step in QUOTE_GATE_STEPS}
    missing = {step: fields for step, fields in missing.items() if fields}
    if missing:
        raise HTTPException(
            status_code=400,
            detail={"message": "Assessment is incomplete", "missing": missing},
        )

    pricing = PricingEngine().calculate({**data, "id": assessment.id})

    quote = models.Quote(
        assessment_id=assessment.id,
        quote_number=generate_quote_number(assessment),
        portal_token=generate_url_token(),
        status=models.QuoteStatus.PENDING.value,
        expires_at=datetime.utcnow() + timedelta(days=settings.QUOTE_VALID_DAYS),
        **{column: pricing[key] for key, column in AMOUNT_COLUMNS.items()},
    )

    try:
        db.add(quote)
        assessment.status = models.AssessmentStatus.COMPLETED.value
        assessment.total_cost = pricing["totalCost"]
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Quote generation failed for assessment %s: %s", assessment.id, e)
        raise HTTPException(status_code=500, detail="Could not save the quote. Please retry.")

    db.refresh(quote)
    logger.info("Generated quote %s for assessment %s", quote.quote_number, assessment.id)
    return quote_to_dict(quote)


@router.get("/quotes")
def list_quotes(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The partner's quotes, newest first."""
    quotes = db.query(models.Quote).join(models.Assessment).filter(
        models.Assessment.user_id == current_user.id,
    ).order_by(models.Quote.created_at.desc(), models.Quote.id.desc()).all()
    return [
        {**quote_to_dict(q), "customerCompanyName": q.assessment.customer_company_name}
        for q in quotes
    ]


@router.get("/quotes/{quote_id}")
def get_quote(
    quote_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return quote_to_dict(get_owned_quote(db, quote_id, current_user))


@router.get("/quotes/{quote_id}/presentation")
def get_quote_presentation(
    quote_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    quote = get_owned_quote(db, quote_id, current_user)
    return {
        "quote": quote_to_dict(quote),
        "assessment": assessment_to_dict(quote.assessment),
        **quote_presentation(quote),
    }


@router.post("/quotes/{quote_id}/pdf")
def create_quote_pdf(
    quote_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Render the quote PDF to uploads/pdfs/ and return its download URL."""
    quote = get_owned_quote(db, quote_id, current_user)
    assessment = quote.assessment

    pdf_bytes = generate_quote_pdf(
        quote_to_dict(quote),
        assessment_to_dict(assessment),
        company=company_header(assessment),
        statement_of_work=quote_presentation(quote)["statementOfWork"],
        valid_days=settings.QUOTE_VALID_DAYS,
    )

    pdf_dir = Path(settings.UPLOAD_DIR) / "pdfs"
    pdf_dir.mkdir(parents=True, exist_ok=True)
    filename = f"Quote-{quote.quote_number}.pdf"
    with open(pdf_dir / filename, "wb") as f:
        f.write(pdf_bytes)

    quote.pdf_url = f"/api/files/pdf/{filename}"
    db.commit()
    return {"pdfUrl": quote.pdf_url}


@router.post("/quotes/{quote_id}/share")
def share_quote(
    quote_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Customer portal link for the quote. Delivery is up to the partner."""
    quote = get_owned_quote(db, quote_id, current_user)
    return {
        "portalUrl": portal_url(quote),
        "token": quote.portal_token,
        "customerEmail": quote.assessment.customer_email,
    }


@router.delete("/quotes/{quote_id}")
def delete_quote(
    quote_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    quote = get_owned_quote(db, quote_id, current_user)
    db.delete(quote)
    db.commit()
    return {"ok": True}
