"""
Customer portal: no login, the quote's portal token is the credential.

GET  /api/customer/quote/{token}           quote, line items, statement of work
POST /api/customer/quote/{token}/approve   optional {"feedback": "..."}
POST /api/customer/quote/{token}/reject
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import models
from ..database import get_db
from ..pdf_generator import service_title
from ..schemas import CustomerAction
from .quotes import company_header, quote_presentation, quote_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customer", tags=["customer"])

ACTIONS = {
    "approve": models.QuoteStatus.APPROVED.value,
    "reject": models.QuoteStatus.REJECTED.value,
}


def _quote_for_token(db: Session, token: str) -> models.Quote:
    quote = db.query(models.Quote).filter(models.Quote.portal_token == token).first()
    if not quote:
        raise HTTPException(status_code=404, detail="Quote not found")
    return quote


def _customer_view(quote: models.Quote) -> dict:
    a = quote.assessment
    data = quote_to_dict(quote)
    data.pop("portalToken")
    return {
        "quote": data,
        "customer": {
            "companyName": a.customer_company_name,
            "contactName": a.customer_contact_name,
            "email": a.customer_email,
            "phone": a.customer_phone,
            "siteAddress": a.site_address,
        },
        "serviceType": a.service_type,
        "serviceTitle": service_title(a.service_type),
        "company": company_header(a),
        "isExpired": bool(quote.expires_at and quote.expires_at < datetime.utcnow()),
        **quote_presentation(quote),
    }


@router.get("/quote/{token}")
def get_customer_quote(token: str, db: Session = Depends(get_db)):
    return _customer_view(_quote_for_token(db, token))


@router.post("/quote/{token}/{action}")
def act_on_quote(
    token: str,
    action: str,
    body: Optional[CustomerAction] = None,
    db: Session = Depends(get_db),
):
    """Approve or reject. Only a pending quote takes an answer."""
    if action not in ACTIONS:
        raise HTTPException(status_code=400, detail="Action must be 'approve' or 'reject'")

    quote = _quote_for_token(db, token)
    if quote.status != models.QuoteStatus.PENDING.value:
        raise HTTPException(status_code=400, detail=f"Quote is already {quote.status}")

    now = datetime.utcnow()
    quote.status = ACTIONS[action]
    if action == "approve":
        quote.approved_at = now
    else:
        quote.rejected_at = now
    if body and body.feedback:
        quote.customer_feedback = body.feedback

    db.commit()
    db.refresh(quote)
    logger.info("Customer %s quote %s", quote.status, quote.quote_number)
    return _customer_view(quote)
