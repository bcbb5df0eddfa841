"""
Admin endpoints: partner approval, oversight of assessments and quotes,
and partner invitations. Every route requires an admin user.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from .. import models
from ..auth import generate_url_token, require_admin
from ..config import settings
from ..database import get_db
from ..schemas import InvitationCreate, PartnerStatusUpdate, UserActiveToggle
from .auth import user_to_dict
from .organizations import organization_to_dict
from .quotes import decimal_str, quote_presentation, quote_to_dict
from .assessments import assessment_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

PARTNER_STATUSES = {s.value for s in models.PartnerStatus}


def _not_system_admin():
    return or_(models.User.is_system_admin == False, models.User.is_system_admin.is_(None))  # noqa: E712


def _owner_info(user: models.User, org: models.Organization) -> dict:
    return {
        "userEmail": user.email if user else None,
        "userFirstName": user.first_name if user else None,
        "userLastName": user.last_name if user else None,
        "organizationName": org.name if org else None,
    }


def invitation_status(invitation: models.PartnerInvitation, now: datetime = None) -> str:
    """Pending invitations past their expiry read as expired."""
    now = now or datetime.utcnow()
    if invitation.status == models.InvitationStatus.PENDING.value and invitation.expires_at < now:
        return models.InvitationStatus.EXPIRED.value
    return invitation.status


def invitation_link(invitation: models.PartnerInvitation) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/register?invitation={invitation.invitation_token}"


def invitation_to_dict(inv: models.PartnerInvitation) -> dict:
    return {
        "id": inv.id,
        "email": inv.email,
        "recipientName": inv.recipient_name,
        "companyName": inv.company_name,
        "invitedBy": inv.invited_by,
        "invitedByName": inv.invited_by_name,
        "status": invitation_status(inv),
        "expiresAt": inv.expires_at.isoformat() if inv.expires_at else None,
        "acceptedAt": inv.accepted_at.isoformat() if inv.accepted_at else None,
        "createdAt": inv.created_at.isoformat() if inv.created_at else None,
    }


def _get_quote(db: Session, quote_id: int) -> models.Quote:
    quote = db.query(models.Quote).filter(models.Quote.id == quote_id).first()
    if not quote:
        raise HTTPException(status_code=404, detail="Quote not found")
    return quote


# --- Stats ---

@router.get("/stats")
def get_stats(admin: models.User = Depends(require_admin), db: Session = Depends(get_db)):
    """Dashboard counters. Revenue is approved quotes created this month."""
    month_start = datetime.utcnow().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    revenue = db.query(func.coalesce(func.sum(models.Quote.total_cost), 0)).filter(
        models.Quote.status == models.QuoteStatus.APPROVED.value,
        models.Quote.created_at >= month_start,
    ).scalar()

    return {
        "totalPartners": db.query(models.User).filter(models.User.role == "partner").count(),
        "pendingPartners": db.query(models.Organization).filter(
            models.Organization.partner_status == models.PartnerStatus.PENDING.value,
        ).count(),
        "totalAssessments": db.query(models.Assessment).count(),
        "totalQuotes": db.query(models.Quote).count(),
        "monthlyRevenue": decimal_str(Decimal(str(revenue or 0))),
    }


# --- Partners ---

@router.get("/partners")
def list_partners(admin: models.User = Depends(require_admin), db: Session = Depends(get_db)):
    users = db.query(models.User).order_by(models.User.created_at.desc(), models.User.id.desc()).all()
    return [user_to_dict(u) for u in users]


@router.patch("/partners/{org_id}/status")
def update_partner_status(
    org_id: int,
    update: PartnerStatusUpdate,
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if update.status not in PARTNER_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    org = db.query(models.Organization).filter(models.Organization.id == org_id).first()
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")

    org.partner_status = update.status
    db.commit()
    db.refresh(org)
    logger.info("Admin %s set organization %s to %s", admin.id, org.id, org.partner_status)
    return organization_to_dict(org)


@router.patch("/users/{user_id}/toggle")
def toggle_user_active(
    user_id: int,
    update: UserActiveToggle,
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.id == admin.id and not update.is_active:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

    user.is_active = update.is_active
    db.commit()
    db.refresh(user)
    return user_to_dict(user)


# --- Assessments & quotes ---

@router.get("/assessments")
def list_all_assessments(admin: models.User = Depends(require_admin), db: Session = Depends(get_db)):
    """Every partner's assessments, newest first. System admin test data is left out."""
    rows = db.query(models.Assessment).join(models.User).filter(
        _not_system_admin(),
    ).order_by(models.Assessment.created_at.desc(), models.Assessment.id.desc()).all()
    return [
        {**assessment_to_dict(a), **_owner_info(a.user, a.organization)}
        for a in rows
    ]


@router.get("/quotes")
def list_all_quotes(admin: models.User = Depends(require_admin), db: Session = Depends(get_db)):
    rows = db.query(models.Quote).join(models.Assessment).join(models.User).filter(
        _not_system_admin(),
    ).order_by(models.Quote.created_at.desc(), models.Quote.id.desc()).all()

    results = []
    for q in rows:
        a = q.assessment
        results.append({
            **quote_to_dict(q),
            "assessmentServiceType": a.service_type,
            "customerContactName": a.customer_contact_name,
            "customerCompanyName": a.customer_company_name,
            "customerEmail": a.customer_email,
            "customerPhone": a.customer_phone,
            **_owner_info(a.user, a.organization),
        })
    return results


@router.get("/quotes/{quote_id}/details")
def get_quote_details(
    quote_id: int,
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    quote = _get_quote(db, quote_id)
    return {
        "quote": quote_to_dict(quote),
        "assessment": assessment_to_dict(quote.assessment),
        **quote_presentation(quote),
    }


@router.patch("/quotes/{quote_id}/close")
def close_quote(
    quote_id: int,
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    quote = _get_quote(db, quote_id)
    quote.status = models.QuoteStatus.CLOSED.value
    db.commit()
    db.refresh(quote)
    return quote_to_dict(quote)


@router.delete("/quotes/{quote_id}")
def delete_quote(
    quote_id: int,
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    quote = _get_quote(db, quote_id)
    db.delete(quote)
    db.commit()
    return {"message": "Quote deleted successfully"}


# --- Invitations ---

@router.post("/send-invitation")
def send_invitation(
    invite: InvitationCreate,
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Create a partner invitation and return its signup link.

    Sending the email is left to the caller; the link carries the token that
    /api/auth/register accepts.
    """
    email = invite.email.strip().lower()
    if not email:
        raise HTTPException(status_code=400, detail="Email is required")

    inviter_name = f"{admin.first_name or ''} {admin.last_name or ''}".strip() or admin.email
    invitation = models.PartnerInvitation(
        email=email,
        recipient_name=invite.recipient_name,
        company_name=invite.company_name,
        invited_by=admin.id,
        invited_by_name=inviter_name,
        invitation_token=generate_url_token(),
        status=models.InvitationStatus.PENDING.value,
        expires_at=datetime.utcnow() + timedelta(days=settings.INVITATION_EXPIRE_DAYS),
    )
    db.add(invitation)
    db.commit()
    db.refresh(invitation)

    logger.info("Admin %s invited %s", admin.id, email)
    return {
        "invitation": invitation_to_dict(invitation),
        "signupLink": invitation_link(invitation),
        "token": invitation.invitation_token,
    }


@router.get("/invitations")
def list_invitations(admin: models.User = Depends(require_admin), db: Session = Depends(get_db)):
    invitations = db.query(models.PartnerInvitation).order_by(
        models.PartnerInvitation.created_at.desc(), models.PartnerInvitation.id.desc(),
    ).all()
    return [invitation_to_dict(i) for i in invitations]
