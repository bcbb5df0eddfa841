"""
Auth endpoints: register, login, refresh, me.

Partners normally register from an admin invitation link. The invitation
token is optional; when present it must be pending, unexpired and issued to
the same email, and it is marked accepted once the account exists.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional

from .. import models
from ..auth import (
    create_access_token,
    create_refresh_token,
    decode_token,
    get_current_user,
    hash_password,
    hash_token,
    store_refresh_token,
    verify_password,
)
from ..config import settings
from ..database import get_db
from ..schemas import WireModel

router = APIRouter(prefix="/auth", tags=["auth"])


# --- Request schemas ---

class RegisterRequest(WireModel):
    email: str
    password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    invitation_token: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


def user_to_dict(user: models.User) -> dict:
    """Convert User model to response dict. Never exposes password_hash."""
    org = user.organization
    return {
        "id": user.id,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "role": user.role,
        "isAdmin": user.is_admin,
        "isActive": user.is_active,
        "organization": {
            "id": org.id,
            "name": org.name,
            "partnerStatus": org.partner_status,
        } if org else None,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


def _issue_tokens(user: models.User, db: Session) -> dict:
    """Create access + refresh tokens for a user. Stores refresh token hash in DB."""
    access_token = create_access_token(user.id)
    refresh_token = create_refresh_token(user.id)
    store_refresh_token(db, user.id, refresh_token)
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "user_id": user.id,
    }


def _claim_invitation(db: Session, token: str, email: str) -> models.PartnerInvitation:
    invitation = db.query(models.PartnerInvitation).filter(
        models.PartnerInvitation.invitation_token == token,
    ).first()
    if not invitation:
        raise HTTPException(status_code=400, detail="Invalid invitation token")
    if invitation.status != models.InvitationStatus.PENDING.value:
        raise HTTPException(status_code=400, detail=f"Invitation already {invitation.status}")
    if invitation.expires_at < datetime.utcnow():
        raise HTTPException(status_code=400, detail="Invitation has expired")
    if invitation.email.lower() != email.lower():
        raise HTTPException(status_code=400, detail="Invitation was issued to a different email")
    return invitation


# --- Endpoints ---

@router.post("/register")
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Create a partner account. Emails listed in ADMIN_EMAILS get the admin role."""
    email = request.email.strip().lower()
    existing = db.query(models.User).filter(models.User.email == email).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Account with this email already exists",
        )

    invitation = None
    if request.invitation_token:
        invitation = _claim_invitation(db, request.invitation_token, email)

    user = models.User(
        email=email,
        password_hash=hash_password(request.password),
        first_name=request.first_name,
        last_name=request.last_name,
        role="admin" if email in settings.admin_emails else "partner",
    )
    db.add(user)

    if invitation:
        invitation.status = models.InvitationStatus.ACCEPTED.value
        invitation.accepted_at = datetime.utcnow()

    db.commit()
    db.refresh(user)

    tokens = _issue_tokens(user, db)
    return {**tokens, "user": user_to_dict(user)}


@router.post("/login")
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate with email + password. Returns access + refresh tokens."""
    email = request.email.strip().lower()
    user = db.query(models.User).filter(models.User.email == email).first()

    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated",
        )

    tokens = _issue_tokens(user, db)
    return {**tokens, "user": user_to_dict(user)}


@router.post("/refresh")
def refresh(request: RefreshRequest, db: Session = Depends(get_db)):
    """Exchange a valid refresh token for a new access token."""
    payload = decode_token(request.refresh_token)

    if payload.get("type") != "refresh":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type. Expected refresh token",
        )

    # Verify the refresh token hash exists in DB
    db_token = db.query(models.AuthToken).filter(
        models.AuthToken.token_hash == hash_token(request.refresh_token),
        models.AuthToken.token_type == "refresh",
    ).first()

    if not db_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token not found. It may have been revoked",
        )

    if db_token.expires_at < datetime.utcnow():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token expired",
        )

    user = db.query(models.User).filter(models.User.id == int(payload["sub"])).first()
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    # New access token only; the refresh token stays valid
    return {
        "access_token": create_access_token(user.id),
        "token_type": "bearer",
        "user_id": user.id,
    }


@router.get("/me")
def me(current_user: models.User = Depends(get_current_user)):
    """Return the current authenticated user."""
    return user_to_dict(current_user)
