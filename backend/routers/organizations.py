from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import models
from ..auth import get_current_user
from ..database import get_db
from ..schemas import OrganizationCreate

router = APIRouter(prefix="/organizations", tags=["organizations"])


def organization_to_dict(org: models.Organization) -> dict:
    return {
        "id": org.id,
        "name": org.name,
        "userId": org.user_id,
        "partnerOrganization": org.partner_organization,
        "phone": org.phone,
        "partnerStatus": org.partner_status,
        "createdAt": org.created_at.isoformat() if org.created_at else None,
    }


@router.post("/")
def create_organization(
    org_in: OrganizationCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """A partner sets up their company once. New organizations await admin approval."""
    if current_user.organization:
        raise HTTPException(status_code=409, detail="Organization already exists for this user")

    org = models.Organization(
        name=org_in.name,
        partner_organization=org_in.partner_organization,
        phone=org_in.phone,
        user_id=current_user.id,
    )
    db.add(org)
    db.commit()
    db.refresh(org)
    return organization_to_dict(org)


@router.get("/my")
def get_my_organization(current_user: models.User = Depends(get_current_user)):
    if not current_user.organization:
        raise HTTPException(status_code=404, detail="No organization for this user")
    return organization_to_dict(current_user.organization)
