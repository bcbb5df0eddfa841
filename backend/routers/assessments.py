"""
Assessment endpoints: the wizard's save-as-you-go persistence.

Every step PUTs a partial update. Updates are always accepted, even when a
step is incomplete; the step endpoint reports what is still missing, and
quote generation is where incomplete data is refused.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from .. import models
from ..auth import get_current_user
from ..database import get_db
from ..schemas import AssessmentFields
from ..wizard.steps import TOTAL_STEPS, merge_draft, step_progress, step_status

router = APIRouter(prefix="/assessments", tags=["assessments"])

EDITABLE_FIELDS = list(AssessmentFields.model_fields)


def assessment_fields(assessment: models.Assessment) -> dict:
    """The editable fields of an assessment as a camelCase dict of raw values."""
    return {to_camel(name): getattr(assessment, name) for name in EDITABLE_FIELDS}


def assessment_to_dict(assessment: models.Assessment) -> dict:
    """Wire shape: camelCase keys, ISO dates, decimal strings for money."""
    data = assessment_fields(assessment)
    date = data.get("preferredInstallationDate")
    data["preferredInstallationDate"] = date.isoformat() if date else None
    data.update({
        "id": assessment.id,
        "userId": assessment.user_id,
        "status": assessment.status,
        "totalCost": str(assessment.total_cost) if assessment.total_cost is not None else None,
        "createdAt": assessment.created_at.isoformat() if assessment.created_at else None,
        "updatedAt": assessment.updated_at.isoformat() if assessment.updated_at else None,
    })
    return data


def get_owned_assessment(db: Session, assessment_id: int, user: models.User) -> models.Assessment:
    """Fetch an assessment the user owns. Someone else's record is a 404, same as a missing one."""
    assessment = db.query(models.Assessment).filter(
        models.Assessment.id == assessment_id,
        models.Assessment.user_id == user.id,
    ).first()
    if not assessment:
        raise HTTPException(status_code=404, detail="Assessment not found")
    return assessment


def owner_organization_id(user: models.User, requested: Optional[int] = None) -> Optional[int]:
    """
    The organization a user's assessments belong to: their own, or None before
    they create one. Naming any other organization is a 403.
    """
    own = user.organization.id if user.organization else None
    if requested is not None and requested != own:
        raise HTTPException(status_code=403, detail="Assessments can only belong to your own organization")
    return own


@router.post("/")
def create_assessment(
    assessment_in: AssessmentFields,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    data = assessment_in.model_dump(exclude_unset=True)
    data.setdefault("service_type", models.ServiceType.SITE_ASSESSMENT.value)
    data["organization_id"] = owner_organization_id(current_user, data.get("organization_id"))

    assessment = models.Assessment(user_id=current_user.id, **data)
    db.add(assessment)
    db.commit()
    db.refresh(assessment)
    return assessment_to_dict(assessment)


@router.get("/")
def list_assessments(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    assessments = db.query(models.Assessment).filter(
        models.Assessment.user_id == current_user.id,
    ).order_by(models.Assessment.created_at.desc(), models.Assessment.id.desc()).all()
    return [assessment_to_dict(a) for a in assessments]


@router.get("/{assessment_id}")
def get_assessment(
    assessment_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return assessment_to_dict(get_owned_assessment(db, assessment_id, current_user))


@router.put("/{assessment_id}")
def update_assessment(
    assessment_id: int,
    updates: AssessmentFields,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Merge a partial update into the stored draft."""
    assessment = get_owned_assessment(db, assessment_id, current_user)

    changes = updates.model_dump(by_alias=True, exclude_unset=True)
    organization_id = owner_organization_id(current_user, changes.get("organizationId"))

    merged = merge_draft(assessment_fields(assessment), changes)
    fields = AssessmentFields.model_validate(merged)
    for name, value in fields.model_dump().items():
        setattr(assessment, name, value)
    assessment.organization_id = organization_id

    db.commit()
    db.refresh(assessment)
    return assessment_to_dict(assessment)


@router.get("/{assessment_id}/steps")
def get_assessment_steps(
    assessment_id: int,
    current_step: int = Query(1, ge=1, le=TOTAL_STEPS),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Per-step completeness plus the progress bar value for the current step."""
    data = assessment_fields(get_owned_assessment(db, assessment_id, current_user))
    return {
        "currentStep": current_step,
        "totalSteps": TOTAL_STEPS,
        "progress": step_progress(current_step, TOTAL_STEPS),
        "steps": [step_status(step, data) for step in range(1, TOTAL_STEPS + 1)],
    }
