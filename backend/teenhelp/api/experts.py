"""Expert endpoints — apply, admin review, public directory."""
from __future__ import annotations
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from teenhelp.api.auth import get_current_caller
from teenhelp.api.common import envelope, unwrap
from teenhelp.application.expert_app_service import ExpertAppService
from teenhelp.container import get_expert_app_service
from teenhelp.domain.common.permissions import Caller
from teenhelp.domain.user.models import ExpertApplication, User
from teenhelp.domain.user.rules import APPLICATION_PENDING

router = APIRouter(prefix="/api/experts", tags=["experts"])


class ApplicationBody(BaseModel):
    qualifications: Union[str, List[str], None] = None
    specialization: Optional[str] = None
    years_of_experience: Optional[int] = None
    license_number: Optional[str] = None
    organization: Optional[str] = None
    bio: Optional[str] = None


class ReviewBody(BaseModel):
    status: str
    rejection_reason: Optional[str] = None


def _serialize_application(app: ExpertApplication) -> dict:
    return {
        "status": app.status,
        "qualifications": app.qualifications,
        "specialization": app.specialization,
        "years_of_experience": app.years_of_experience,
        "license_number": app.license_number,
        "organization": app.organization,
        "bio": app.bio,
        "applied_at": app.applied_at,
        "reviewed_at": app.reviewed_at,
        "reviewed_by": app.reviewed_by,
        "rejection_reason": app.rejection_reason,
    }


def _serialize_applicant(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "display_name": user.display_name,
        "email": user.email,
        "expert_application": _serialize_application(user.expert_application),
    }


def _serialize_expert(user: User) -> dict:
    # public view: no contact details, no license number
    app = user.expert_application
    return {
        "id": user.id,
        "username": user.username,
        "display_name": user.display_name,
        "specialization": app.specialization if app else None,
        "years_of_experience": app.years_of_experience if app else 0,
        "organization": app.organization if app else None,
        "bio": app.bio if app else None,
        "stats": {
            "answers_count": user.stats.answers_count,
            "helpful_votes": user.stats.helpful_votes,
        },
    }


@router.post("/apply", status_code=status.HTTP_201_CREATED)
def apply_for_expert(
    body: ApplicationBody,
    svc: ExpertAppService = Depends(get_expert_app_service),
    caller: Caller = Depends(get_current_caller),
):
    application = unwrap(svc.apply(
        caller,
        body.qualifications,
        body.specialization,
        years_of_experience=body.years_of_experience,
        license_number=body.license_number,
        organization=body.organization,
        bio=body.bio,
    ))
    return envelope(
        _serialize_application(application),
        message="Expert application submitted successfully! It will be reviewed within 48 hours.",
    )


@router.get("/applications")
def list_applications(
    application_status: str = Query(APPLICATION_PENDING, alias="status"),
    svc: ExpertAppService = Depends(get_expert_app_service),
    caller: Caller = Depends(get_current_caller),
):
    applicants = unwrap(svc.list_applications(caller, application_status))
    return envelope([_serialize_applicant(u) for u in applicants], count=len(applicants))


@router.put("/applications/{user_id}/review")
def review_application(
    user_id: str,
    body: ReviewBody,
    svc: ExpertAppService = Depends(get_expert_app_service),
    caller: Caller = Depends(get_current_caller),
):
    user = unwrap(svc.review(user_id, caller, body.status, body.rejection_reason))
    return envelope(
        _serialize_applicant(user),
        message=f"Expert application {body.status} successfully",
    )


@router.get("")
def list_experts(
    specialization: Optional[str] = Query(None),
    svc: ExpertAppService = Depends(get_expert_app_service),
):
    experts = svc.list_experts(specialization)
    return envelope([_serialize_expert(u) for u in experts], count=len(experts))


@router.get("/{user_id}")
def get_expert(
    user_id: str,
    svc: ExpertAppService = Depends(get_expert_app_service),
):
    return envelope(_serialize_expert(unwrap(svc.get_expert(user_id))))
