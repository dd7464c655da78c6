"""Domain service — expert application lifecycle. No I/O."""
from __future__ import annotations
from datetime import datetime, timezone
from typing import List, Optional, Union

from teenhelp.domain.common.permissions import MANAGE_USERS, Caller, has_capability
from teenhelp.domain.common.result import Result
from teenhelp.domain.user.models import ExpertApplication, ExpertReview
from teenhelp.domain.user.rules import (
    APPLICATION_APPROVED,
    APPLICATION_PENDING,
    NOT_APPLIED,
    normalize_qualifications,
    validate_application,
    validate_review,
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class ExpertDomainService:

    def apply(
        self,
        caller: Caller,
        current: Optional[ExpertApplication],
        qualifications: Union[str, List[str], None],
        specialization: Optional[str],
        years_of_experience: Optional[int] = None,
        license_number: Optional[str] = None,
        organization: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> Result[ExpertApplication]:
        cleaned = normalize_qualifications(qualifications)
        check = validate_application(
            current.status if current else NOT_APPLIED,
            cleaned,
            specialization,
            years_of_experience,
        )
        if not check.is_success:
            return check.propagate()

        return Result.ok(
            ExpertApplication(
                user_id=caller.id,
                status=APPLICATION_PENDING,
                specialization=check.value,
                qualifications=cleaned,
                years_of_experience=years_of_experience or 0,
                license_number=(license_number or "").strip() or None,
                organization=(organization or "").strip() or None,
                bio=(bio or "").strip() or None,
                applied_at=_now_iso(),
            )
        )

    def review(
        self,
        application: ExpertApplication,
        caller: Caller,
        new_status: str,
        rejection_reason: Optional[str] = None,
    ) -> Result[ExpertReview]:
        if not has_capability(caller, MANAGE_USERS):
            return Result.forbidden("Only admins can review expert applications")

        check = validate_review(application.status, new_status, rejection_reason)
        if not check.is_success:
            return check.propagate()

        application.status = new_status
        application.rejection_reason = check.value
        application.reviewed_by = caller.id
        application.reviewed_at = _now_iso()
        return Result.ok(
            ExpertReview(application=application, grant_expert=new_status == APPLICATION_APPROVED)
        )
