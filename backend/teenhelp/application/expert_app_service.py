"""Application service — expert applications, admin review and the public expert directory."""
from __future__ import annotations
import logging
from typing import List, Optional, Union

from teenhelp.domain.common.permissions import EXPERT_ROLE, MANAGE_USERS, Caller, has_capability
from teenhelp.domain.common.result import Result
from teenhelp.domain.user.models import ExpertApplication, User
from teenhelp.domain.user.rules import APPLICATION_PENDING, APPLICATION_STATUSES, validate_review
from teenhelp.domain.user.service import ExpertDomainService
from teenhelp.persistence.interfaces.user_repository import UserRepository

logger = logging.getLogger(__name__)


class ExpertAppService:
    def __init__(self, users: UserRepository):
        self._users = users
        self._domain = ExpertDomainService()

    # ------------------------------------------------------------------
    # APPLY
    # ------------------------------------------------------------------
    def apply(
        self,
        caller: Caller,
        qualifications: Union[str, List[str], None],
        specialization: Optional[str],
        years_of_experience: Optional[int] = None,
        license_number: Optional[str] = None,
        organization: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> Result[ExpertApplication]:
        user = self._users.get_by_id(caller.id)
        if not user:
            return Result.not_found("User not found")

        result = self._domain.apply(
            caller,
            user.expert_application,
            qualifications,
            specialization,
            years_of_experience=years_of_experience,
            license_number=license_number,
            organization=organization,
            bio=bio,
        )
        if not result.is_success:
            return result

        if not self._users.add_application(result.value):
            return Result.invalid_state("You have already submitted an expert application")
        logger.info("User %s applied to become an expert (%s)", caller.id, result.value.specialization)
        return result

    # ------------------------------------------------------------------
    # ADMIN REVIEW
    # ------------------------------------------------------------------
    def list_applications(self, caller: Caller, status: str = APPLICATION_PENDING) -> Result[List[User]]:
        if not has_capability(caller, MANAGE_USERS):
            return Result.forbidden("Only admins can view expert applications")
        if status not in APPLICATION_STATUSES:
            return Result.fail(f"'{status}' is not a valid application status")
        return Result.ok(self._users.list_applications(status))

    def review(
        self,
        user_id: str,
        caller: Caller,
        status: str,
        rejection_reason: Optional[str] = None,
    ) -> Result[User]:
        if not has_capability(caller, MANAGE_USERS):
            return Result.forbidden("Only admins can review expert applications")

        request_check = validate_review(None, status, rejection_reason)
        if not request_check.is_success:
            return request_check.propagate()

        user = self._users.get_by_id(user_id)
        if not user:
            return Result.not_found("User not found")
        if user.expert_application is None:
            return Result.not_found("No expert application for this user")

        previous_status = user.expert_application.status
        result = self._domain.review(user.expert_application, caller, status, rejection_reason)
        if not result.is_success:
            return result.propagate()

        if not self._users.save_review(result.value, expected_status=previous_status):
            return Result.invalid_state("Application has already been reviewed")

        logger.info("Expert application of %s %s by %s", user_id, status, caller.id)
        return Result.ok(self._users.get_by_id(user_id))

    # ------------------------------------------------------------------
    # PUBLIC DIRECTORY
    # ------------------------------------------------------------------
    def list_experts(self, specialization: Optional[str] = None) -> List[User]:
        return self._users.list_verified_experts((specialization or "").strip() or None)

    def get_expert(self, user_id: str) -> Result[User]:
        user = self._users.get_by_id(user_id)
        if not user or user.role != EXPERT_ROLE or not user.is_verified:
            return Result.not_found("Expert not found")
        return Result.ok(user)
