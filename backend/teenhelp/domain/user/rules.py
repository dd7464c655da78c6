"""Validation for accounts, role changes and the expert application lifecycle."""
from __future__ import annotations
from typing import List, Optional, Union

from teenhelp.core.config import REJECTION_REASON_MAX_LENGTH
from teenhelp.domain.common.permissions import VALID_ROLES
from teenhelp.domain.common.result import Result

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 6

# Expert applications: NOT_APPLIED → PENDING → APPROVED | REJECTED
NOT_APPLIED = "not-applied"
APPLICATION_PENDING = "pending"
APPLICATION_APPROVED = "approved"
APPLICATION_REJECTED = "rejected"

APPLICATION_STATUSES = {APPLICATION_PENDING, APPLICATION_APPROVED, APPLICATION_REJECTED}
REVIEW_OUTCOMES = {APPLICATION_APPROVED, APPLICATION_REJECTED}


def validate_registration(username: Optional[str], password: Optional[str]) -> Result[str]:
    username = (username or "").strip()
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        return Result.fail(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
        )
    if len(password or "") < PASSWORD_MIN_LENGTH:
        return Result.fail(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    return Result.ok(username)


def validate_role(role: Optional[str]) -> Result[str]:
    if role not in VALID_ROLES:
        return Result.fail(f"'{role}' is not a valid role. Must be one of {sorted(VALID_ROLES)}.")
    return Result.ok(role)


def normalize_qualifications(qualifications: Union[str, List[str], None]) -> List[str]:
    if qualifications is None:
        return []
    if isinstance(qualifications, str):
        qualifications = [qualifications]
    return [q.strip() for q in qualifications if q and q.strip()]


def validate_application(
    current_status: str,
    qualifications: List[str],
    specialization: Optional[str],
    years_of_experience: Optional[int],
) -> Result[str]:
    """Returns Result.ok(cleaned specialization) or a typed failure."""
    if current_status != NOT_APPLIED:
        return Result.invalid_state("You have already submitted an expert application")
    specialization = (specialization or "").strip()
    if not qualifications or not specialization:
        return Result.fail("Qualifications and specialization are required")
    if years_of_experience is not None and years_of_experience < 0:
        return Result.fail("Years of experience cannot be negative")
    return Result.ok(specialization)


def validate_review(
    current_status: Optional[str],
    new_status: str,
    rejection_reason: Optional[str],
) -> Result[Optional[str]]:
    """
    Enforces PENDING → APPROVED | REJECTED for expert applications.
    Pass current_status=None to check only the request itself.
    """
    if new_status not in REVIEW_OUTCOMES:
        return Result.fail('Status must be either "approved" or "rejected"')

    reason = (rejection_reason or "").strip() or None
    if new_status == APPLICATION_REJECTED:
        if reason is None:
            return Result.fail("Rejection reason is required when rejecting an application")
        if len(reason) > REJECTION_REASON_MAX_LENGTH:
            return Result.fail(f"Rejection reason cannot exceed {REJECTION_REASON_MAX_LENGTH} characters")
    else:
        reason = None

    if current_status is not None and current_status != APPLICATION_PENDING:
        return Result.invalid_state("Application has already been reviewed")

    return Result.ok(reason)
