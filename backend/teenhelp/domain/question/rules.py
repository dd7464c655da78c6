"""Business rules for the Question domain — enforces the moderation state machine."""
from __future__ import annotations
from typing import List, Optional

from teenhelp.core.config import (
    ANSWER_MAX_LENGTH,
    QUESTION_MAX_LENGTH,
    REJECTION_REASON_MAX_LENGTH,
)
from teenhelp.domain.common.result import Result
from teenhelp.domain.question.models import Answer

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
ANSWERED = "answered"

VALID_STATUSES = {PENDING, APPROVED, REJECTED, ANSWERED}

# Statuses a moderator may choose; both only from PENDING
MODERATION_OUTCOMES = {APPROVED, REJECTED}

# Statuses visible in public listings and the answer list
PUBLIC_STATUSES = {APPROVED, ANSWERED}

# Statuses that still accept answers
ANSWERABLE_STATUSES = {APPROVED, ANSWERED}

DEFAULT_CATEGORY = "general"

CATEGORIES: List[str] = [
    "general",
    "addiction",
    "mental-health",
    "relationships",
    "school",
    "family",
    "peer-pressure",
    "self-esteem",
    "bullying",
    "drugs",
    "stress",
    "depression",
    "anxiety",
    "porn",
    "masturbation",
]


def validate_category(category: Optional[str]) -> Result[str]:
    if category is None or not category.strip():
        return Result.ok(DEFAULT_CATEGORY)
    category = category.strip()
    if category not in CATEGORIES:
        return Result.fail(f"'{category}' is not a valid category. Must be one of {CATEGORIES}.")
    return Result.ok(category)


def validate_question_text(text: Optional[str]) -> Result[str]:
    text = (text or "").strip()
    if not text:
        return Result.fail("Question is required")
    if len(text) > QUESTION_MAX_LENGTH:
        return Result.fail(f"Question cannot exceed {QUESTION_MAX_LENGTH} characters")
    return Result.ok(text)


def validate_answer_content(content: Optional[str]) -> Result[str]:
    content = (content or "").strip()
    if not content:
        return Result.fail("Answer content is required")
    if len(content) > ANSWER_MAX_LENGTH:
        return Result.fail(f"Answer cannot exceed {ANSWER_MAX_LENGTH} characters")
    return Result.ok(content)


def validate_moderation(
    current_status: Optional[str],
    new_status: str,
    rejection_reason: Optional[str],
) -> Result[Optional[str]]:
    """
    Enforces PENDING → APPROVED | REJECTED.
    Pass current_status=None to check only the request itself.
    Returns Result.ok(cleaned rejection reason) or a typed failure.
    """
    if new_status not in MODERATION_OUTCOMES:
        return Result.fail('Status must be either "approved" or "rejected"')

    reason = (rejection_reason or "").strip() or None
    if new_status == REJECTED:
        if reason is None:
            return Result.fail("Rejection reason is required when rejecting a question")
        if len(reason) > REJECTION_REASON_MAX_LENGTH:
            return Result.fail(
                f"Rejection reason cannot exceed {REJECTION_REASON_MAX_LENGTH} characters"
            )
    else:
        reason = None

    if current_status is not None and current_status != PENDING:
        return Result.invalid_state(
            f"Question has already been moderated (status '{current_status}')"
        )

    return Result.ok(reason)


def validate_can_answer(current_status: str) -> Result[str]:
    if current_status not in ANSWERABLE_STATUSES:
        return Result.invalid_state("Cannot answer pending or rejected questions")
    return Result.ok(current_status)


def sort_answers(answers: List[Answer]) -> List[Answer]:
    """Best answer first, then most liked, then newest."""
    by_newest = sorted(answers, key=lambda a: a.created_at, reverse=True)
    by_likes = sorted(by_newest, key=lambda a: a.like_count, reverse=True)
    return sorted(by_likes, key=lambda a: not a.is_best_answer)
