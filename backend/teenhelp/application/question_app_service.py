"""Application service — question submission, public reads and moderation."""
from __future__ import annotations
import logging
from typing import List, Optional

from teenhelp.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from teenhelp.domain.common.permissions import MODERATE, Caller, has_capability
from teenhelp.domain.common.result import Result
from teenhelp.domain.question.models import ModerationStats, Question, QuestionPage
from teenhelp.domain.question.rules import (
    CATEGORIES,
    PENDING,
    PUBLIC_STATUSES,
    validate_category,
    validate_moderation,
)
from teenhelp.domain.question.service import QuestionDomainService
from teenhelp.persistence.interfaces.question_repository import QuestionRepository

logger = logging.getLogger(__name__)


class QuestionAppService:
    def __init__(self, repo: QuestionRepository):
        self._repo = repo
        self._domain = QuestionDomainService()

    # ------------------------------------------------------------------
    # SUBMIT
    # ------------------------------------------------------------------
    def submit_question(self, text: Optional[str], category: Optional[str]) -> Result[Question]:
        result = self._domain.submit_question(text, category)
        if not result.is_success:
            return result
        self._repo.add(result.value)
        logger.info("Question %s submitted in '%s'", result.value.id, result.value.category)
        return result

    # ------------------------------------------------------------------
    # PUBLIC READS
    # ------------------------------------------------------------------
    def list_categories(self) -> List[str]:
        return list(CATEGORIES)

    def list_public(self) -> List[Question]:
        return self._repo.list_by_status(PUBLIC_STATUSES)

    def list_public_by_category(self, category: str) -> Result[List[Question]]:
        check = validate_category(category)
        if not check.is_success:
            return check.propagate()
        return Result.ok(self._repo.list_by_status(PUBLIC_STATUSES, category=check.value))

    def get_question(self, question_id: str) -> Result[Question]:
        """Any status may be fetched directly; callers flag non-public ones."""
        question = self._repo.get_by_id(question_id)
        if not question:
            return Result.not_found("Question not found")
        return Result.ok(question)

    @staticmethod
    def is_pending_approval(question: Question) -> bool:
        return question.status not in PUBLIC_STATUSES

    # ------------------------------------------------------------------
    # MODERATION
    # ------------------------------------------------------------------
    def list_pending(self, caller: Caller, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Result[QuestionPage]:
        if not has_capability(caller, MODERATE):
            return Result.forbidden("Only moderators can view the moderation queue")

        page = page if page and page > 0 else 1
        limit = limit if limit and limit > 0 else DEFAULT_PAGE_SIZE
        limit = min(limit, MAX_PAGE_SIZE)

        items = self._repo.list_page_by_status(PENDING, offset=(page - 1) * limit, limit=limit)
        total = self._repo.count_by_status().get(PENDING, 0)
        return Result.ok(QuestionPage(items=items, total=total, page=page, limit=limit))

    def moderate(
        self,
        question_id: str,
        caller: Caller,
        status: str,
        rejection_reason: Optional[str] = None,
    ) -> Result[Question]:
        if not has_capability(caller, MODERATE):
            return Result.forbidden("Only moderators can moderate questions")

        request_check = validate_moderation(None, status, rejection_reason)
        if not request_check.is_success:
            return request_check.propagate()

        question = self._repo.get_by_id(question_id)
        if not question:
            return Result.not_found("Question not found")

        previous_status = question.status
        result = self._domain.moderate(question, caller, status, rejection_reason)
        if not result.is_success:
            return result

        if not self._repo.save_moderation(result.value, expected_status=previous_status):
            return Result.invalid_state("Question has already been moderated")

        logger.info("Question %s %s by %s", question_id, status, caller.id)
        return result

    def moderation_stats(self, caller: Caller) -> Result[ModerationStats]:
        if not has_capability(caller, MODERATE):
            return Result.forbidden("Only moderators can view moderation statistics")
        counts = self._repo.count_by_status()
        return Result.ok(
            ModerationStats(
                pending=counts.get("pending", 0),
                approved=counts.get("approved", 0),
                rejected=counts.get("rejected", 0),
                answered=counts.get("answered", 0),
            )
        )
