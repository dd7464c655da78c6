"""Domain service — pure business logic for the question lifecycle and its answers."""
from __future__ import annotations
import uuid
from datetime import datetime, timezone
from typing import Optional

from teenhelp.domain.common.permissions import (
    EXPERT_ANSWER,
    MODERATE,
    Caller,
    has_capability,
)
from teenhelp.domain.common.result import Result
from teenhelp.domain.question.models import Answer, Like, LikeToggle, Question
from teenhelp.domain.question.rules import (
    ANSWERED,
    APPROVED,
    PENDING,
    validate_answer_content,
    validate_can_answer,
    validate_category,
    validate_moderation,
    validate_question_text,
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _new_id() -> str:
    return str(uuid.uuid4())


class QuestionDomainService:
    """
    Pure domain operations — no I/O. All methods return Result[T] and mutate
    the Question aggregate passed in; the application layer persists it.
    """

    def submit_question(self, text: Optional[str], category: Optional[str]) -> Result[Question]:
        """Create an anonymous Question in PENDING with no answers."""
        text_check = validate_question_text(text)
        if not text_check.is_success:
            return text_check.propagate()
        category_check = validate_category(category)
        if not category_check.is_success:
            return category_check.propagate()

        now = _now_iso()
        return Result.ok(
            Question(
                id=_new_id(),
                text=text_check.value,
                category=category_check.value,
                status=PENDING,
                created_at=now,
                updated_at=now,
            )
        )

    def moderate(
        self,
        question: Question,
        caller: Caller,
        new_status: str,
        rejection_reason: Optional[str] = None,
    ) -> Result[Question]:
        if not has_capability(caller, MODERATE):
            return Result.forbidden("Only moderators can moderate questions")

        check = validate_moderation(question.status, new_status, rejection_reason)
        if not check.is_success:
            return check.propagate()

        now = _now_iso()
        question.status = new_status
        question.rejection_reason = check.value
        question.moderated_by = caller.id
        question.moderated_at = now
        question.updated_at = now
        return Result.ok(question)

    def add_answer(self, question: Question, caller: Caller, content: Optional[str]) -> Result[Answer]:
        """Append an answer; the first one moves the question APPROVED → ANSWERED."""
        content_check = validate_answer_content(content)
        if not content_check.is_success:
            return content_check.propagate()
        state_check = validate_can_answer(question.status)
        if not state_check.is_success:
            return state_check.propagate()

        now = _now_iso()
        answer = Answer(
            id=_new_id(),
            question_id=question.id,
            content=content_check.value,
            answered_by=caller.id,
            is_expert_answer=has_capability(caller, EXPERT_ANSWER),
            created_at=now,
            updated_at=now,
        )
        question.answers.append(answer)
        if question.status == APPROVED and len(question.answers) == 1:
            question.status = ANSWERED
        question.updated_at = now
        return Result.ok(answer)

    def toggle_like(self, question: Question, answer_id: str, user_id: str) -> Result[LikeToggle]:
        answer = question.find_answer(answer_id)
        if answer is None:
            return Result.not_found("Answer not found")

        now = _now_iso()
        if answer.is_liked_by(user_id):
            answer.likes = [like for like in answer.likes if like.user_id != user_id]
            liked = False
        else:
            answer.likes.append(Like(user_id=user_id, created_at=now))
            liked = True
        answer.updated_at = now
        return Result.ok(LikeToggle(answer=answer, liked=liked))

    def mark_best_answer(self, question: Question, answer_id: str, caller: Caller) -> Result[Answer]:
        if not has_capability(caller, MODERATE):
            return Result.forbidden("Only moderators can mark best answers")

        target = question.find_answer(answer_id)
        if target is None:
            return Result.not_found("Answer not found")

        now = _now_iso()
        for answer in question.answers:
            if answer.is_best_answer and answer is not target:
                answer.is_best_answer = False
                answer.updated_at = now
        target.is_best_answer = True
        target.updated_at = now
        question.updated_at = now
        return Result.ok(target)
