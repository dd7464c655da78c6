"""Application service — answers attached to a question, likes and best-answer picks."""
from __future__ import annotations
import logging
import sqlite3
from typing import List, Optional

from teenhelp.domain.common.permissions import EXPERT_ANSWER, Caller, has_capability
from teenhelp.domain.common.result import Result
from teenhelp.domain.question.models import Answer, LikeToggle, Question
from teenhelp.domain.question.rules import PUBLIC_STATUSES, sort_answers
from teenhelp.domain.question.service import QuestionDomainService
from teenhelp.persistence.interfaces.question_repository import QuestionRepository
from teenhelp.persistence.interfaces.user_repository import UserRepository

logger = logging.getLogger(__name__)


class AnswerAppService:
    def __init__(self, questions: QuestionRepository, users: UserRepository):
        self._questions = questions
        self._users = users
        self._domain = QuestionDomainService()

    def add_answer(self, question_id: str, caller: Caller, content: Optional[str]) -> Result[Answer]:
        question = self._questions.get_by_id(question_id)
        if not question:
            return Result.not_found("Question not found")

        result = self._domain.add_answer(question, caller, content)
        if not result.is_success:
            return result

        answer = result.value
        self._questions.save_new_answer(question, answer)
        if answer.is_expert_answer:
            self._bump_stat(caller.id, "answers_count", 1)
        return result

    def get_answers(self, question_id: str) -> Result[tuple[Question, List[Answer]]]:
        question = self._questions.get_by_id(question_id)
        if not question or question.status not in PUBLIC_STATUSES:
            return Result.not_found("Question not found or not yet approved")
        return Result.ok((question, sort_answers(question.answers)))

    def toggle_like(self, answer_id: str, caller: Caller) -> Result[LikeToggle]:
        question = self._questions.find_by_answer_id(answer_id)
        if not question:
            return Result.not_found("Answer not found")

        result = self._domain.toggle_like(question, answer_id, caller.id)
        if not result.is_success:
            return result

        toggle = result.value
        self._questions.save_like_toggle(question.id, toggle, caller.id)

        author = self._users.get_by_id(toggle.answer.answered_by)
        if author and has_capability(author.as_caller(), EXPERT_ANSWER):
            self._bump_stat(author.id, "helpful_votes", 1 if toggle.liked else -1)
        return result

    def mark_best_answer(self, question_id: str, answer_id: str, caller: Caller) -> Result[Answer]:
        question = self._questions.get_by_id(question_id)
        if not question:
            return Result.not_found("Question not found")

        result = self._domain.mark_best_answer(question, answer_id, caller)
        if not result.is_success:
            return result

        self._questions.save_best_answer(question.id, answer_id)
        logger.info("Answer %s marked best on question %s by %s", answer_id, question_id, caller.id)
        return result

    def _bump_stat(self, user_id: str, stat: str, delta: int) -> None:
        # The answer/like is already committed; a lost counter update is tolerated drift.
        try:
            self._users.increment_stat(user_id, stat, delta)
        except sqlite3.Error:
            logger.warning("Could not update %s for user %s by %+d", stat, user_id, delta, exc_info=True)
