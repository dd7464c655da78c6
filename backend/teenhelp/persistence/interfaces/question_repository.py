"""Abstract repository interface for the Question aggregate (answers included)."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from teenhelp.domain.question.models import Answer, LikeToggle, Question


class QuestionRepository(ABC):

    @abstractmethod
    def add(self, question: Question) -> None:
        """Insert a freshly submitted question (no answers yet)."""
        ...

    @abstractmethod
    def get_by_id(self, question_id: str) -> Optional[Question]:
        """Return the Question with its answers and likes populated, or None."""
        ...

    @abstractmethod
    def find_by_answer_id(self, answer_id: str) -> Optional[Question]:
        """Return the Question owning the given answer, or None."""
        ...

    @abstractmethod
    def list_by_status(self, statuses: Iterable[str], category: Optional[str] = None) -> List[Question]:
        """Return questions in any of the statuses, newest first, answers populated."""
        ...

    @abstractmethod
    def list_page_by_status(self, status: str, offset: int, limit: int) -> List[Question]:
        """Return one page of questions in a status, newest first, WITHOUT answers."""
        ...

    @abstractmethod
    def count_by_status(self) -> Dict[str, int]:
        """Return {status: count} for every status that has at least one question."""
        ...

    @abstractmethod
    def save_moderation(self, question: Question, expected_status: str) -> bool:
        """
        Write status + moderation fields only if the stored status still equals
        expected_status. Returns False when another writer got there first.
        """
        ...

    @abstractmethod
    def save_new_answer(self, question: Question, answer: Answer) -> None:
        """Append the answer row and persist the question's (possibly changed) status."""
        ...

    @abstractmethod
    def save_like_toggle(self, question_id: str, toggle: LikeToggle, user_id: str) -> None:
        """Insert or remove a single like."""
        ...

    @abstractmethod
    def save_best_answer(self, question_id: str, answer_id: str) -> None:
        """Flag answer_id as best and clear the flag on every sibling, atomically."""
        ...
