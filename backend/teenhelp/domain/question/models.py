"""Question domain models — pure Python, no DB or HTTP dependencies."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Like:
    user_id: str
    created_at: str = ""


@dataclass
class Answer:
    id: str
    question_id: str
    content: str
    answered_by: str
    is_expert_answer: bool = False
    is_best_answer: bool = False
    likes: List[Like] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    @property
    def like_count(self) -> int:
        return len(self.likes)

    def is_liked_by(self, user_id: str) -> bool:
        return any(like.user_id == user_id for like in self.likes)


@dataclass
class Question:
    id: str
    text: str
    category: str
    status: str  # pending | approved | rejected | answered
    created_at: str
    updated_at: str
    answers: List[Answer] = field(default_factory=list)
    moderated_by: Optional[str] = None
    moderated_at: Optional[str] = None
    rejection_reason: Optional[str] = None

    def find_answer(self, answer_id: str) -> Optional[Answer]:
        for answer in self.answers:
            if answer.id == answer_id:
                return answer
        return None


@dataclass
class QuestionPage:
    items: List[Question]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0


@dataclass
class ModerationStats:
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    answered: int = 0

    @property
    def total(self) -> int:
        return self.pending + self.approved + self.rejected + self.answered


@dataclass
class LikeToggle:
    answer: Answer
    liked: bool  # False means the call removed an existing like
