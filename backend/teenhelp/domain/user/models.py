"""User account + expert application models."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from teenhelp.domain.common.permissions import Caller


@dataclass
class UserStats:
    answers_count: int = 0
    helpful_votes: int = 0


@dataclass
class ExpertApplication:
    user_id: str
    status: str  # pending | approved | rejected
    specialization: str
    qualifications: List[str] = field(default_factory=list)
    years_of_experience: int = 0
    license_number: Optional[str] = None
    organization: Optional[str] = None
    bio: Optional[str] = None
    applied_at: str = ""
    reviewed_at: Optional[str] = None
    reviewed_by: Optional[str] = None
    rejection_reason: Optional[str] = None


@dataclass
class User:
    STAT_FIELDS = ("answers_count", "helpful_votes")

    id: str
    username: str
    password_hash: str
    role: str = "user"
    user_type: Optional[str] = None
    display_name: Optional[str] = None
    email: Optional[str] = None
    stats: UserStats = field(default_factory=UserStats)
    is_verified: bool = False
    created_at: str = ""
    expert_application: Optional[ExpertApplication] = None

    def as_caller(self) -> Caller:
        return Caller(id=self.id, role=self.role, user_type=self.user_type)


@dataclass
class ExpertReview:
    """An application after review, plus the account changes an approval implies."""
    application: ExpertApplication
    grant_expert: bool
