"""Abstract repository interface for User accounts and their expert application."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional

from teenhelp.domain.user.models import ExpertApplication, ExpertReview, User


class UserRepository(ABC):

    @abstractmethod
    def add(self, user: User) -> None:
        ...

    @abstractmethod
    def get_by_id(self, user_id: str) -> Optional[User]:
        """Return the User with expert_application populated (None if never applied)."""
        ...

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[User]:
        ...

    @abstractmethod
    def update_profile(self, user_id: str, display_name: Optional[str], email: Optional[str]) -> None:
        ...

    @abstractmethod
    def update_role(self, user_id: str, role: str, user_type: Optional[str]) -> bool:
        """Returns True if a user row was updated."""
        ...

    @abstractmethod
    def increment_stat(self, user_id: str, stat: str, delta: int) -> None:
        """Add delta to one of the counters in User.STAT_FIELDS."""
        ...

    @abstractmethod
    def add_application(self, application: ExpertApplication) -> bool:
        """Insert a new application. Returns False if the user already has one."""
        ...

    @abstractmethod
    def list_applications(self, status: str) -> List[User]:
        """Users whose application is in status, most recently applied first."""
        ...

    @abstractmethod
    def save_review(self, review: ExpertReview, expected_status: str) -> bool:
        """
        Write the reviewed application only if its stored status still equals
        expected_status; on approval also make the user a verified expert, in
        the same transaction. Returns False when another reviewer got there first.
        """
        ...

    @abstractmethod
    def list_verified_experts(self, specialization: Optional[str] = None) -> List[User]:
        """Verified experts, most helpful first; specialization is a case-insensitive substring."""
        ...
