"""Role → capability mapping. The only place role strings are compared."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

VALID_ROLES = {"user", "expert", "counselor", "therapist", "moderator", "admin"}

# Granted by an approved expert application
EXPERT_ROLE = "expert"

MODERATE = "moderate"
EXPERT_ANSWER = "expert_answer"
MANAGE_USERS = "manage_users"

CAPABILITY_ROLES: dict[str, set[str]] = {
    MODERATE: {"moderator", "admin"},
    EXPERT_ANSWER: {"expert", "counselor"},
    MANAGE_USERS: {"admin"},
}

# user_type tags that grant a capability regardless of role
CAPABILITY_USER_TYPES: dict[str, set[str]] = {
    EXPERT_ANSWER: {"counselor"},
}


@dataclass
class Caller:
    id: str
    role: str = "user"
    user_type: Optional[str] = None


def has_capability(caller: Optional[Caller], capability: str) -> bool:
    if caller is None:
        return False
    if caller.role in CAPABILITY_ROLES.get(capability, set()):
        return True
    return caller.user_type in CAPABILITY_USER_TYPES.get(capability, set())
