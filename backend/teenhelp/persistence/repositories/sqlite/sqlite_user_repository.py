"""SQLite implementation of UserRepository."""
from __future__ import annotations
import json
from typing import List, Optional

from teenhelp.domain.common.permissions import EXPERT_ROLE
from teenhelp.domain.user.models import ExpertApplication, ExpertReview, User, UserStats
from teenhelp.persistence.db import get_connection
from teenhelp.persistence.interfaces.user_repository import UserRepository

# users and expert_applications share no column names, so a.* can sit beside u.*
_SELECT_USER = """
    SELECT u.*, a.* FROM users u
    LEFT JOIN expert_applications a ON a.user_id = u.id
"""


def _row_to_application(row) -> Optional[ExpertApplication]:
    if row["user_id"] is None:
        return None
    return ExpertApplication(
        user_id=row["user_id"],
        status=row["status"],
        specialization=row["specialization"],
        qualifications=json.loads(row["qualifications"] or "[]"),
        years_of_experience=row["years_of_experience"],
        license_number=row["license_number"],
        organization=row["organization"],
        bio=row["bio"],
        applied_at=row["applied_at"],
        reviewed_at=row["reviewed_at"],
        reviewed_by=row["reviewed_by"],
        rejection_reason=row["rejection_reason"],
    )


def _row_to_user(row) -> User:
    return User(
        id=row["id"],
        username=row["username"],
        password_hash=row["password_hash"],
        role=row["role"],
        user_type=row["user_type"],
        display_name=row["display_name"],
        email=row["email"],
        stats=UserStats(
            answers_count=row["answers_count"],
            helpful_votes=row["helpful_votes"],
        ),
        is_verified=bool(row["is_verified"]),
        created_at=row["created_at"],
        expert_application=_row_to_application(row),
    )


class SqliteUserRepository(UserRepository):

    def add(self, user: User) -> None:
        conn = get_connection()
        try:
            conn.execute(
                """
                INSERT INTO users (
                    id, username, password_hash, role, user_type,
                    display_name, email, is_verified, created_at
                ) VALUES (
                    :id, :username, :password_hash, :role, :user_type,
                    :display_name, :email, :is_verified, :created_at
                )
                """,
                {
                    "id": user.id,
                    "username": user.username,
                    "password_hash": user.password_hash,
                    "role": user.role,
                    "user_type": user.user_type,
                    "display_name": user.display_name,
                    "email": user.email,
                    "is_verified": int(user.is_verified),
                    "created_at": user.created_at,
                },
            )
            conn.commit()
        finally:
            conn.close()

    def get_by_id(self, user_id: str) -> Optional[User]:
        conn = get_connection()
        try:
            row = conn.execute(_SELECT_USER + " WHERE u.id = ?", (user_id,)).fetchone()
        finally:
            conn.close()
        return _row_to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        conn = get_connection()
        try:
            row = conn.execute(_SELECT_USER + " WHERE u.username = ?", (username,)).fetchone()
        finally:
            conn.close()
        return _row_to_user(row) if row else None

    def update_profile(self, user_id: str, display_name: Optional[str], email: Optional[str]) -> None:
        conn = get_connection()
        try:
            conn.execute(
                "UPDATE users SET display_name = ?, email = ? WHERE id = ?",
                (display_name, email, user_id),
            )
            conn.commit()
        finally:
            conn.close()

    def update_role(self, user_id: str, role: str, user_type: Optional[str]) -> bool:
        conn = get_connection()
        try:
            cur = conn.execute(
                "UPDATE users SET role = ?, user_type = ? WHERE id = ?",
                (role, user_type, user_id),
            )
            conn.commit()
            return cur.rowcount > 0
        finally:
            conn.close()

    def increment_stat(self, user_id: str, stat: str, delta: int) -> None:
        if stat not in User.STAT_FIELDS:
            raise ValueError(f"Unknown user stat '{stat}'")
        conn = get_connection()
        try:
            # stat is whitelisted above
            conn.execute(
                f"UPDATE users SET {stat} = {stat} + ? WHERE id = ?",
                (delta, user_id),
            )
            conn.commit()
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Expert applications
    # ------------------------------------------------------------------
    def add_application(self, application: ExpertApplication) -> bool:
        conn = get_connection()
        try:
            cur = conn.execute(
                """
                INSERT OR IGNORE INTO expert_applications (
                    user_id, status, qualifications, specialization, years_of_experience,
                    license_number, organization, bio, applied_at
                ) VALUES (
                    :user_id, :status, :qualifications, :specialization, :years_of_experience,
                    :license_number, :organization, :bio, :applied_at
                )
                """,
                {
                    "user_id": application.user_id,
                    "status": application.status,
                    "qualifications": json.dumps(application.qualifications),
                    "specialization": application.specialization,
                    "years_of_experience": application.years_of_experience,
                    "license_number": application.license_number,
                    "organization": application.organization,
                    "bio": application.bio,
                    "applied_at": application.applied_at,
                },
            )
            conn.commit()
            return cur.rowcount > 0
        finally:
            conn.close()

    def list_applications(self, status: str) -> List[User]:
        conn = get_connection()
        try:
            rows = conn.execute(
                _SELECT_USER + " WHERE a.status = ? ORDER BY a.applied_at DESC",
                (status,),
            ).fetchall()
        finally:
            conn.close()
        return [_row_to_user(r) for r in rows]

    def save_review(self, review: ExpertReview, expected_status: str) -> bool:
        application = review.application
        conn = get_connection()
        try:
            with conn:
                cur = conn.execute(
                    """
                    UPDATE expert_applications SET
                        status           = :status,
                        reviewed_at      = :reviewed_at,
                        reviewed_by      = :reviewed_by,
                        rejection_reason = :rejection_reason
                    WHERE user_id = :user_id AND status = :expected_status
                    """,
                    {
                        "user_id": application.user_id,
                        "status": application.status,
                        "reviewed_at": application.reviewed_at,
                        "reviewed_by": application.reviewed_by,
                        "rejection_reason": application.rejection_reason,
                        "expected_status": expected_status,
                    },
                )
                if cur.rowcount == 0:
                    return False
                if review.grant_expert:
                    conn.execute(
                        "UPDATE users SET role = ?, is_verified = 1 WHERE id = ?",
                        (EXPERT_ROLE, application.user_id),
                    )
            return True
        finally:
            conn.close()

    def list_verified_experts(self, specialization: Optional[str] = None) -> List[User]:
        sql = _SELECT_USER + " WHERE u.role = ? AND u.is_verified = 1"
        params: list = [EXPERT_ROLE]
        if specialization:
            sql += " AND instr(lower(a.specialization), lower(?)) > 0"
            params.append(specialization)
        sql += " ORDER BY u.helpful_votes DESC, u.username ASC"

        conn = get_connection()
        try:
            rows = conn.execute(sql, params).fetchall()
        finally:
            conn.close()
        return [_row_to_user(r) for r in rows]
