"""SQLite implementation of QuestionRepository."""
from __future__ import annotations
import sqlite3
from typing import Dict, Iterable, List, Optional

from teenhelp.domain.question.models import Answer, Like, LikeToggle, Question
from teenhelp.domain.question.rules import ANSWERED, APPROVED
from teenhelp.persistence.db import get_connection
from teenhelp.persistence.interfaces.question_repository import QuestionRepository


def _row_to_answer(row, likes: List[Like]) -> Answer:
    return Answer(
        id=row["id"],
        question_id=row["question_id"],
        content=row["content"],
        answered_by=row["answered_by"],
        is_expert_answer=bool(row["is_expert_answer"]),
        is_best_answer=bool(row["is_best_answer"]),
        likes=likes,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_question(row, answers: Optional[List[Answer]] = None) -> Question:
    return Question(
        id=row["id"],
        text=row["text"],
        category=row["category"],
        status=row["status"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        answers=answers or [],
        moderated_by=row["moderated_by"],
        moderated_at=row["moderated_at"],
        rejection_reason=row["rejection_reason"],
    )


def _load_answers(conn: sqlite3.Connection, question_id: str) -> List[Answer]:
    like_rows = conn.execute(
        "SELECT * FROM answer_likes WHERE question_id = ? ORDER BY created_at ASC",
        (question_id,),
    ).fetchall()
    likes: Dict[str, List[Like]] = {}
    for lr in like_rows:
        likes.setdefault(lr["answer_id"], []).append(
            Like(user_id=lr["user_id"], created_at=lr["created_at"])
        )

    answer_rows = conn.execute(
        "SELECT * FROM answers WHERE question_id = ? ORDER BY position ASC",
        (question_id,),
    ).fetchall()
    return [_row_to_answer(ar, likes.get(ar["id"], [])) for ar in answer_rows]


class SqliteQuestionRepository(QuestionRepository):

    def add(self, question: Question) -> None:
        conn = get_connection()
        try:
            conn.execute(
                """
                INSERT INTO questions (id, text, category, status, created_at, updated_at)
                VALUES (:id, :text, :category, :status, :created_at, :updated_at)
                """,
                {
                    "id": question.id,
                    "text": question.text,
                    "category": question.category,
                    "status": question.status,
                    "created_at": question.created_at,
                    "updated_at": question.updated_at,
                },
            )
            conn.commit()
        finally:
            conn.close()

    def get_by_id(self, question_id: str) -> Optional[Question]:
        conn = get_connection()
        try:
            row = conn.execute("SELECT * FROM questions WHERE id = ?", (question_id,)).fetchone()
            if not row:
                return None
            return _row_to_question(row, _load_answers(conn, question_id))
        finally:
            conn.close()

    def find_by_answer_id(self, answer_id: str) -> Optional[Question]:
        conn = get_connection()
        try:
            row = conn.execute(
                "SELECT question_id FROM answers WHERE id = ?", (answer_id,)
            ).fetchone()
        finally:
            conn.close()
        if not row:
            return None
        return self.get_by_id(row["question_id"])

    def list_by_status(self, statuses: Iterable[str], category: Optional[str] = None) -> List[Question]:
        statuses = list(statuses)
        placeholders = ", ".join("?" for _ in statuses)
        sql = f"SELECT * FROM questions WHERE status IN ({placeholders})"
        params: list = list(statuses)
        if category is not None:
            sql += " AND category = ?"
            params.append(category)
        sql += " ORDER BY created_at DESC"

        conn = get_connection()
        try:
            rows = conn.execute(sql, params).fetchall()
            return [_row_to_question(r, _load_answers(conn, r["id"])) for r in rows]
        finally:
            conn.close()

    def list_page_by_status(self, status: str, offset: int, limit: int) -> List[Question]:
        conn = get_connection()
        try:
            rows = conn.execute(
                """
                SELECT * FROM questions
                WHERE status = ?
                ORDER BY created_at DESC
                LIMIT ? OFFSET ?
                """,
                (status, limit, offset),
            ).fetchall()
        finally:
            conn.close()
        return [_row_to_question(r) for r in rows]

    def count_by_status(self) -> Dict[str, int]:
        conn = get_connection()
        try:
            rows = conn.execute(
                "SELECT status, COUNT(*) AS n FROM questions GROUP BY status"
            ).fetchall()
        finally:
            conn.close()
        return {r["status"]: r["n"] for r in rows}

    def save_moderation(self, question: Question, expected_status: str) -> bool:
        conn = get_connection()
        try:
            cur = conn.execute(
                """
                UPDATE questions SET
                    status           = :status,
                    moderated_by     = :moderated_by,
                    moderated_at     = :moderated_at,
                    rejection_reason = :rejection_reason,
                    updated_at       = :updated_at
                WHERE id = :id AND status = :expected_status
                """,
                {
                    "id": question.id,
                    "status": question.status,
                    "moderated_by": question.moderated_by,
                    "moderated_at": question.moderated_at,
                    "rejection_reason": question.rejection_reason,
                    "updated_at": question.updated_at,
                    "expected_status": expected_status,
                },
            )
            conn.commit()
            return cur.rowcount > 0
        finally:
            conn.close()

    def save_new_answer(self, question: Question, answer: Answer) -> None:
        conn = get_connection()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO answers (
                        question_id, id, position, content, answered_by,
                        is_expert_answer, is_best_answer, created_at, updated_at
                    ) VALUES (
                        :question_id, :id,
                        (SELECT COALESCE(MAX(position), 0) + 1 FROM answers WHERE question_id = :question_id),
                        :content, :answered_by,
                        :is_expert_answer, :is_best_answer, :created_at, :updated_at
                    )
                    """,
                    {
                        "question_id": question.id,
                        "id": answer.id,
                        "content": answer.content,
                        "answered_by": answer.answered_by,
                        "is_expert_answer": int(answer.is_expert_answer),
                        "is_best_answer": int(answer.is_best_answer),
                        "created_at": answer.created_at,
                        "updated_at": answer.updated_at,
                    },
                )
                # Only APPROVED → ANSWERED is written here; safe to repeat.
                if question.status == ANSWERED:
                    conn.execute(
                        "UPDATE questions SET status = ? WHERE id = ? AND status = ?",
                        (ANSWERED, question.id, APPROVED),
                    )
                conn.execute(
                    "UPDATE questions SET updated_at = ? WHERE id = ?",
                    (question.updated_at, question.id),
                )
        finally:
            conn.close()

    def save_like_toggle(self, question_id: str, toggle: LikeToggle, user_id: str) -> None:
        conn = get_connection()
        try:
            with conn:
                if toggle.liked:
                    like = next(l for l in toggle.answer.likes if l.user_id == user_id)
                    conn.execute(
                        """
                        INSERT OR IGNORE INTO answer_likes (question_id, answer_id, user_id, created_at)
                        VALUES (?, ?, ?, ?)
                        """,
                        (question_id, toggle.answer.id, user_id, like.created_at),
                    )
                else:
                    conn.execute(
                        "DELETE FROM answer_likes WHERE question_id = ? AND answer_id = ? AND user_id = ?",
                        (question_id, toggle.answer.id, user_id),
                    )
                conn.execute(
                    "UPDATE answers SET updated_at = ? WHERE question_id = ? AND id = ?",
                    (toggle.answer.updated_at, question_id, toggle.answer.id),
                )
        finally:
            conn.close()

    def save_best_answer(self, question_id: str, answer_id: str) -> None:
        conn = get_connection()
        try:
            with conn:
                conn.execute(
                    """
                    UPDATE answers SET is_best_answer = CASE WHEN id = ? THEN 1 ELSE 0 END
                    WHERE question_id = ?
                    """,
                    (answer_id, question_id),
                )
        finally:
            conn.close()
