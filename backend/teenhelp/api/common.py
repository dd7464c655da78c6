"""Response envelope + Result → HTTP error mapping shared by the routers."""
from __future__ import annotations
from typing import Any, Optional

from fastapi import HTTPException, status

from teenhelp.domain.common.result import ErrorKind, Result
from teenhelp.domain.question.models import Answer, Question

_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_STATE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
}


def unwrap(result: Result) -> Any:
    """Return result.value, or raise the HTTPException matching its error kind."""
    if not result.is_success:
        code = _STATUS_BY_KIND.get(result.kind, status.HTTP_400_BAD_REQUEST)
        raise HTTPException(status_code=code, detail=result.error)
    return result.value


def envelope(data: Any = None, message: Optional[str] = None, **extra: Any) -> dict:
    body: dict = {"success": True}
    if message is not None:
        body["message"] = message
    body.update(extra)
    if data is not None:
        body["data"] = data
    return body


# ------------------------------------------------------------------
# Serializers
# ------------------------------------------------------------------
def serialize_answer(a: Answer) -> dict:
    return {
        "id": a.id,
        "question_id": a.question_id,
        "content": a.content,
        "answered_by": a.answered_by,
        "is_expert_answer": a.is_expert_answer,
        "is_best_answer": a.is_best_answer,
        "likes": [{"user_id": l.user_id, "created_at": l.created_at} for l in a.likes],
        "like_count": a.like_count,
        "created_at": a.created_at,
        "updated_at": a.updated_at,
    }


def serialize_question(q: Question, include_answers: bool = True) -> dict:
    body = {
        "id": q.id,
        "text": q.text,
        "category": q.category,
        "status": q.status,
        "moderated_by": q.moderated_by,
        "moderated_at": q.moderated_at,
        "rejection_reason": q.rejection_reason,
        "created_at": q.created_at,
        "updated_at": q.updated_at,
    }
    if include_answers:
        body["answers"] = [serialize_answer(a) for a in q.answers]
    return body
