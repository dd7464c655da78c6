"""Moderation endpoints — queue, approve/reject, statistics. Moderator/admin only."""
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from teenhelp.api.auth import get_current_caller
from teenhelp.api.common import envelope, serialize_question, unwrap
from teenhelp.application.question_app_service import QuestionAppService
from teenhelp.container import get_question_app_service
from teenhelp.core.config import DEFAULT_PAGE_SIZE
from teenhelp.domain.common.permissions import Caller

router = APIRouter(prefix="/api/moderation", tags=["moderation"])


class ModerationBody(BaseModel):
    status: str
    rejection_reason: Optional[str] = None


@router.get("/pending")
def list_pending(
    page: int = Query(1),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    svc: QuestionAppService = Depends(get_question_app_service),
    caller: Caller = Depends(get_current_caller),
):
    result = unwrap(svc.list_pending(caller, page=page, limit=limit))
    return envelope(
        [serialize_question(q, include_answers=False) for q in result.items],
        count=len(result.items),
        total=result.total,
        total_pages=result.total_pages,
        current_page=result.page,
    )


@router.get("/stats")
def moderation_stats(
    svc: QuestionAppService = Depends(get_question_app_service),
    caller: Caller = Depends(get_current_caller),
):
    stats = unwrap(svc.moderation_stats(caller))
    return envelope({
        "pending": stats.pending,
        "approved": stats.approved,
        "rejected": stats.rejected,
        "answered": stats.answered,
        "total": stats.total,
    })


@router.put("/questions/{question_id}/status")
def update_question_status(
    question_id: str,
    body: ModerationBody,
    svc: QuestionAppService = Depends(get_question_app_service),
    caller: Caller = Depends(get_current_caller),
):
    question = unwrap(svc.moderate(question_id, caller, body.status, body.rejection_reason))
    return envelope(
        serialize_question(question),
        message=f"Question {question.status} successfully",
    )
