"""Answer endpoints — post, list, like/unlike, best answer."""
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from teenhelp.api.auth import get_current_caller
from teenhelp.api.common import envelope, serialize_answer, unwrap
from teenhelp.application.answer_app_service import AnswerAppService
from teenhelp.container import get_answer_app_service
from teenhelp.domain.common.permissions import Caller

router = APIRouter(prefix="/api", tags=["answers"])


class AnswerBody(BaseModel):
    content: Optional[str] = None


@router.get("/questions/{question_id}/answers")
def get_answers(
    question_id: str,
    svc: AnswerAppService = Depends(get_answer_app_service),
):
    question, answers = unwrap(svc.get_answers(question_id))
    return envelope(
        [serialize_answer(a) for a in answers],
        count=len(answers),
        question=question.text,
    )


@router.post("/questions/{question_id}/answers", status_code=status.HTTP_201_CREATED)
def add_answer(
    question_id: str,
    body: AnswerBody,
    svc: AnswerAppService = Depends(get_answer_app_service),
    caller: Caller = Depends(get_current_caller),
):
    answer = unwrap(svc.add_answer(question_id, caller, body.content))
    return envelope(serialize_answer(answer), message="Answer added successfully")


@router.post("/answers/{answer_id}/like")
def like_answer(
    answer_id: str,
    svc: AnswerAppService = Depends(get_answer_app_service),
    caller: Caller = Depends(get_current_caller),
):
    toggle = unwrap(svc.toggle_like(answer_id, caller))
    return envelope(
        message="Answer liked" if toggle.liked else "Answer unliked",
        liked=toggle.liked,
        likes=toggle.answer.like_count,
    )


@router.put("/questions/{question_id}/best-answer/{answer_id}")
def mark_best_answer(
    question_id: str,
    answer_id: str,
    svc: AnswerAppService = Depends(get_answer_app_service),
    caller: Caller = Depends(get_current_caller),
):
    answer = unwrap(svc.mark_best_answer(question_id, answer_id, caller))
    return envelope(serialize_answer(answer), message="Best answer marked successfully")
