"""Anonymous question endpoints — submit, browse, fetch."""
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from teenhelp.api.common import envelope, serialize_question, unwrap
from teenhelp.application.question_app_service import QuestionAppService
from teenhelp.container import get_question_app_service

router = APIRouter(prefix="/api/questions", tags=["questions"])


class QuestionSubmitBody(BaseModel):
    text: Optional[str] = None
    category: Optional[str] = None


@router.get("/categories")
def list_categories(svc: QuestionAppService = Depends(get_question_app_service)):
    return envelope(svc.list_categories())


@router.post("/submit", status_code=status.HTTP_201_CREATED)
def submit_question(
    body: QuestionSubmitBody,
    svc: QuestionAppService = Depends(get_question_app_service),
):
    question = unwrap(svc.submit_question(body.text, body.category))
    return envelope(
        serialize_question(question),
        message="Question submitted successfully! It will be reviewed soon.",
    )


@router.get("/all")
def list_questions(svc: QuestionAppService = Depends(get_question_app_service)):
    questions = svc.list_public()
    return envelope([serialize_question(q) for q in questions], count=len(questions))


@router.get("/category/{category}")
def list_questions_by_category(
    category: str,
    svc: QuestionAppService = Depends(get_question_app_service),
):
    questions = unwrap(svc.list_public_by_category(category))
    return envelope([serialize_question(q) for q in questions], count=len(questions))


@router.get("/{question_id}")
def get_question(
    question_id: str,
    svc: QuestionAppService = Depends(get_question_app_service),
):
    question = unwrap(svc.get_question(question_id))
    data = serialize_question(question)
    if svc.is_pending_approval(question):
        data["pending_approval"] = True
        return envelope(data, message="Question is pending approval")
    data["pending_approval"] = False
    return envelope(data)
