"""Dependency injection container — wires implementations to interfaces."""
from __future__ import annotations
from functools import lru_cache

from teenhelp.persistence.repositories.sqlite.sqlite_question_repository import SqliteQuestionRepository
from teenhelp.persistence.repositories.sqlite.sqlite_user_repository import SqliteUserRepository
from teenhelp.application.question_app_service import QuestionAppService
from teenhelp.application.answer_app_service import AnswerAppService
from teenhelp.application.expert_app_service import ExpertAppService


@lru_cache(maxsize=1)
def get_question_repo() -> SqliteQuestionRepository:
    return SqliteQuestionRepository()


@lru_cache(maxsize=1)
def get_user_repo() -> SqliteUserRepository:
    return SqliteUserRepository()


@lru_cache(maxsize=1)
def get_question_app_service() -> QuestionAppService:
    return QuestionAppService(repo=get_question_repo())


@lru_cache(maxsize=1)
def get_answer_app_service() -> AnswerAppService:
    return AnswerAppService(questions=get_question_repo(), users=get_user_repo())


@lru_cache(maxsize=1)
def get_expert_app_service() -> ExpertAppService:
    return ExpertAppService(users=get_user_repo())


def reset() -> None:
    """Drop cached singletons (used by tests that repoint the database)."""
    for factory in (
        get_question_repo,
        get_user_repo,
        get_question_app_service,
        get_answer_app_service,
        get_expert_app_service,
    ):
        factory.cache_clear()
