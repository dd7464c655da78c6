"""SQLite repository + application service tests against a temporary database file."""
import pytest

from teenhelp.application.answer_app_service import AnswerAppService
from teenhelp.application.expert_app_service import ExpertAppService
from teenhelp.application.question_app_service import QuestionAppService
from teenhelp.domain.common.permissions import Caller
from teenhelp.domain.common.result import ErrorKind
from teenhelp.domain.user.models import User
from teenhelp.domain.user.service import ExpertDomainService
from teenhelp.persistence.repositories.sqlite.sqlite_question_repository import SqliteQuestionRepository
from teenhelp.persistence.repositories.sqlite.sqlite_user_repository import SqliteUserRepository

MODERATOR = Caller(id="mod-1", role="moderator")


@pytest.fixture
def repos(db_path):
    return SqliteQuestionRepository(), SqliteUserRepository()


@pytest.fixture
def questions_svc(repos):
    return QuestionAppService(repo=repos[0])


@pytest.fixture
def answers_svc(repos):
    return AnswerAppService(questions=repos[0], users=repos[1])


def _add_user(users, user_id, role="user", user_type=None):
    users.add(User(id=user_id, username=user_id, password_hash="x", role=role,
                   user_type=user_type, created_at="2026-01-01T00:00:00+00:00"))
    return Caller(id=user_id, role=role, user_type=user_type)


def _approved_question(questions_svc, text="Is it normal to feel anxious before exams?"):
    q = questions_svc.submit_question(text, "stress").value
    questions_svc.moderate(q.id, MODERATOR, "approved")
    return q


# ------------------------------------------------------------------
# Question aggregate round trip
# ------------------------------------------------------------------
def test_question_with_answers_and_likes_reloads(repos, questions_svc, answers_svc):
    question_repo, users = repos
    teen = _add_user(users, "teen")
    q = _approved_question(questions_svc)

    a1 = answers_svc.add_answer(q.id, teen, "first").value
    a2 = answers_svc.add_answer(q.id, teen, "second").value
    answers_svc.toggle_like(a2.id, teen)

    loaded = question_repo.get_by_id(q.id)
    assert loaded.status == "answered"
    assert [a.id for a in loaded.answers] == [a1.id, a2.id]
    assert loaded.find_answer(a2.id).likes[0].user_id == "teen"
    assert question_repo.find_by_answer_id(a1.id).id == q.id
    assert question_repo.find_by_answer_id("missing") is None


def test_moderation_write_is_conditional_on_pending(repos, questions_svc):
    question_repo, _ = repos
    q = questions_svc.submit_question("Can I trust my friends?", "relationships").value
    stale = question_repo.get_by_id(q.id)

    assert questions_svc.moderate(q.id, MODERATOR, "approved").is_success

    stale.status = "rejected"
    stale.rejection_reason = "spam"
    assert question_repo.save_moderation(stale, expected_status="pending") is False
    assert question_repo.get_by_id(q.id).status == "approved"


def test_rejection_reason_only_on_rejected(repos, questions_svc):
    question_repo, _ = repos
    kept = questions_svc.submit_question("Why am I always tired?", "mental-health").value
    dropped = questions_svc.submit_question("buy now", "general").value
    questions_svc.moderate(kept.id, MODERATOR, "approved", rejection_reason="ignored")
    questions_svc.moderate(dropped.id, MODERATOR, "rejected", rejection_reason="spam")

    assert question_repo.get_by_id(kept.id).rejection_reason is None
    assert question_repo.get_by_id(dropped.id).rejection_reason == "spam"


def test_best_answer_is_exclusive_in_storage(repos, questions_svc, answers_svc):
    question_repo, users = repos
    teen = _add_user(users, "teen")
    q = _approved_question(questions_svc)
    a1 = answers_svc.add_answer(q.id, teen, "one").value
    a2 = answers_svc.add_answer(q.id, teen, "two").value

    answers_svc.mark_best_answer(q.id, a1.id, MODERATOR)
    answers_svc.mark_best_answer(q.id, a2.id, MODERATOR)

    flags = {a.id: a.is_best_answer for a in question_repo.get_by_id(q.id).answers}
    assert flags == {a1.id: False, a2.id: True}


def test_best_answer_must_belong_to_question(repos, questions_svc, answers_svc):
    _, users = repos
    teen = _add_user(users, "teen")
    q1 = _approved_question(questions_svc, "first?")
    q2 = _approved_question(questions_svc, "second?")
    foreign = answers_svc.add_answer(q2.id, teen, "elsewhere").value

    result = answers_svc.mark_best_answer(q1.id, foreign.id, MODERATOR)
    assert result.kind == ErrorKind.NOT_FOUND


def test_best_answer_by_non_moderator_is_forbidden(repos, questions_svc, answers_svc):
    question_repo, users = repos
    teen = _add_user(users, "teen")
    q = _approved_question(questions_svc)
    answer = answers_svc.add_answer(q.id, teen, "pick me").value

    result = answers_svc.mark_best_answer(q.id, answer.id, teen)
    assert result.kind == ErrorKind.AUTHORIZATION
    assert result.error == "Only moderators can mark best answers"
    assert not question_repo.get_by_id(q.id).find_answer(answer.id).is_best_answer


# ------------------------------------------------------------------
# Statistics side effects
# ------------------------------------------------------------------
def test_expert_answer_and_likes_update_author_stats(repos, questions_svc, answers_svc):
    _, users = repos
    expert = _add_user(users, "expert", role="expert")
    teen = _add_user(users, "teen")
    q = _approved_question(questions_svc)

    answer = answers_svc.add_answer(q.id, expert, "Try a short walk.").value
    answers_svc.add_answer(q.id, teen, "same here")
    assert users.get_by_id("expert").stats.answers_count == 1
    assert users.get_by_id("teen").stats.answers_count == 0

    answers_svc.toggle_like(answer.id, teen)
    assert users.get_by_id("expert").stats.helpful_votes == 1
    answers_svc.toggle_like(answer.id, teen)
    assert users.get_by_id("expert").stats.helpful_votes == 0


def test_likes_on_non_expert_answers_leave_stats_alone(repos, questions_svc, answers_svc):
    _, users = repos
    teen = _add_user(users, "teen")
    other = _add_user(users, "other")
    q = _approved_question(questions_svc)
    answer = answers_svc.add_answer(q.id, teen, "hug").value

    toggle = answers_svc.toggle_like(answer.id, other).value
    assert toggle.liked
    assert users.get_by_id("teen").stats.helpful_votes == 0


def test_increment_stat_rejects_unknown_field(repos):
    _, users = repos
    with pytest.raises(ValueError):
        users.increment_stat("anyone", "password_hash", 1)


# ------------------------------------------------------------------
# Moderation queue + stats
# ------------------------------------------------------------------
def test_pending_queue_is_paginated_newest_first(questions_svc):
    ids = [questions_svc.submit_question(f"question {i}", "general").value.id for i in range(3)]

    page1 = questions_svc.list_pending(MODERATOR, page=1, limit=2).value
    page2 = questions_svc.list_pending(MODERATOR, page=2, limit=2).value

    assert [q.id for q in page1.items] == [ids[2], ids[1]]
    assert [q.id for q in page2.items] == [ids[0]]
    assert page1.total == 3
    assert page1.total_pages == 2
    assert all(q.answers == [] for q in page1.items)


def test_pending_queue_falls_back_to_defaults(questions_svc):
    page = questions_svc.list_pending(MODERATOR, page=0, limit=-5).value
    assert page.page == 1
    assert page.limit == 10


def test_moderation_stats(questions_svc, answers_svc, repos):
    _, users = repos
    teen = _add_user(users, "teen")
    questions_svc.submit_question("a", "general")
    rejected = questions_svc.submit_question("b", "general").value
    questions_svc.moderate(rejected.id, MODERATOR, "rejected", rejection_reason="off topic")
    _approved_question(questions_svc, "c")
    answered = _approved_question(questions_svc, "d")
    answers_svc.add_answer(answered.id, teen, "reply")

    stats = questions_svc.moderation_stats(MODERATOR).value
    assert (stats.pending, stats.approved, stats.rejected, stats.answered) == (1, 1, 1, 1)
    assert stats.total == 4

    assert questions_svc.moderation_stats(teen).kind == ErrorKind.AUTHORIZATION


# ------------------------------------------------------------------
# Expert applications
# ------------------------------------------------------------------
ADMIN = Caller(id="admin-1", role="admin")


@pytest.fixture
def experts_svc(repos):
    return ExpertAppService(users=repos[1])


def _apply(experts_svc, caller, specialization="Adolescent anxiety"):
    return experts_svc.apply(caller, ["Licensed psychologist"], specialization, years_of_experience=5)


def test_application_is_stored_with_user(repos, experts_svc):
    _, users = repos
    teen = _add_user(users, "teen")
    assert _apply(experts_svc, teen).is_success

    loaded = users.get_by_id("teen")
    assert loaded.expert_application.status == "pending"
    assert loaded.expert_application.qualifications == ["Licensed psychologist"]
    assert loaded.expert_application.years_of_experience == 5
    assert loaded.role == "user"
    assert users.get_by_id("teen").is_verified is False


def test_user_without_application_has_none(repos):
    _, users = repos
    _add_user(users, "teen")
    assert users.get_by_id("teen").expert_application is None


def test_second_application_is_refused_by_storage(repos, experts_svc):
    _, users = repos
    teen = _add_user(users, "teen")
    first = _apply(experts_svc, teen).value
    assert users.add_application(first) is False


def test_approval_makes_verified_expert(repos, experts_svc):
    _, users = repos
    teen = _add_user(users, "teen")
    _apply(experts_svc, teen)

    user = experts_svc.review("teen", ADMIN, "approved").value
    assert user.role == "expert"
    assert user.is_verified is True
    assert user.expert_application.status == "approved"
    assert user.expert_application.reviewed_by == ADMIN.id
    assert experts_svc.get_expert("teen").is_success


def test_review_write_is_conditional_on_pending(repos, experts_svc):
    _, users = repos
    teen = _add_user(users, "teen")
    _apply(experts_svc, teen)

    # two admins load the same pending application
    stale = users.get_by_id("teen").expert_application
    experts_svc.review("teen", ADMIN, "rejected", "Unverifiable license")

    review = ExpertDomainService().review(stale, ADMIN, "approved").value
    assert users.save_review(review, expected_status="pending") is False
    loaded = users.get_by_id("teen")
    assert loaded.expert_application.status == "rejected"
    assert loaded.role == "user"
    assert loaded.is_verified is False


def test_review_failures(repos, experts_svc):
    _, users = repos
    teen = _add_user(users, "teen")

    assert experts_svc.review("teen", teen, "approved").kind == ErrorKind.AUTHORIZATION
    assert experts_svc.review("nobody", ADMIN, "approved").kind == ErrorKind.NOT_FOUND
    assert experts_svc.review("teen", ADMIN, "approved").kind == ErrorKind.NOT_FOUND

    _apply(experts_svc, teen)
    assert experts_svc.review("teen", ADMIN, "rejected").kind == ErrorKind.VALIDATION
    assert experts_svc.review("teen", ADMIN, "approved").is_success
    assert experts_svc.review("teen", ADMIN, "approved").kind == ErrorKind.INVALID_STATE


def test_list_applications_by_status(repos, experts_svc):
    _, users = repos
    for name in ("ann", "bob", "cat"):
        _apply(experts_svc, _add_user(users, name))
    experts_svc.review("bob", ADMIN, "approved")

    pending = experts_svc.list_applications(ADMIN).value
    assert sorted(u.id for u in pending) == ["ann", "cat"]
    assert [u.id for u in experts_svc.list_applications(ADMIN, "approved").value] == ["bob"]
    assert experts_svc.list_applications(ADMIN, "bogus").kind == ErrorKind.VALIDATION
    assert experts_svc.list_applications(MODERATOR).kind == ErrorKind.AUTHORIZATION


def test_expert_directory_sorted_by_helpful_votes(repos, experts_svc):
    _, users = repos
    for name, spec in (("ann", "Family conflict"), ("bob", "Exam stress"), ("cat", "family therapy")):
        _apply(experts_svc, _add_user(users, name), specialization=spec)
        experts_svc.review(name, ADMIN, "approved")
    _apply(experts_svc, _add_user(users, "dan"))
    users.increment_stat("bob", "helpful_votes", 5)
    users.increment_stat("cat", "helpful_votes", 2)

    assert [u.id for u in experts_svc.list_experts()] == ["bob", "cat", "ann"]
    assert [u.id for u in experts_svc.list_experts("FAMILY")] == ["cat", "ann"]
    assert experts_svc.get_expert("dan").kind == ErrorKind.NOT_FOUND


def test_admin_assigned_expert_role_is_not_in_directory(repos, experts_svc):
    _, users = repos
    _add_user(users, "dr_dana", role="expert")
    assert experts_svc.list_experts() == []
    assert experts_svc.get_expert("dr_dana").kind == ErrorKind.NOT_FOUND
