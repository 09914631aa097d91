"""
시험 입장 (authenticate) 유스케이스
"""
from datetime import timedelta

import pytest

from academy.application.use_cases.exam_session import authenticate, save_answer, submit
from academy.domain.exam_session.entities import SessionStatus, SubmitReason
from academy.domain.exam_session.errors import (
    AttemptsExhausted,
    ConcurrentModification,
    DefinitionUnavailable,
    ExamNotFound,
    ExamNotPublished,
    InvalidCredentials,
    WindowClosed,
)
from tests.fakes import T0, make_exam, minutes


class TestAuthenticateNewSession:
    def test_creates_active_session_with_fixed_deadline(self, ctx, store):
        auth = authenticate(ctx, "exam-1", "student-1", "secret", now=T0)

        assert auth.resumed is False
        assert auth.session.status == SessionStatus.ACTIVE
        assert auth.session.deadline == T0 + minutes(30)
        assert auth.session.session_id in store.sessions

    def test_public_questions_hide_answers(self, ctx):
        auth = authenticate(ctx, "exam-1", "student-1", "secret", now=T0)
        questions = auth.public_questions()

        assert [q["question_id"] for q in questions] == ["q1", "q2"]
        assert all("correct_answer" not in q for q in questions)

    def test_deadline_capped_by_window(self, ctx, definitions):
        definitions.put(make_exam(close_at=T0 + minutes(10)))
        auth = authenticate(ctx, "exam-1", "student-1", "secret", now=T0)
        assert auth.session.deadline == T0 + minutes(10)

    def test_exam_without_password_accepts_anything(self, ctx, definitions):
        definitions.put(make_exam(password_hash=""))
        auth = authenticate(ctx, "exam-1", "student-1", None, now=T0)
        assert auth.session.status == SessionStatus.ACTIVE


class TestAuthenticateResume:
    def test_second_call_resumes_same_session(self, ctx, store):
        first = authenticate(ctx, "exam-1", "student-1", "secret", now=T0)
        again = authenticate(ctx, "exam-1", "student-1", "secret", now=T0 + minutes(5))

        assert again.resumed is True
        assert again.session.session_id == first.session.session_id
        assert again.session.deadline == first.session.deadline
        assert len(store.sessions) == 1

    def test_resume_keeps_saved_answers(self, ctx):
        first = authenticate(ctx, "exam-1", "student-1", "secret", now=T0)
        save_answer(ctx, first.session.session_id, "q1", "B", 30, now=T0 + minutes(1))

        again = authenticate(ctx, "exam-1", "student-1", "secret", now=T0 + minutes(2))
        assert again.session.answers["q1"].value == "B"

    def test_resume_uses_snapshot_definition(self, ctx, definitions):
        authenticate(ctx, "exam-1", "student-1", "secret", now=T0)
        definitions.put(make_exam(title="Renamed"))

        again = authenticate(ctx, "exam-1", "student-1", "secret", now=T0 + minutes(1))
        assert again.definition.title == "Midterm"

    def test_overdue_session_is_submitted_before_new_attempt(self, ctx, store):
        first = authenticate(ctx, "exam-1", "student-1", "secret", now=T0)
        save_answer(ctx, first.session.session_id, "q1", "B", 10, now=T0 + minutes(5))

        with pytest.raises(AttemptsExhausted):
            authenticate(ctx, "exam-1", "student-1", "secret", now=T0 + minutes(40))

        stored = store.session(first.session.session_id)
        assert stored.status == SessionStatus.SUBMITTED
        assert stored.submit_reason == SubmitReason.DEADLINE
        assert stored.auto_score == 10.0

    def test_unique_active_conflict_returns_existing_session(self, ctx, store):
        first = authenticate(ctx, "exam-1", "student-1", "secret", now=T0)
        # 두 번의 find_active가 기존 세션을 못 봄 -> add 에서 유일 ACTIVE 충돌
        store.stale_active_reads = 2

        again = authenticate(ctx, "exam-1", "student-1", "secret", now=T0 + minutes(1))

        assert again.resumed is True
        assert again.session.session_id == first.session.session_id
        assert len(store.sessions) == 1
        assert store.stale_active_reads == 0

    def test_conflict_without_visible_session_propagates(self, ctx, store):
        authenticate(ctx, "exam-1", "student-1", "secret", now=T0)
        store.stale_active_reads = 3

        with pytest.raises(ConcurrentModification):
            authenticate(ctx, "exam-1", "student-1", "secret", now=T0 + minutes(1))
        assert len(store.sessions) == 1

class TestAuthenticateRejections:
    def test_wrong_password(self, ctx, store):
        with pytest.raises(InvalidCredentials):
            authenticate(ctx, "exam-1", "student-1", "wrong", now=T0)
        assert store.sessions == {}

    def test_missing_password(self, ctx):
        with pytest.raises(InvalidCredentials):
            authenticate(ctx, "exam-1", "student-1", None, now=T0)

    def test_window_not_open_yet(self, ctx):
        with pytest.raises(WindowClosed):
            authenticate(ctx, "exam-1", "student-1", "secret", now=T0 - timedelta(hours=2))

    def test_window_closed(self, ctx, store):
        with pytest.raises(WindowClosed):
            authenticate(ctx, "exam-1", "student-1", "secret", now=T0 + timedelta(hours=4))
        assert store.sessions == {}

    def test_unpublished_exam(self, ctx, definitions):
        definitions.put(make_exam(is_published=False))
        with pytest.raises(ExamNotPublished):
            authenticate(ctx, "exam-1", "student-1", "secret", now=T0)

    def test_unknown_exam(self, ctx):
        with pytest.raises(ExamNotFound):
            authenticate(ctx, "missing", "student-1", "secret", now=T0)

    def test_definition_store_failure(self, ctx, definitions):
        definitions.fail = True
        with pytest.raises(DefinitionUnavailable):
            authenticate(ctx, "exam-1", "student-1", "secret", now=T0)


class TestAttempts:
    def test_single_attempt_after_submit(self, ctx):
        auth = authenticate(ctx, "exam-1", "student-1", "secret", now=T0)
        submit(ctx, auth.session.session_id, now=T0 + minutes(5))

        with pytest.raises(AttemptsExhausted):
            authenticate(ctx, "exam-1", "student-1", "secret", now=T0 + minutes(6))

    def test_second_attempt_allowed_when_configured(self, ctx, definitions):
        definitions.put(make_exam(max_attempts=2))
        first = authenticate(ctx, "exam-1", "student-1", "secret", now=T0)
        submit(ctx, first.session.session_id, now=T0 + minutes(5))

        second = authenticate(ctx, "exam-1", "student-1", "secret", now=T0 + minutes(6))
        assert second.resumed is False
        assert second.session.session_id != first.session.session_id

    def test_unlimited_attempts(self, ctx, definitions):
        definitions.put(make_exam(max_attempts=None))
        for i in range(3):
            auth = authenticate(ctx, "exam-1", "student-1", "secret", now=T0 + minutes(i))
            submit(ctx, auth.session.session_id, now=T0 + minutes(i))

    def test_students_are_independent(self, ctx, store):
        authenticate(ctx, "exam-1", "student-1", "secret", now=T0)
        authenticate(ctx, "exam-1", "student-2", "secret", now=T0)
        assert len(store.sessions) == 2
