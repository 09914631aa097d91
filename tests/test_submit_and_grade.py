"""
제출 / 자동채점 / 수동채점 흐름
"""
import pytest

from academy.application.use_cases.exam_session import (
    authenticate,
    get_result,
    manual_grade,
    retry_auto_grade,
    save_answer,
    submit,
    sweep_overdue_sessions,
)
from academy.domain.exam_session.definition import Question, QuestionType
from academy.domain.exam_session.entities import SessionStatus, Viewer, ViewerRole
from academy.domain.exam_session.errors import (
    AlreadySubmitted,
    DefinitionUnavailable,
    InvalidScore,
    NotPermitted,
    SessionExpired,
    SessionNotFound,
    SessionNotGradable,
)
from academy.domain.exam_session.grading import ManualScore
from tests.fakes import T0, make_exam, make_objective_exam, minutes


def _answered_session(ctx, q1="B", q2="photosynthesis makes sugar"):
    sid = authenticate(ctx, "exam-1", "student-1", "secret", now=T0).session.session_id
    save_answer(ctx, sid, "q1", q1, 60, now=T0 + minutes(5))
    save_answer(ctx, sid, "q2", q2, 240, now=T0 + minutes(10))
    return sid


class TestSubmit:
    def test_submit_auto_grades_objective_questions(self, ctx, store):
        sid = _answered_session(ctx)
        session = submit(ctx, sid, now=T0 + minutes(12))

        assert session.status == SessionStatus.SUBMITTED
        assert session.auto_graded is True
        assert session.auto_score == 10.0
        assert session.answers["q1"].outcome.value == "correct"
        assert session.answers["q2"].outcome.value == "pending"
        assert store.session(sid).status == SessionStatus.SUBMITTED
        assert store.deferred == []

    def test_second_submit_fails_without_changing_score(self, ctx, store):
        sid = _answered_session(ctx)
        submit(ctx, sid, now=T0 + minutes(12))

        with pytest.raises(AlreadySubmitted):
            submit(ctx, sid, now=T0 + minutes(13))
        assert store.session(sid).auto_score == 10.0
        assert store.session(sid).submitted_at == T0 + minutes(12)

    def test_objective_only_exam_is_graded_on_submit(self, ctx, definitions):
        definitions.put(make_objective_exam(exam_id="exam-1"))
        sid = authenticate(ctx, "exam-1", "student-1", "secret", now=T0).session.session_id
        save_answer(ctx, sid, "m1", ["A", "B", "C"], 10, now=T0 + minutes(1))
        save_answer(ctx, sid, "t1", "false", 10, now=T0 + minutes(2))

        session = submit(ctx, sid, now=T0 + minutes(3))
        assert session.status == SessionStatus.GRADED
        assert session.final_score == 4.0

    def test_submit_after_deadline_reports_expiry(self, ctx, store):
        sid = _answered_session(ctx)
        with pytest.raises(SessionExpired):
            submit(ctx, sid, now=T0 + minutes(45))

        stored = store.session(sid)
        assert stored.status == SessionStatus.SUBMITTED
        assert stored.submitted_at == T0 + minutes(45)
        assert stored.auto_score == 10.0

    def test_submit_by_other_student(self, ctx):
        sid = _answered_session(ctx)
        with pytest.raises(NotPermitted):
            submit(ctx, sid, student_id="student-2", now=T0 + minutes(12))

    def test_submit_unknown_session(self, ctx):
        with pytest.raises(SessionNotFound):
            submit(ctx, "nope", now=T0)

    def test_scores_follow_snapshot_not_later_edits(self, ctx, definitions):
        sid = _answered_session(ctx)
        edited = make_exam(
            questions=(
                Question(
                    question_id="q1",
                    question_type=QuestionType.SINGLE_SELECT,
                    options=("A", "B"),
                    correct_answer="A",
                    points=50,
                ),
            )
        )
        definitions.put(edited)

        session = submit(ctx, sid, now=T0 + minutes(12))
        assert session.auto_score == 10.0
        assert session.max_score == 15.0


class TestDeferredGrading:
    def _drop_snapshot(self, store, sid):
        store.session(sid).exam_snapshot = None

    def test_submit_commits_when_definition_is_unavailable(self, ctx, store, definitions):
        sid = _answered_session(ctx)
        self._drop_snapshot(store, sid)
        definitions.fail = True

        session = submit(ctx, sid, now=T0 + minutes(12))

        assert session.status == SessionStatus.SUBMITTED
        assert session.auto_graded is False
        assert store.session(sid).status == SessionStatus.SUBMITTED
        assert store.deferred == [sid]

    def test_retry_grades_once_definition_returns(self, ctx, store, definitions):
        sid = _answered_session(ctx)
        self._drop_snapshot(store, sid)
        definitions.fail = True
        submit(ctx, sid, now=T0 + minutes(12))

        with pytest.raises(DefinitionUnavailable):
            retry_auto_grade(ctx, sid, now=T0 + minutes(13))

        definitions.fail = False
        assert retry_auto_grade(ctx, sid, now=T0 + minutes(14)) is True
        assert store.session(sid).auto_score == 10.0
        assert retry_auto_grade(ctx, sid, now=T0 + minutes(15)) is False


class TestManualGrade:
    def test_end_to_end_scoring(self, ctx, store, student, creator):
        sid = _answered_session(ctx)
        submit(ctx, sid, now=T0 + minutes(12))

        outcome = manual_grade(
            ctx, sid, [ManualScore("q2", 3, feedback="partially right")],
            overall_feedback="Good effort", grader=creator, now=T0 + minutes(60),
        )

        assert outcome.adjustments == []
        assert outcome.result.final_score == 13.0
        assert outcome.result.percentage == 86.7
        stored = store.session(sid)
        assert stored.status == SessionStatus.GRADED
        assert stored.graded_by == "teacher-1"
        assert stored.feedback == "Good effort"

        result = get_result(ctx, sid, student, now=T0 + minutes(61))
        assert result.detail_visible is True
        assert result.final_score == 13.0
        assert result.auto_score == 10.0
        assert result.time_spent_seconds == 300.0

    def test_regrading_with_same_scores_is_idempotent(self, ctx, store, creator):
        sid = _answered_session(ctx)
        submit(ctx, sid, now=T0 + minutes(12))
        for _ in range(2):
            manual_grade(ctx, sid, [ManualScore("q2", 3)], None, creator, now=T0 + minutes(60))
        assert store.session(sid).final_score == 13.0

    def test_out_of_range_score_is_clamped(self, ctx, creator):
        sid = _answered_session(ctx)
        submit(ctx, sid, now=T0 + minutes(12))

        outcome = manual_grade(ctx, sid, [ManualScore("q2", 8)], None, creator, now=T0 + minutes(60))
        assert outcome.result.final_score == 15.0
        assert [(a.requested, a.applied) for a in outcome.adjustments] == [(8.0, 5.0)]

    def test_unknown_question_leaves_session_untouched(self, ctx, store, creator):
        sid = _answered_session(ctx)
        submit(ctx, sid, now=T0 + minutes(12))

        with pytest.raises(InvalidScore):
            manual_grade(ctx, sid, [ManualScore("q9", 1)], None, creator, now=T0 + minutes(60))
        stored = store.session(sid)
        assert stored.status == SessionStatus.SUBMITTED
        assert stored.final_score == 10.0

    def test_active_session_is_not_gradable(self, ctx, creator):
        sid = _answered_session(ctx)
        with pytest.raises(SessionNotGradable):
            manual_grade(ctx, sid, [ManualScore("q2", 3)], None, creator, now=T0 + minutes(11))

    def test_only_exam_creator_can_grade(self, ctx, student):
        sid = _answered_session(ctx)
        submit(ctx, sid, now=T0 + minutes(12))

        with pytest.raises(NotPermitted):
            manual_grade(ctx, sid, [ManualScore("q2", 3)], None, student, now=T0 + minutes(60))
        with pytest.raises(NotPermitted):
            manual_grade(
                ctx, sid, [ManualScore("q2", 3)], None,
                Viewer("teacher-2", ViewerRole.CREATOR), now=T0 + minutes(60),
            )

    def test_grading_a_deferred_session_runs_auto_grade_first(self, ctx, store, definitions, creator):
        sid = _answered_session(ctx)
        snapshot = store.session(sid).exam_snapshot
        store.session(sid).exam_snapshot = None
        definitions.fail = True
        submit(ctx, sid, now=T0 + minutes(12))

        definitions.fail = False
        store.session(sid).exam_snapshot = snapshot
        outcome = manual_grade(ctx, sid, [ManualScore("q2", 3)], None, creator, now=T0 + minutes(60))
        assert outcome.result.final_score == 13.0


class TestNotificationHooks:
    def test_student_submit_announces_once(self, ctx, store):
        sid = _answered_session(ctx)
        submit(ctx, sid, now=T0 + minutes(12))
        with pytest.raises(AlreadySubmitted):
            submit(ctx, sid, now=T0 + minutes(13))

        assert store.submitted == [sid]
        assert store.graded == []

    def test_deadline_auto_submit_is_announced(self, ctx, store):
        sid = authenticate(ctx, "exam-1", "student-1", "secret", now=T0).session.session_id
        sweep_overdue_sessions(ctx, now=T0 + minutes(31))
        assert store.submitted == [sid]

    def test_late_submit_announces_the_deadline_submission(self, ctx, store):
        sid = _answered_session(ctx)
        with pytest.raises(SessionExpired):
            submit(ctx, sid, now=T0 + minutes(31))
        assert store.submitted == [sid]

    def test_expired_session_is_not_announced(self, ctx, store, definitions):
        definitions.put(make_exam(auto_submit=False))
        authenticate(ctx, "exam-1", "student-1", "secret", now=T0)
        report = sweep_overdue_sessions(ctx, now=T0 + minutes(240))

        assert report.expired == 1
        assert store.submitted == []

    def test_manual_grade_announces_result(self, ctx, store, creator):
        sid = _answered_session(ctx)
        submit(ctx, sid, now=T0 + minutes(12))
        manual_grade(ctx, sid, [ManualScore("q2", 5)], None, creator, now=T0 + minutes(60))

        assert store.graded == [sid]

    def test_rejected_grade_is_not_announced(self, ctx, store, creator):
        sid = _answered_session(ctx)
        submit(ctx, sid, now=T0 + minutes(12))
        with pytest.raises(InvalidScore):
            manual_grade(ctx, sid, [ManualScore("nope", 1)], None, creator, now=T0 + minutes(60))
        assert store.graded == []

    def test_retry_that_completes_grading_announces_result(self, ctx, store, definitions):
        definitions.put(make_objective_exam(exam_id="exam-1"))
        sid = authenticate(ctx, "exam-1", "student-1", "secret", now=T0).session.session_id
        store.session(sid).exam_snapshot = None
        definitions.fail = True
        submit(ctx, sid, now=T0 + minutes(3))
        assert store.graded == []

        definitions.fail = False
        assert retry_auto_grade(ctx, sid, now=T0 + minutes(4)) is True
        assert store.session(sid).status == SessionStatus.GRADED
        assert store.submitted == [sid]
        assert store.graded == [sid]
