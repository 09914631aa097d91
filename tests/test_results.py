"""
결과 조회 / 목록 / 응시 가능 여부
"""
from datetime import timedelta

import pytest

from academy.application.use_cases.exam_session import (
    authenticate,
    check_availability,
    get_result,
    get_session_state,
    list_exam_sessions,
    list_my_results,
    save_answer,
    submit,
)
from academy.application.use_cases.exam_session.results import AvailabilityReason
from academy.domain.exam_session.definition import ResultVisibility
from academy.domain.exam_session.entities import Viewer, ViewerRole
from academy.domain.exam_session.errors import (
    ExamNotFound,
    NotPermitted,
    ResultNotAvailable,
)
from academy.domain.exam_session.result import (
    EXPIRED_MESSAGE,
    PENDING_REVIEW_MESSAGE,
    GradingStatus,
)
from tests.fakes import T0, make_exam, minutes


def _submitted(ctx, student_id="student-1"):
    sid = authenticate(ctx, "exam-1", student_id, "secret", now=T0).session.session_id
    save_answer(ctx, sid, "q1", "B", 30, now=T0 + minutes(1))
    submit(ctx, sid, now=T0 + minutes(2))
    return sid


class TestGetResult:
    def test_student_waits_for_grading(self, ctx, student):
        sid = _submitted(ctx)
        result = get_result(ctx, sid, student, now=T0 + minutes(3))

        assert result.detail_visible is False
        assert result.message == PENDING_REVIEW_MESSAGE
        assert result.final_score is None
        assert result.to_dict()["questions"] is None

    def test_immediate_policy_shows_auto_score(self, ctx, definitions, student):
        definitions.put(make_exam(result_visibility=ResultVisibility.IMMEDIATE))
        sid = _submitted(ctx)

        result = get_result(ctx, sid, student, now=T0 + minutes(3))
        assert result.detail_visible is True
        assert result.grading_status == GradingStatus.PENDING
        assert result.final_score == 10.0
        assert result.to_dict()["questions"][0]["correct_answer"] == "B"

    def test_creator_sees_detail(self, ctx, creator):
        sid = _submitted(ctx)
        result = get_result(ctx, sid, creator, now=T0 + minutes(3))
        assert result.detail_visible is True
        assert result.percentage == 66.7

    def test_active_session_has_no_result(self, ctx, student):
        sid = authenticate(ctx, "exam-1", "student-1", "secret", now=T0).session.session_id
        with pytest.raises(ResultNotAvailable):
            get_result(ctx, sid, student, now=T0 + minutes(1))

    def test_result_after_deadline_enforces_first(self, ctx, student):
        sid = authenticate(ctx, "exam-1", "student-1", "secret", now=T0).session.session_id
        result = get_result(ctx, sid, student, now=T0 + minutes(31))
        assert result.status == "SUBMITTED"

    def test_other_student_denied(self, ctx, other_student):
        sid = _submitted(ctx)
        with pytest.raises(NotPermitted):
            get_result(ctx, sid, other_student, now=T0 + minutes(3))

    def test_expired_session_is_not_scored(self, ctx, definitions, creator):
        definitions.put(make_exam(auto_submit=False))
        sid = authenticate(ctx, "exam-1", "student-1", "secret", now=T0).session.session_id

        result = get_result(ctx, sid, creator, now=T0 + timedelta(hours=4))
        assert result.status == "EXPIRED"
        assert result.grading_status == GradingStatus.NOT_SCORED

    def test_student_told_expired_attempt_was_not_scored(self, ctx, definitions, student):
        definitions.put(make_exam(auto_submit=False))
        sid = authenticate(ctx, "exam-1", "student-1", "secret", now=T0).session.session_id

        result = get_result(ctx, sid, student, now=T0 + timedelta(hours=4))
        assert result.status == "EXPIRED"
        assert result.message == EXPIRED_MESSAGE
        assert result.final_score is None

class TestSessionState:
    def test_state_for_countdown(self, ctx, student):
        sid = authenticate(ctx, "exam-1", "student-1", "secret", now=T0).session.session_id
        save_answer(ctx, sid, "q1", "A", 12, now=T0 + minutes(1))

        state = get_session_state(ctx, sid, student, now=T0 + minutes(10))
        assert state.remaining_seconds == 20 * 60
        assert state.accepting_answers is True
        assert state.answers["q1"]["value"] == "A"
        assert all("correct_answer" not in q for q in state.questions)

    def test_state_of_other_student_denied(self, ctx, other_student):
        sid = authenticate(ctx, "exam-1", "student-1", "secret", now=T0).session.session_id
        with pytest.raises(NotPermitted):
            get_session_state(ctx, sid, other_student, now=T0)


class TestListings:
    def test_creator_lists_all_sessions(self, ctx, creator):
        _submitted(ctx, "student-1")
        authenticate(ctx, "exam-1", "student-2", "secret", now=T0)

        results = list_exam_sessions(ctx, "exam-1", creator)
        assert sorted(r.status for r in results) == ["ACTIVE", "SUBMITTED"]
        assert all(r.detail_visible for r in results)

    def test_listing_requires_exam_creator(self, ctx, student):
        with pytest.raises(NotPermitted):
            list_exam_sessions(ctx, "exam-1", student)
        with pytest.raises(NotPermitted):
            list_exam_sessions(ctx, "exam-1", Viewer("teacher-2", ViewerRole.CREATOR))

    def test_student_results_skip_active_sessions(self, ctx, definitions, student):
        definitions.put(make_exam(max_attempts=2))
        _submitted(ctx)
        authenticate(ctx, "exam-1", "student-1", "secret", now=T0 + minutes(3))

        results = list_my_results(ctx, student)
        assert len(results) == 1
        assert results[0].status == "SUBMITTED"


class TestAvailability:
    def test_open_exam(self, ctx):
        info = check_availability(ctx, "exam-1", now=T0)
        assert info.is_available is True
        assert info.requires_password is True
        assert info.question_count == 2
        assert info.max_points == 15.0

    @pytest.mark.parametrize(
        "now, reason",
        [
            (T0 - timedelta(hours=2), AvailabilityReason.NOT_OPEN_YET),
            (T0 + timedelta(hours=4), AvailabilityReason.CLOSED),
        ],
    )
    def test_outside_window(self, ctx, now, reason):
        info = check_availability(ctx, "exam-1", now=now)
        assert info.is_available is False
        assert info.reason == reason

    def test_unpublished(self, ctx, definitions):
        definitions.put(make_exam(is_published=False))
        assert check_availability(ctx, "exam-1", now=T0).reason == AvailabilityReason.NOT_PUBLISHED

    def test_unknown_exam(self, ctx):
        with pytest.raises(ExamNotFound):
            check_availability(ctx, "nope", now=T0)
