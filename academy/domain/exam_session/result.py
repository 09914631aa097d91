"""
결과 뷰 (Result Materializer) — 순수 파이썬

저장되는 상태가 아니라 Submitted/Graded 세션에서 매번 만들어내는 읽기 전용 뷰.
학생/출제자 역할 + 공개 정책에 따라 상세 노출 여부가 달라진다.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Optional

from academy.domain.exam_session.definition import ExamDefinition, ResultVisibility
from academy.domain.exam_session.entities import (
    ExamSession,
    GradeOutcome,
    SessionStatus,
    SubmitReason,
    Viewer,
    ViewerRole,
)
from academy.domain.exam_session.errors import (
    DEADLINE_SUBMITTED_MESSAGE,
    NotPermitted,
    ResultNotAvailable,
)

PENDING_REVIEW_MESSAGE = "Submitted, pending review."
EXPIRED_MESSAGE = "Time expired before submission, this attempt was not scored."


class GradingStatus:
    PENDING = "pending"        # 채점 안 된 문항 있음
    COMPLETE = "complete"      # 모든 문항 결과 확정
    NOT_SCORED = "not_scored"  # EXPIRED (포기된 응시)


@dataclass(frozen=True)
class QuestionResult:
    question_id: str
    question_type: str
    text: str
    points: float
    student_answer: Any
    correct_answer: Any
    outcome: str
    awarded: float
    manual_score: Optional[float]
    feedback: Optional[str]
    explanation: str
    time_spent_seconds: float
    over_time_limit: bool


@dataclass(frozen=True)
class SessionResult:
    session_id: str
    exam_id: str
    student_id: str
    title: str
    description: str
    status: str
    grading_status: str
    detail_visible: bool
    message: str
    submitted_at: Optional[datetime] = None
    graded_at: Optional[datetime] = None
    auto_score: Optional[float] = None
    final_score: Optional[float] = None
    max_score: Optional[float] = None
    percentage: Optional[float] = None
    time_spent_seconds: Optional[float] = None
    feedback: Optional[str] = None
    questions: Optional[tuple[QuestionResult, ...]] = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if self.questions is None:
            data["questions"] = None
        else:
            data["questions"] = [asdict(q) for q in self.questions]
        return data


def can_manage_exam(definition: ExamDefinition, viewer: Viewer) -> bool:
    """출제자 본인 (또는 관리자)."""
    if not viewer.is_creator:
        return False
    if viewer.is_admin:
        return True
    return definition.creator_id is not None and str(definition.creator_id) == str(viewer.user_id)


def authorize_view(session: ExamSession, definition: ExamDefinition, viewer: Viewer) -> None:
    """학생은 본인 세션만, 출제자는 본인 시험 세션만."""
    if viewer.is_creator:
        if not can_manage_exam(definition, viewer):
            raise NotPermitted()
        return
    if str(session.student_id) != str(viewer.user_id):
        raise NotPermitted()


def percentage_of(score: Optional[float], max_score: float) -> float:
    if not max_score or score is None:
        return 0.0
    return round(float(score) / float(max_score) * 100.0, 1)


def grading_status_of(session: ExamSession, definition: ExamDefinition) -> str:
    if session.status == SessionStatus.EXPIRED:
        return GradingStatus.NOT_SCORED
    if not session.auto_graded:
        return GradingStatus.PENDING
    for q in definition.questions:
        record = session.answers.get(q.question_id)
        if record is None or record.is_pending:
            return GradingStatus.PENDING
    return GradingStatus.COMPLETE


def detail_visible_for(session: ExamSession, definition: ExamDefinition, viewer: Viewer) -> bool:
    """출제자는 항상, 학생은 정책에 따라."""
    if viewer.role == ViewerRole.CREATOR:
        return True
    if session.status == SessionStatus.GRADED:
        return True
    if session.status == SessionStatus.SUBMITTED:
        return definition.result_visibility == ResultVisibility.IMMEDIATE
    return False


def _student_message(session: ExamSession, visible: bool) -> str:
    if session.status == SessionStatus.EXPIRED:
        return EXPIRED_MESSAGE
    if session.submit_reason == SubmitReason.DEADLINE:
        return DEADLINE_SUBMITTED_MESSAGE
    if not visible:
        return PENDING_REVIEW_MESSAGE
    return ""


def _question_results(session: ExamSession, definition: ExamDefinition) -> tuple[QuestionResult, ...]:
    order = session.question_order or [q.question_id for q in definition.questions]
    by_id = {q.question_id: q for q in definition.questions}

    items: list[QuestionResult] = []
    for qid in order:
        q = by_id.get(qid)
        if q is None:
            continue
        record = session.answers.get(qid)
        spent = float(record.time_spent_seconds) if record else 0.0
        if record is None:
            outcome = GradeOutcome.PENDING.value
        elif record.manual_score is not None and record.outcome == GradeOutcome.PENDING:
            # 수동 채점된 주관식: 만점이면 correct
            outcome = (
                GradeOutcome.CORRECT.value
                if record.manual_score >= float(q.points)
                else GradeOutcome.INCORRECT.value
            )
        else:
            outcome = record.outcome.value

        correct = q.correct_answer
        if isinstance(correct, (tuple, set, frozenset)):
            correct = list(correct)

        items.append(
            QuestionResult(
                question_id=qid,
                question_type=q.question_type.value,
                text=q.text,
                points=float(q.points),
                student_answer=record.value if record else None,
                correct_answer=correct,
                outcome=outcome,
                awarded=record.effective_score if record else 0.0,
                manual_score=record.manual_score if record else None,
                feedback=record.feedback if record else None,
                explanation=q.explanation,
                time_spent_seconds=spent,
                over_time_limit=bool(q.time_limit_seconds and spent > q.time_limit_seconds),
            )
        )
    return tuple(items)


def materialize_result(
    session: ExamSession,
    definition: ExamDefinition,
    viewer: Viewer,
) -> SessionResult:
    """
    percentage = final / max * 100 (소수 1자리).
    max_score는 세션 생성 시점 스냅샷 값 사용.
    """
    visible = detail_visible_for(session, definition, viewer)
    grading_status = grading_status_of(session, definition)
    message = _student_message(session, visible) if viewer.role == ViewerRole.STUDENT else ""

    base = dict(
        session_id=session.session_id,
        exam_id=session.exam_id,
        student_id=session.student_id,
        title=definition.title,
        description=definition.description,
        status=session.status.value,
        grading_status=grading_status,
        detail_visible=visible,
        message=message,
        submitted_at=session.submitted_at,
        graded_at=session.graded_at,
    )

    if not visible:
        # 채점 전 비공개: 점수/정오 정보 일절 없음
        return SessionResult(**base)

    max_score = float(session.max_score or definition.max_points)
    final_score = session.final_score if session.final_score is not None else 0.0
    return SessionResult(
        **base,
        auto_score=session.auto_score,
        final_score=final_score,
        max_score=max_score,
        percentage=percentage_of(final_score, max_score),
        time_spent_seconds=session.total_time_spent(),
        feedback=session.feedback or None,
        questions=_question_results(session, definition),
    )


def build_result(session: ExamSession, definition: ExamDefinition, viewer: Viewer) -> SessionResult:
    """권한 확인 + ACTIVE 거부 후 materialize."""
    authorize_view(session, definition, viewer)
    if session.status == SessionStatus.ACTIVE:
        raise ResultNotAvailable()
    return materialize_result(session, definition, viewer)
