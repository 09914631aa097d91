"""
Result Materializer + 읽기 전용 조회 (Django 미사용)

결과는 저장하지 않고 요청마다 세션 + 스냅샷 정의로 만든다.
조회 시점에 마감이 지난 ACTIVE 세션이면 먼저 마감 처리 (lazy enforce).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from academy.application.use_cases.exam_session.context import (
    SessionContext,
    definition_for,
    load_definition,
    utcnow,
)
from academy.application.use_cases.exam_session.deadline import enforce_deadline_locked
from academy.domain.exam_session.entities import ExamSession, SessionStatus, SubmitReason, Viewer
from academy.domain.exam_session.errors import (
    DEADLINE_SUBMITTED_MESSAGE,
    DefinitionUnavailable,
    NotPermitted,
    SessionNotFound,
)
from academy.domain.exam_session.result import (
    SessionResult,
    authorize_view,
    build_result,
    can_manage_exam,
    materialize_result,
)

logger = logging.getLogger(__name__)


def _load_enforced(ctx: SessionContext, session_id: str, now: datetime) -> ExamSession:
    with ctx.uow_factory() as uow:
        session = uow.exam_sessions.get(session_id)
    if session is None:
        raise SessionNotFound()

    if session.is_overdue(now) and enforce_deadline_locked(ctx, session_id, now=now) is not None:
        with ctx.uow_factory() as uow:
            session = uow.exam_sessions.get(session_id)
    return session


def get_result(
    ctx: SessionContext,
    session_id: str,
    viewer: Viewer,
    now: Optional[datetime] = None,
) -> SessionResult:
    now = utcnow(now)
    session = _load_enforced(ctx, session_id, now)
    definition = definition_for(ctx, session)
    return build_result(session, definition, viewer)


# ---------------------------------------------------------------------
# 세션 상태 (클라이언트 카운트다운용, 표시 전용)
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class SessionState:
    session_id: str
    exam_id: str
    student_id: str
    status: str
    server_time: datetime
    started_at: datetime
    deadline: datetime
    remaining_seconds: int
    accepting_answers: bool
    message: str = ""
    title: str = ""
    questions: list[dict[str, Any]] = field(default_factory=list)
    answers: dict[str, dict[str, Any]] = field(default_factory=dict)


def get_session_state(
    ctx: SessionContext,
    session_id: str,
    viewer: Viewer,
    now: Optional[datetime] = None,
) -> SessionState:
    now = utcnow(now)
    session = _load_enforced(ctx, session_id, now)
    definition = definition_for(ctx, session)
    authorize_view(session, definition, viewer)

    by_id = {q.question_id: q for q in definition.questions}
    questions = [by_id[qid].to_public() for qid in session.question_order if qid in by_id]
    answers = {
        qid: {
            "value": rec.value,
            "time_spent_seconds": rec.time_spent_seconds,
            "saved_at": rec.saved_at,
        }
        for qid, rec in session.answers.items()
    }
    message = DEADLINE_SUBMITTED_MESSAGE if session.submit_reason == SubmitReason.DEADLINE else ""

    return SessionState(
        session_id=session.session_id,
        exam_id=session.exam_id,
        student_id=session.student_id,
        status=session.status.value,
        server_time=now,
        started_at=session.started_at,
        deadline=session.deadline,
        remaining_seconds=session.remaining_seconds(now),
        accepting_answers=session.is_acceptable(now),
        message=message,
        title=definition.title,
        questions=questions,
        answers=answers,
    )


# ---------------------------------------------------------------------
# 목록 조회
# ---------------------------------------------------------------------

def list_exam_sessions(
    ctx: SessionContext,
    exam_id: str,
    viewer: Viewer,
) -> list[SessionResult]:
    """출제자용 응시 목록 (모든 상태, 항상 상세)."""
    definition = load_definition(ctx, exam_id)
    if not can_manage_exam(definition, viewer):
        raise NotPermitted()

    with ctx.uow_factory() as uow:
        sessions = uow.exam_sessions.list_for_exam(definition.exam_id)

    return [
        materialize_result(s, s.snapshot_definition() or definition, viewer)
        for s in sessions
    ]


def list_my_results(ctx: SessionContext, viewer: Viewer) -> list[SessionResult]:
    """학생 본인 결과 목록 (ACTIVE 제외, 공개 정책 적용)."""
    with ctx.uow_factory() as uow:
        sessions = uow.exam_sessions.list_for_student(str(viewer.user_id))

    results: list[SessionResult] = []
    for s in sessions:
        if s.status == SessionStatus.ACTIVE:
            continue
        try:
            definition = definition_for(ctx, s)
        except DefinitionUnavailable:
            logger.warning("RESULT_SKIPPED session_id=%s reason=definition_unavailable", s.session_id)
            continue
        results.append(materialize_result(s, definition, viewer))
    return results


# ---------------------------------------------------------------------
# 응시 가능 여부 (입장 전 안내)
# ---------------------------------------------------------------------

class AvailabilityReason:
    AVAILABLE = "available"
    NOT_PUBLISHED = "not_published"
    NOT_OPEN_YET = "not_open_yet"
    CLOSED = "closed"


@dataclass(frozen=True)
class ExamAvailability:
    exam_id: str
    title: str
    description: str
    open_at: Optional[datetime]
    close_at: Optional[datetime]
    duration_seconds: int
    question_count: int
    max_points: float
    is_available: bool
    reason: str
    requires_password: bool
    server_time: datetime


def check_availability(
    ctx: SessionContext,
    exam_id: str,
    now: Optional[datetime] = None,
) -> ExamAvailability:
    now = utcnow(now)
    definition = load_definition(ctx, exam_id)

    if not definition.is_published:
        reason = AvailabilityReason.NOT_PUBLISHED
    elif definition.open_at and now < definition.open_at:
        reason = AvailabilityReason.NOT_OPEN_YET
    elif definition.close_at and now > definition.close_at:
        reason = AvailabilityReason.CLOSED
    else:
        reason = AvailabilityReason.AVAILABLE

    return ExamAvailability(
        exam_id=definition.exam_id,
        title=definition.title,
        description=definition.description,
        open_at=definition.open_at,
        close_at=definition.close_at,
        duration_seconds=int(definition.duration_seconds),
        question_count=len(definition.questions),
        max_points=definition.max_points,
        is_available=reason == AvailabilityReason.AVAILABLE,
        reason=reason,
        requires_password=bool(definition.password_hash),
        server_time=now,
    )
