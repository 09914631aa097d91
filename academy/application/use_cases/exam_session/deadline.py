"""
Deadline Enforcer — 수락 판정 + 마감 처리 (Django 미사용)

- 반응형: autosave/submit 진입 시 is_acceptable 확인
- 선제형: sweep 또는 다음 요청 시 lazy enforce
판정은 항상 서버 deadline 기준 (클라이언트 남은 시간 무시).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from academy.application.use_cases.exam_session.context import (
    SessionContext,
    definition_for,
    notify_submitted,
    session_lock_key,
    session_scope,
    utcnow,
)
from academy.domain.exam_session.definition import ExamDefinition
from academy.domain.exam_session.entities import ExamSession, SessionStatus, SubmitReason
from academy.domain.exam_session.errors import (
    ConcurrentModification,
    DefinitionUnavailable,
    ExamSessionError,
)
from academy.domain.exam_session.grading import auto_grade_session

logger = logging.getLogger(__name__)


def is_acceptable(session: ExamSession, now: Optional[datetime] = None) -> bool:
    return session.is_acceptable(utcnow(now))


def finalize_auto_grading(session: ExamSession, definition: ExamDefinition, now: datetime) -> None:
    """제출 직후 자동채점. 주관식 없으면 Submitted→Graded 즉시."""
    auto_grade_session(session, definition)
    if not definition.has_subjective:
        session.mark_graded(now)


def enforce_deadline(
    session: ExamSession,
    definition: Optional[ExamDefinition],
    now: datetime,
) -> Optional[SessionStatus]:
    """
    마감 지난 ACTIVE 세션 처리.
    Returns: 전이된 상태 (변화 없으면 None)

    - autoSubmit: 저장된 답안 그대로 Submitted (+자동채점)
    - autoSubmit 아님: 응시 창이 닫혀야 Expired. 그 전에는 ACTIVE 유지 (수락은 거부됨)
    """
    if not session.is_overdue(now):
        return None

    if session.auto_submit:
        session.submit(now, reason=SubmitReason.DEADLINE)
        if definition is not None:
            finalize_auto_grading(session, definition, now)
        else:
            session.auto_graded = False
        logger.info(
            "DEADLINE_AUTO_SUBMIT session_id=%s exam_id=%s status=%s",
            session.session_id, session.exam_id, session.status.value,
        )
        return session.status

    if session.is_enforcement_due(now):
        session.expire(now)
        logger.info("DEADLINE_EXPIRED session_id=%s exam_id=%s", session.session_id, session.exam_id)
        return session.status
    return None


def safe_definition_for(ctx: SessionContext, session: ExamSession) -> Optional[ExamDefinition]:
    """마감 처리용. 정의를 못 가져와도 제출은 진행 (채점만 보류)."""
    try:
        return definition_for(ctx, session)
    except DefinitionUnavailable:
        logger.warning("DEADLINE_DEFINITION_UNAVAILABLE session_id=%s", session.session_id)
        return None


def enforce_deadline_locked(
    ctx: SessionContext,
    session_id: str,
    now: Optional[datetime] = None,
) -> Optional[SessionStatus]:
    """락 + 트랜잭션 안에서 단일 세션 마감 처리."""
    now = utcnow(now)
    with session_scope(ctx, session_lock_key(session_id)):
        with ctx.uow_factory() as uow:
            session = uow.exam_sessions.get_for_update(session_id)
            if session is None or not session.is_overdue(now):
                return None
            definition = safe_definition_for(ctx, session)
            transitioned = enforce_deadline(session, definition, now)
            if transitioned is not None:
                uow.exam_sessions.save(session)

    if transitioned is not None:
        notify_submitted(ctx, session)
    return transitioned


@dataclass
class SweepReport:
    scanned: int = 0
    submitted: int = 0
    expired: int = 0
    busy: int = 0
    failed: int = 0
    session_ids: list[str] = field(default_factory=list)


def sweep_overdue_sessions(
    ctx: SessionContext,
    now: Optional[datetime] = None,
    batch_size: int = 200,
) -> SweepReport:
    """
    선제형 마감 처리 1회.
    세션별 락 사용, 경합 중인 세션은 건너뜀 (다음 sweep 또는 lazy 처리).
    """
    now = utcnow(now)
    report = SweepReport()

    with ctx.uow_factory() as uow:
        candidates = uow.exam_sessions.list_overdue_active(now, batch_size)

    for session_id in candidates:
        report.scanned += 1
        try:
            status = enforce_deadline_locked(ctx, session_id, now=now)
        except ConcurrentModification:
            report.busy += 1
            continue
        except ExamSessionError:
            logger.exception("SWEEP_FAILED session_id=%s", session_id)
            report.failed += 1
            continue

        if status is None:
            continue
        report.session_ids.append(session_id)
        if status == SessionStatus.EXPIRED:
            report.expired += 1
        else:
            report.submitted += 1

    logger.info(
        "SWEEP_DONE scanned=%s submitted=%s expired=%s busy=%s failed=%s",
        report.scanned, report.submitted, report.expired, report.busy, report.failed,
    )
    return report
