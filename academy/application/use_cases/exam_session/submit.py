"""
제출 + 자동채점 (Django 미사용)

ACTIVE → SUBMITTED, 객관식 즉시 채점.
주관식이 없으면 SUBMITTED → GRADED까지 한 번에.
정의를 못 가져오면 제출만 커밋하고 채점은 보류 (기본값으로 채점하지 않음).
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from academy.application.use_cases.exam_session.context import (
    SessionContext,
    notify_submitted,
    session_lock_key,
    session_scope,
    utcnow,
)
from academy.application.use_cases.exam_session.deadline import (
    enforce_deadline,
    finalize_auto_grading,
    safe_definition_for,
)
from academy.domain.exam_session.entities import ExamSession, SubmitReason
from academy.domain.exam_session.errors import (
    DEADLINE_SUBMITTED_MESSAGE,
    NotPermitted,
    SessionExpired,
    SessionNotFound,
)

logger = logging.getLogger(__name__)


def submit(
    ctx: SessionContext,
    session_id: str,
    student_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ExamSession:
    now = utcnow(now)

    # 정의 조회는 락 밖에서
    with ctx.uow_factory() as uow:
        current = uow.exam_sessions.get(session_id)
    if current is None:
        raise SessionNotFound()
    if student_id is not None and str(current.student_id) != str(student_id):
        raise NotPermitted()
    definition = safe_definition_for(ctx, current)

    deadline_reached = False
    with session_scope(ctx, session_lock_key(session_id)):
        with ctx.uow_factory() as uow:
            repo = uow.exam_sessions
            session = repo.get_for_update(session_id)
            if session is None:
                raise SessionNotFound()

            if session.is_overdue(now):
                if enforce_deadline(session, definition, now) is not None:
                    repo.save(session)
                deadline_reached = True
            else:
                session.submit(now, reason=SubmitReason.STUDENT)
                if definition is not None:
                    finalize_auto_grading(session, definition, now)
                else:
                    session.auto_graded = False
                repo.save(session)

    notify_submitted(ctx, session)
    if deadline_reached:
        logger.info("SUBMIT_REJECTED session_id=%s reason=deadline", session_id)
        if session.submit_reason == SubmitReason.DEADLINE:
            raise SessionExpired(DEADLINE_SUBMITTED_MESSAGE)
        raise SessionExpired()

    logger.info(
        "SESSION_SUBMITTED session_id=%s status=%s auto_graded=%s auto_score=%s",
        session.session_id, session.status.value, session.auto_graded, session.auto_score,
    )
    return session
