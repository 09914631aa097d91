"""
Exam Session Use Case 공통 컨텍스트 — 포트 묶음 + 튜닝 값 (Django 미사용)

설정(settings) 읽기는 어댑터 조립 쪽(engine.py)에서만.
"""
from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

from academy.application.ports.exam_definitions import (
    ExamDefinitionNotFound,
    ExamDefinitionProvider,
)
from academy.application.ports.locks import SessionLockPort
from academy.application.ports.passwords import PasswordVerifier
from academy.application.ports.unit_of_work import UnitOfWork
from academy.domain.exam_session.definition import ExamDefinition
from academy.domain.exam_session.entities import ExamSession, SessionStatus
from academy.domain.exam_session.errors import (
    ConcurrentModification,
    DefinitionUnavailable,
    ExamNotFound,
)

logger = logging.getLogger(__name__)

DEFAULT_LOCK_WAIT_SECONDS = 2.0
DEFAULT_LOCK_RETRY_BACKOFF_SECONDS = 0.05
DEFAULT_ANSWER_MAX_CHARS = 20000


@dataclass
class SessionContext:
    uow_factory: Callable[[], UnitOfWork]
    definitions: ExamDefinitionProvider
    locks: SessionLockPort
    passwords: PasswordVerifier
    lock_wait_seconds: float = DEFAULT_LOCK_WAIT_SECONDS
    lock_retry_backoff_seconds: float = DEFAULT_LOCK_RETRY_BACKOFF_SECONDS
    answer_max_chars: int = DEFAULT_ANSWER_MAX_CHARS
    # 제출은 됐지만 자동채점 보류된 세션 (재시도 예약용, 커밋 후 호출)
    on_grading_deferred: Optional[Callable[[str], None]] = None
    # 제출/채점 완료 알림 (커밋 후 호출, 실패해도 세션 상태와 무관해야 함)
    on_submitted: Optional[Callable[[str], None]] = None
    on_graded: Optional[Callable[[str], None]] = None
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)


def utcnow(now: Optional[datetime] = None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    return now


# ---------------------------------------------------------------------
# Lock keys
# ---------------------------------------------------------------------

def session_lock_key(session_id: str) -> str:
    return f"exam_session:{session_id}"


def start_lock_key(exam_id: str, student_id: str) -> str:
    return f"exam:{exam_id}:student:{student_id}"


@contextmanager
def session_scope(ctx: SessionContext, key: str) -> Iterator[str]:
    """
    세션 단위 상호배제 구간.
    획득 실패 시 backoff 후 1회 재시도, 그래도 실패면 ConcurrentModification.
    """
    token = ctx.locks.acquire(key, ctx.lock_wait_seconds)
    if token is None:
        logger.info("SESSION_LOCK key=%s busy, retrying once", key)
        ctx.sleep(ctx.lock_retry_backoff_seconds)
        token = ctx.locks.acquire(key, ctx.lock_wait_seconds)
    if token is None:
        logger.warning("SESSION_LOCK key=%s contention exceeded", key)
        raise ConcurrentModification()

    logger.debug("SESSION_LOCK key=%s acquired", key)
    try:
        yield token
    finally:
        if not ctx.locks.release(key, token):
            # TTL 만료 후 다른 소유자가 잡은 경우
            logger.warning("SESSION_LOCK key=%s released after expiry", key)


# ---------------------------------------------------------------------
# Exam definition lookup
# ---------------------------------------------------------------------

def load_definition(ctx: SessionContext, exam_id: str) -> ExamDefinition:
    try:
        return ctx.definitions.get(str(exam_id))
    except ExamDefinitionNotFound:
        raise ExamNotFound()
    except Exception as e:
        logger.exception("DEFINITION_UNAVAILABLE exam_id=%s", exam_id)
        raise DefinitionUnavailable() from e


def definition_for(ctx: SessionContext, session: ExamSession) -> ExamDefinition:
    """세션 스냅샷 우선, 없으면 Provider."""
    snapshot = session.snapshot_definition()
    if snapshot is not None:
        return snapshot
    try:
        return load_definition(ctx, session.exam_id)
    except ExamNotFound as e:
        # 세션은 있는데 정의가 사라짐: 스코어링 불가
        raise DefinitionUnavailable() from e


def notify_grading_deferred(ctx: SessionContext, session: ExamSession) -> None:
    if session.auto_graded or session.status != SessionStatus.SUBMITTED:
        return
    logger.warning("AUTO_GRADE_DEFERRED session_id=%s exam_id=%s", session.session_id, session.exam_id)
    if ctx.on_grading_deferred is not None:
        ctx.on_grading_deferred(session.session_id)


def notify_submitted(ctx: SessionContext, session: ExamSession) -> None:
    """방금 커밋된 제출 (학생 제출 또는 마감 자동 제출) 후속 처리."""
    notify_grading_deferred(ctx, session)
    if session.status not in (SessionStatus.SUBMITTED, SessionStatus.GRADED):
        return
    if ctx.on_submitted is not None:
        ctx.on_submitted(session.session_id)


def notify_graded(ctx: SessionContext, session: ExamSession) -> None:
    if session.status != SessionStatus.GRADED:
        return
    if ctx.on_graded is not None:
        ctx.on_graded(session.session_id)
