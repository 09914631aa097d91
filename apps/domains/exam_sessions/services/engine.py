# PATH: apps/domains/exam_sessions/services/engine.py
"""
Exam Session 엔진 조립 (settings + Django/Redis 어댑터 → SessionContext)

Use Case는 settings를 읽지 않는다. 여기서만 읽어서 넘긴다.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.conf import settings

from academy.adapters.cache.redis_session_lock import RedisSessionLock
from academy.adapters.db.django.exam_definitions import DjangoExamDefinitionProvider
from academy.adapters.db.django.passwords import DjangoPasswordVerifier
from academy.adapters.db.django.uow import DjangoUnitOfWork
from academy.application.use_cases.exam_session import SessionContext

logger = logging.getLogger(__name__)

# 프로세스당 1개 (in-process fallback 락이 공유되어야 함)
_session_lock: Optional[RedisSessionLock] = None


def get_session_lock() -> RedisSessionLock:
    global _session_lock
    if _session_lock is None:
        _session_lock = RedisSessionLock(ttl_seconds=float(settings.EXAM_SESSION_LOCK_TTL_SECONDS))
    return _session_lock


def reset_engine() -> None:
    """테스트용"""
    global _session_lock
    _session_lock = None


def schedule_auto_grade_retry(session_id: str) -> None:
    """정의 조회 실패로 자동채점 보류된 세션 → Celery 재시도 예약."""
    from apps.domains.exam_sessions.tasks import auto_grade_session_task
    try:
        auto_grade_session_task.delay(session_id)
    except Exception:
        # 브로커 장애: 제출 자체는 커밋됨, 채점은 수동 채점 시 함께 수행
        logger.exception("AUTO_GRADE_SCHEDULE_FAILED session_id=%s", session_id)


def schedule_submission_notice(session_id: str) -> None:
    """제출 커밋 후 → 출제자 제출 알림 (+ 공개된 결과는 학생에게)."""
    from apps.domains.exam_sessions.tasks import notify_session_submitted_task
    try:
        notify_session_submitted_task.delay(session_id)
    except Exception:
        # 알림 실패는 제출에 영향 없음
        logger.exception("SUBMISSION_NOTICE_SCHEDULE_FAILED session_id=%s", session_id)


def schedule_result_notice(session_id: str) -> None:
    """채점 완료 커밋 후 → 학생 결과 알림."""
    from apps.domains.exam_sessions.tasks import notify_session_graded_task
    try:
        notify_session_graded_task.delay(session_id)
    except Exception:
        logger.exception("RESULT_NOTICE_SCHEDULE_FAILED session_id=%s", session_id)


def get_session_context() -> SessionContext:
    notify = bool(getattr(settings, "EXAM_SESSION_NOTIFY_EMAIL", True))
    return SessionContext(
        uow_factory=DjangoUnitOfWork,
        definitions=DjangoExamDefinitionProvider(),
        locks=get_session_lock(),
        passwords=DjangoPasswordVerifier(),
        lock_wait_seconds=float(settings.EXAM_SESSION_LOCK_WAIT_SECONDS),
        lock_retry_backoff_seconds=float(settings.EXAM_SESSION_LOCK_RETRY_BACKOFF_SECONDS),
        answer_max_chars=int(settings.EXAM_SESSION_ANSWER_MAX_CHARS),
        on_grading_deferred=schedule_auto_grade_retry,
        on_submitted=schedule_submission_notice if notify else None,
        on_graded=schedule_result_notice if notify else None,
    )
