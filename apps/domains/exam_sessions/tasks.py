# apps/domains/exam_sessions/tasks.py
import logging

from celery import shared_task
from django.conf import settings

from academy.application.use_cases.exam_session import retry_auto_grade, sweep_overdue_sessions
from academy.domain.exam_session.errors import ConcurrentModification, DefinitionUnavailable
from apps.domains.exam_sessions.services.engine import get_session_context
from apps.domains.exam_sessions.services.notifications import (
    send_result_notice,
    send_submission_notice,
)

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(DefinitionUnavailable, ConcurrentModification),
    retry_backoff=True,
    retry_kwargs={"max_retries": 5},
)
def auto_grade_session_task(self, session_id: str) -> bool:
    """제출 시 보류된 자동채점 재시도 (정의 조회 복구 대기)."""
    return retry_auto_grade(get_session_context(), session_id)


@shared_task
def sweep_expired_sessions_task() -> dict:
    """Celery beat: 마감 지난 ACTIVE 세션 선제 처리."""
    report = sweep_overdue_sessions(
        get_session_context(),
        batch_size=int(settings.EXAM_SESSION_SWEEP_BATCH_SIZE),
    )
    return {
        "scanned": report.scanned,
        "submitted": report.submitted,
        "expired": report.expired,
        "busy": report.busy,
        "failed": report.failed,
    }


@shared_task
def notify_session_submitted_task(session_id: str) -> dict:
    """제출 알림 메일 (출제자, 결과 공개 시 학생)."""
    return send_submission_notice(session_id)


@shared_task
def notify_session_graded_task(session_id: str) -> dict:
    """채점 완료 결과 메일 (학생)."""
    return send_result_notice(session_id)
