# apps/domains/exam_sessions/services/notifications.py
"""
응시 알림 메일 — Django 메일 백엔드 (Celery 태스크에서 호출)

- 제출 알림: 출제자에게 (학생 제출 / 마감 자동 제출 모두)
- 결과 알림: 학생에게 (채점 완료 시, 즉시 공개 시험은 제출 직후)
- 발신 주소: settings.DEFAULT_FROM_EMAIL, 링크: settings.EXAM_SESSION_FRONTEND_URL
- 발송 실패는 세션 상태와 무관. 결과는 dict로만 보고
"""

import logging
from typing import Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail

from academy.application.use_cases.exam_session.context import definition_for
from academy.domain.exam_session.entities import SessionStatus, SubmitReason, Viewer, ViewerRole
from academy.domain.exam_session.errors import ExamSessionError
from academy.domain.exam_session.result import materialize_result
from apps.domains.exam_sessions.services.engine import get_session_context
from apps.domains.exams.models import Exam

logger = logging.getLogger(__name__)


def _mask(email: str) -> str:
    name, _, domain = email.partition("@")
    return f"{name[:2]}***@{domain}"


def _frontend_link(path: str) -> str:
    base = (getattr(settings, "EXAM_SESSION_FRONTEND_URL", "") or "").rstrip("/")
    return f"{base}{path}" if base else ""


def _display_name(user) -> str:
    return (user.get_full_name() or user.get_username()).strip()


def _send(to: Optional[str], subject: str, body: str) -> dict:
    """
    Returns:
        dict: {"status": "ok"|"error"|"skipped", "reason"?}
    """
    to = (to or "").strip()
    if not to:
        return {"status": "skipped", "reason": "recipient_email_missing"}
    try:
        send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [to], fail_silently=False)
    except Exception as e:
        logger.exception("EXAM_MAIL_FAILED to=%s subject=%s", _mask(to), subject)
        return {"status": "error", "reason": str(e)[:500]}
    logger.info("EXAM_MAIL_SENT to=%s subject=%s", _mask(to), subject)
    return {"status": "ok"}


def _load(session_id: str):
    """(session, definition) 또는 (None, 사유)."""
    ctx = get_session_context()
    with ctx.uow_factory() as uow:
        session = uow.exam_sessions.get(session_id)
    if session is None:
        return None, "session_not_found"
    try:
        return session, definition_for(ctx, session)
    except ExamSessionError:
        logger.warning("EXAM_NOTICE_DEFINITION_UNAVAILABLE session_id=%s", session_id)
        return None, "definition_unavailable"


# ==================================================
# 학생 결과 알림
# ==================================================

def _result_body(student_name: str, result, link: str) -> str:
    lines = [
        f"Hello {student_name},",
        "",
        f'Your results for "{result.title}" are available.',
        f"Score: {result.final_score:g} / {result.max_score:g} ({result.percentage:g}%)",
    ]
    if result.feedback:
        lines += ["", "Feedback:", result.feedback]
    if link:
        lines += ["", f"View the details: {link}"]
    return "\n".join(lines)


def send_result_notice(session_id: str) -> dict:
    """
    학생에게 점수 메일.
    학생에게 아직 비공개인 결과(채점 전 AFTER_GRADING, 자동채점 보류)는 보내지 않는다.
    """
    session, definition = _load(session_id)
    if session is None:
        return {"status": "skipped", "reason": definition}

    if session.status == SessionStatus.SUBMITTED and not session.auto_graded:
        return {"status": "skipped", "reason": "grading_deferred"}

    student_viewer = Viewer(user_id=session.student_id, role=ViewerRole.STUDENT)
    result = materialize_result(session, definition, student_viewer)
    if not result.detail_visible:
        return {"status": "skipped", "reason": "result_not_visible"}

    student = get_user_model().objects.filter(pk=session.student_id).first()
    if student is None:
        return {"status": "skipped", "reason": "student_not_found"}

    link = _frontend_link(f"/exams/{session.exam_id}/results/{session.session_id}")
    return _send(
        student.email,
        f"[{result.title}] Your exam results",
        _result_body(_display_name(student), result, link),
    )


# ==================================================
# 출제자 제출 알림
# ==================================================

def send_submission_notice(session_id: str) -> dict:
    """
    출제자에게 "학생 X가 제출" 메일 + 결과가 학생에게 공개 상태면 학생 결과 메일.

    Returns:
        dict: {"creator": {...}, "student": {...}}
    """
    session, definition = _load(session_id)
    if session is None:
        skipped = {"status": "skipped", "reason": definition}
        return {"creator": skipped, "student": skipped}

    exam = Exam.objects.select_related("creator").filter(pk=session.exam_id).first()
    creator = exam.creator if exam is not None else None
    student = get_user_model().objects.filter(pk=session.student_id).first()

    if creator is None:
        creator_outcome = {"status": "skipped", "reason": "creator_not_found"}
    else:
        student_name = _display_name(student) if student is not None else session.student_id
        submitted_at = session.submitted_at.isoformat() if session.submitted_at else ""
        by = "deadline (automatic)" if session.submit_reason == SubmitReason.DEADLINE else "student"
        lines = [
            f'{student_name} submitted "{definition.title}".',
            "",
            f"Student: {student_name} <{student.email if student is not None else ''}>",
            f"Submitted at: {submitted_at}",
            f"Submitted by: {by}",
        ]
        link = _frontend_link(f"/exams/{session.exam_id}/sessions/{session.session_id}")
        if link:
            lines += ["", f"Review the submission: {link}"]
        creator_outcome = _send(
            creator.email,
            f"[{definition.title}] New submission from {student_name}",
            "\n".join(lines),
        )

    return {"creator": creator_outcome, "student": send_result_notice(session_id)}
