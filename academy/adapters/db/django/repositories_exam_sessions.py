"""
Exam Session Repository — Django ORM 구현 (메서드 내부에서만 apps.domains.exam_sessions import)
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from academy.domain.exam_session.entities import (
    AnswerRecord,
    ExamSession,
    GradeOutcome,
    SessionStatus,
    SubmitReason,
)
from academy.domain.exam_session.errors import ConcurrentModification

logger = logging.getLogger(__name__)


def _answer_to_entity(a) -> AnswerRecord:
    return AnswerRecord(
        question_id=a.question_id,
        value=a.value,
        time_spent_seconds=float(a.time_spent_seconds or 0.0),
        saved_at=a.saved_at,
        outcome=GradeOutcome(a.outcome) if a.outcome else GradeOutcome.PENDING,
        auto_score=float(a.auto_score or 0.0),
        manual_score=a.manual_score,
        feedback=a.feedback,
    )


def _model_to_entity(m) -> Optional[ExamSession]:
    if m is None:
        return None
    return ExamSession(
        session_id=m.session_id,
        exam_id=str(m.exam_id),
        student_id=str(m.student_id),
        started_at=m.started_at,
        deadline=m.deadline,
        status=SessionStatus(m.status),
        answers={a.question_id: _answer_to_entity(a) for a in m.answers.all()},
        question_order=list(m.question_order or []),
        max_score=float(m.max_score or 0.0),
        auto_submit=bool(m.auto_submit),
        window_close_at=m.window_close_at,
        exam_snapshot=m.exam_snapshot,
        submitted_at=m.submitted_at,
        submit_reason=SubmitReason(m.submit_reason) if m.submit_reason else None,
        expired_at=m.expired_at,
        auto_graded=bool(m.auto_graded),
        auto_score=float(m.auto_score or 0.0),
        manual_score=float(m.manual_score or 0.0),
        final_score=m.final_score,
        feedback=m.feedback or "",
        graded_at=m.graded_at,
        graded_by=m.graded_by or None,
        last_activity_at=m.last_activity_at,
    )


def _session_fields(session: ExamSession) -> dict:
    return {
        "status": session.status.value,
        "started_at": session.started_at,
        "deadline": session.deadline,
        "enforce_at": session.enforce_at,
        "auto_submit": session.auto_submit,
        "window_close_at": session.window_close_at,
        "question_order": list(session.question_order),
        "max_score": session.max_score,
        "exam_snapshot": session.exam_snapshot,
        "submitted_at": session.submitted_at,
        "submit_reason": session.submit_reason.value if session.submit_reason else "",
        "expired_at": session.expired_at,
        "auto_graded": session.auto_graded,
        "auto_score": session.auto_score,
        "manual_score": session.manual_score,
        "final_score": session.final_score,
        "feedback": session.feedback or "",
        "graded_at": session.graded_at,
        "graded_by": session.graded_by or "",
        "last_activity_at": session.last_activity_at,
    }


def _answer_fields(record: AnswerRecord) -> dict:
    return {
        "value": record.value,
        "time_spent_seconds": record.time_spent_seconds,
        "saved_at": record.saved_at,
        "outcome": record.outcome.value,
        "auto_score": record.auto_score,
        "manual_score": record.manual_score,
        "feedback": record.feedback,
    }


class DjangoExamSessionRepository:
    """ExamSessionRepository 구현. ORM 접근은 모두 메서드 내부에서 lazy import."""

    def get(self, session_id: str) -> Optional[ExamSession]:
        from apps.domains.exam_sessions.models import ExamSessionModel
        m = (
            ExamSessionModel.objects.prefetch_related("answers")
            .filter(session_id=session_id)
            .first()
        )
        return _model_to_entity(m)

    def get_for_update(self, session_id: str) -> Optional[ExamSession]:
        """호출자가 이미 UoW 트랜잭션 내에 있어야 함 (select_for_update 락 유지)."""
        from apps.domains.exam_sessions.models import ExamSessionModel
        m = ExamSessionModel.objects.select_for_update().filter(session_id=session_id).first()
        return _model_to_entity(m)

    def find_active(self, exam_id: str, student_id: str) -> Optional[ExamSession]:
        from apps.domains.exam_sessions.models import ExamSessionModel
        m = (
            ExamSessionModel.objects.prefetch_related("answers")
            .filter(
                exam_id=exam_id,
                student_id=student_id,
                status=ExamSessionModel.Status.ACTIVE,
            )
            .first()
        )
        return _model_to_entity(m)

    def count_attempts(self, exam_id: str, student_id: str) -> int:
        from apps.domains.exam_sessions.models import ExamSessionModel
        return (
            ExamSessionModel.objects.filter(exam_id=exam_id, student_id=student_id)
            .exclude(status=ExamSessionModel.Status.ACTIVE)
            .count()
        )

    def add(self, session: ExamSession) -> None:
        from django.db import IntegrityError, transaction
        from apps.domains.exam_sessions.models import AnswerRecordModel, ExamSessionModel

        try:
            with transaction.atomic():
                m = ExamSessionModel.objects.create(
                    session_id=session.session_id,
                    exam_id=session.exam_id,
                    student_id=session.student_id,
                    **_session_fields(session),
                )
        except IntegrityError as e:
            # (exam, student) ACTIVE 중복: 다른 요청이 먼저 생성
            logger.warning(
                "SESSION_CREATE_CONFLICT exam_id=%s student_id=%s: %s",
                session.exam_id, session.student_id, e,
            )
            raise ConcurrentModification() from e

        if session.answers:
            AnswerRecordModel.objects.bulk_create(
                [
                    AnswerRecordModel(session=m, question_id=qid, **_answer_fields(rec))
                    for qid, rec in session.answers.items()
                ]
            )

    def save(self, session: ExamSession, answer_ids: Optional[Iterable[str]] = None) -> None:
        from apps.domains.exam_sessions.models import AnswerRecordModel, ExamSessionModel

        m = ExamSessionModel.objects.filter(session_id=session.session_id).first()
        if m is None:
            self.add(session)
            return

        fields = _session_fields(session)
        for k, v in fields.items():
            setattr(m, k, v)
        m.save(update_fields=list(fields.keys()) + ["updated_at"])

        ids = list(session.answers.keys()) if answer_ids is None else [str(i) for i in answer_ids]
        for qid in ids:
            record = session.answers.get(qid)
            if record is None:
                continue
            AnswerRecordModel.objects.update_or_create(
                session=m,
                question_id=qid,
                defaults=_answer_fields(record),
            )

    def list_overdue_active(self, now: datetime, limit: int) -> list[str]:
        from apps.domains.exam_sessions.models import ExamSessionModel
        qs = (
            ExamSessionModel.objects.filter(
                status=ExamSessionModel.Status.ACTIVE,
                enforce_at__lt=now,
            )
            .order_by("enforce_at")
            .values_list("session_id", flat=True)[: int(limit)]
        )
        return list(qs)

    def list_for_exam(self, exam_id: str) -> list[ExamSession]:
        from apps.domains.exam_sessions.models import ExamSessionModel
        qs = (
            ExamSessionModel.objects.prefetch_related("answers")
            .filter(exam_id=exam_id)
            .order_by("started_at")
        )
        return [_model_to_entity(m) for m in qs]

    def list_for_student(self, student_id: str) -> list[ExamSession]:
        from apps.domains.exam_sessions.models import ExamSessionModel
        qs = (
            ExamSessionModel.objects.prefetch_related("answers")
            .filter(student_id=student_id)
            .order_by("-started_at")
        )
        return [_model_to_entity(m) for m in qs]
