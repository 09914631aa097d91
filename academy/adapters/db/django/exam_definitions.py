"""
Exam Definition Provider — Django ORM 구현 (apps.domains.exams 모델 → 도메인 스냅샷)
"""
from __future__ import annotations

from academy.application.ports.exam_definitions import ExamDefinitionNotFound
from academy.domain.exam_session.definition import (
    ExamDefinition,
    Question,
    QuestionType,
    ResultVisibility,
)


def _question_to_entity(q) -> Question:
    return Question(
        question_id=str(q.pk),
        question_type=QuestionType(q.question_type),
        text=q.text or "",
        options=tuple(q.options or ()),
        correct_answer=q.correct_answer,
        points=float(q.points),
        time_limit_seconds=q.time_limit_seconds,
        explanation=q.explanation or "",
    )


def exam_to_definition(exam) -> ExamDefinition:
    return ExamDefinition(
        exam_id=str(exam.pk),
        title=exam.title,
        description=exam.description or "",
        creator_id=str(exam.creator_id) if exam.creator_id else None,
        questions=tuple(_question_to_entity(q) for q in exam.questions.all()),
        duration_seconds=int(exam.duration_seconds),
        open_at=exam.open_at,
        close_at=exam.close_at,
        is_published=bool(exam.is_published),
        auto_submit=bool(exam.auto_submit),
        shuffle_questions=bool(exam.shuffle_questions),
        result_visibility=ResultVisibility(exam.result_visibility),
        password_hash=exam.password or "",
        max_attempts=exam.max_attempts,
    )


class DjangoExamDefinitionProvider:
    """ExamDefinitionProvider 구현 (읽기 전용)."""

    def get(self, exam_id: str) -> ExamDefinition:
        from apps.domains.exams.models import Exam
        try:
            pk = int(exam_id)
        except (TypeError, ValueError):
            raise ExamDefinitionNotFound(exam_id)
        exam = Exam.objects.prefetch_related("questions").filter(pk=pk).first()
        if exam is None:
            raise ExamDefinitionNotFound(exam_id)
        return exam_to_definition(exam)
