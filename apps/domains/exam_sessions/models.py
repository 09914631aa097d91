# apps/domains/exam_sessions/models.py
from django.conf import settings
from django.db import models
from django.db.models import Q

from apps.api.common.models import BaseModel
from apps.domains.exams.models import Exam


class ExamSessionModel(BaseModel):
    """
    학생 1명의 시험 1회 응시 (엔진 상태 저장소)

    - 상태 전이 규칙은 academy.domain.exam_session 엔티티에서만
    - (exam, student) 당 ACTIVE 1건 (부분 유니크 제약)
    - 엔진은 삭제하지 않는다
    """

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "응시 중"
        EXPIRED = "EXPIRED", "만료"
        SUBMITTED = "SUBMITTED", "제출"
        GRADED = "GRADED", "채점 완료"

    session_id = models.CharField(max_length=64, unique=True)

    exam = models.ForeignKey(
        Exam,
        on_delete=models.PROTECT,
        related_name="sessions",
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="exam_sessions",
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )

    started_at = models.DateTimeField()
    deadline = models.DateTimeField()
    # sweep 대상 조회용 (autoSubmit이면 deadline, 아니면 응시 창 종료)
    enforce_at = models.DateTimeField(db_index=True)
    auto_submit = models.BooleanField(default=True)
    window_close_at = models.DateTimeField(null=True, blank=True)

    question_order = models.JSONField(default=list, blank=True)
    max_score = models.FloatField(default=0.0)
    # 입장 시점 시험 정의 스냅샷 (정답 포함, 비밀번호 제외)
    exam_snapshot = models.JSONField(null=True, blank=True)

    submitted_at = models.DateTimeField(null=True, blank=True)
    submit_reason = models.CharField(max_length=20, blank=True)
    expired_at = models.DateTimeField(null=True, blank=True)

    auto_graded = models.BooleanField(default=False)
    auto_score = models.FloatField(default=0.0)
    manual_score = models.FloatField(default=0.0)
    final_score = models.FloatField(null=True, blank=True)
    feedback = models.TextField(blank=True)

    graded_at = models.DateTimeField(null=True, blank=True)
    graded_by = models.CharField(max_length=64, blank=True)

    last_activity_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "exam_session"
        ordering = ["-started_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["exam", "student"],
                condition=Q(status="ACTIVE"),
                name="uniq_active_session_per_exam_student",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "enforce_at"], name="exam_session_sweep_idx"),
            models.Index(fields=["exam", "student"], name="exam_session_attempt_idx"),
        ]

    def __str__(self):
        return f"ExamSession({self.session_id}) exam={self.exam_id} student={self.student_id} {self.status}"


class AnswerRecordModel(BaseModel):
    """
    문항별 답안 (autosave upsert 대상)
    """

    session = models.ForeignKey(
        ExamSessionModel,
        on_delete=models.CASCADE,
        related_name="answers",
    )
    question_id = models.CharField(max_length=64)

    value = models.JSONField(null=True, blank=True)
    time_spent_seconds = models.FloatField(default=0.0)
    saved_at = models.DateTimeField(null=True, blank=True)

    outcome = models.CharField(max_length=20, default="pending")
    auto_score = models.FloatField(default=0.0)
    manual_score = models.FloatField(null=True, blank=True)
    feedback = models.TextField(null=True, blank=True)

    class Meta:
        db_table = "exam_session_answer"
        constraints = [
            models.UniqueConstraint(
                fields=["session", "question_id"],
                name="uniq_answer_per_session_question",
            ),
        ]

    def __str__(self):
        return f"Answer({self.session_id}, {self.question_id})"
