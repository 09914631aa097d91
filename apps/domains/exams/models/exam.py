from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.db import models

from apps.api.common.models import BaseModel


class Exam(BaseModel):
    """
    시험 정의 (Exam Definition Provider의 원본)

    - 응시 창(open_at/close_at) + 1회 제한 시간(duration_seconds)
    - password는 해시만 저장 (Django password hasher)
    - 세션이 하나라도 생기면 문항 배점/구성 변경 금지
    """

    class ResultVisibility(models.TextChoices):
        IMMEDIATE = "immediate", "제출 직후 공개"
        AFTER_GRADING = "after_grading", "채점 완료 후 공개"

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_exams",
    )

    is_published = models.BooleanField(default=False)

    open_at = models.DateTimeField(null=True, blank=True)
    close_at = models.DateTimeField(null=True, blank=True)
    duration_seconds = models.PositiveIntegerField(default=30 * 60)

    auto_submit = models.BooleanField(default=True)
    shuffle_questions = models.BooleanField(default=False)
    result_visibility = models.CharField(
        max_length=20,
        choices=ResultVisibility.choices,
        default=ResultVisibility.AFTER_GRADING,
    )

    # 해시 문자열 (빈 값이면 비밀번호 없이 입장)
    password = models.CharField(max_length=128, blank=True)

    # null = 무제한
    max_attempts = models.PositiveIntegerField(null=True, blank=True, default=1)

    class Meta:
        db_table = "exams_exam"
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    def set_password(self, raw_password):
        self.password = make_password(raw_password) if raw_password else ""

    def has_sessions(self) -> bool:
        if not self.pk:
            return False
        return self.sessions.exists()
