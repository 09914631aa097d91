from django.core.exceptions import ValidationError
from django.db import models

from apps.api.common.models import BaseModel
from .exam import Exam


class ExamLocked(ValidationError):
    """응시 세션이 있는 시험의 배점/문항 구성 변경 시도."""
    pass


class ExamQuestion(BaseModel):
    """
    시험 문항 정의

    correct_answer 형태:
      single_select: "B"
      multi_select: ["A", "C"]
      true_false: true / false
      short_text / long_text: null (수동 채점)
    """

    class QuestionType(models.TextChoices):
        SINGLE_SELECT = "single_select", "단일 선택"
        MULTI_SELECT = "multi_select", "복수 선택"
        TRUE_FALSE = "true_false", "O/X"
        SHORT_TEXT = "short_text", "단답형"
        LONG_TEXT = "long_text", "서술형"

    exam = models.ForeignKey(
        Exam,
        on_delete=models.CASCADE,
        related_name="questions",
    )

    number = models.PositiveIntegerField()  # 1번, 2번 ...
    question_type = models.CharField(max_length=20, choices=QuestionType.choices)
    text = models.TextField(blank=True)

    options = models.JSONField(default=list, blank=True)
    correct_answer = models.JSONField(null=True, blank=True)

    points = models.FloatField(default=1.0)
    time_limit_seconds = models.PositiveIntegerField(null=True, blank=True)
    explanation = models.TextField(blank=True)

    class Meta:
        db_table = "exams_question"
        unique_together = ("exam", "number")
        ordering = ["number"]

    def __str__(self):
        return f"{self.exam} Q{self.number}"

    def _guard_locked(self):
        if not self.exam.has_sessions():
            return
        if self.pk is None:
            raise ExamLocked("Cannot add questions to an exam that already has sessions.")
        previous = ExamQuestion.objects.filter(pk=self.pk).values_list("points", flat=True).first()
        if previous is not None and float(previous) != float(self.points):
            raise ExamLocked("Cannot change points of an exam that already has sessions.")

    def save(self, *args, **kwargs):
        self._guard_locked()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.exam.has_sessions():
            raise ExamLocked("Cannot remove questions from an exam that already has sessions.")
        return super().delete(*args, **kwargs)
