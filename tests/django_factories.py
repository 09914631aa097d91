"""
Django 모델 기반 테스트 데이터 (pytest-django db fixture 필요)
"""
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.domains.exams.models import Exam, ExamQuestion


def create_user(username, **extra):
    extra.setdefault("email", f"{username}@example.com")
    return get_user_model().objects.create_user(username=username, password="pw-" + username, **extra)


def create_exam(creator, password="secret", **overrides):
    now = timezone.now()
    data = dict(
        title="Biology midterm",
        creator=creator,
        is_published=True,
        open_at=now - timedelta(hours=1),
        close_at=now + timedelta(hours=3),
        duration_seconds=30 * 60,
    )
    data.update(overrides)
    exam = Exam(**data)
    exam.set_password(password)
    exam.save()

    ExamQuestion.objects.create(
        exam=exam,
        number=1,
        question_type=ExamQuestion.QuestionType.SINGLE_SELECT,
        text="Pick B",
        options=["A", "B", "C", "D"],
        correct_answer="B",
        points=10,
    )
    ExamQuestion.objects.create(
        exam=exam,
        number=2,
        question_type=ExamQuestion.QuestionType.SHORT_TEXT,
        text="Explain",
        points=5,
    )
    return exam


def question_ids(exam):
    return [str(pk) for pk in exam.questions.order_by("number").values_list("pk", flat=True)]
