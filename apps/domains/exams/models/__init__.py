# apps/domains/exams/models/__init__.py
from .exam import Exam
from .question import ExamLocked, ExamQuestion

__all__ = [
    "Exam",
    "ExamLocked",
    "ExamQuestion",
]
