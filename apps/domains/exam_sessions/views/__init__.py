from .exam_views import (
    ExamAvailabilityView,
    ExamAuthenticateView,
    ExamSessionListView,
    MyExamResultsView,
)
from .session_views import (
    SessionAnswerView,
    SessionDetailView,
    SessionGradeView,
    SessionResultView,
    SessionSubmitView,
)

__all__ = [
    "ExamAvailabilityView",
    "ExamAuthenticateView",
    "ExamSessionListView",
    "MyExamResultsView",
    "SessionAnswerView",
    "SessionDetailView",
    "SessionGradeView",
    "SessionResultView",
    "SessionSubmitView",
]
