# PATH: apps/domains/exam_sessions/urls.py

from django.urls import path

from apps.domains.exam_sessions.views import (
    ExamAuthenticateView,
    ExamAvailabilityView,
    ExamSessionListView,
    MyExamResultsView,
    SessionAnswerView,
    SessionDetailView,
    SessionGradeView,
    SessionResultView,
    SessionSubmitView,
)

urlpatterns = [
    # ======================================================
    # Exam 단위
    # ======================================================
    path("exams/<int:exam_id>/availability/", ExamAvailabilityView.as_view(), name="exam-availability"),
    path("exams/<int:exam_id>/authenticate/", ExamAuthenticateView.as_view(), name="exam-authenticate"),
    path("exams/<int:exam_id>/sessions/", ExamSessionListView.as_view(), name="exam-session-list"),

    # ======================================================
    # Student
    # ======================================================
    path("me/results/", MyExamResultsView.as_view(), name="my-exam-results"),

    # ======================================================
    # Session 단위
    # ======================================================
    path("sessions/<str:session_id>/", SessionDetailView.as_view(), name="exam-session-detail"),
    path("sessions/<str:session_id>/answers/", SessionAnswerView.as_view(), name="exam-session-answers"),
    path("sessions/<str:session_id>/submit/", SessionSubmitView.as_view(), name="exam-session-submit"),
    path("sessions/<str:session_id>/grade/", SessionGradeView.as_view(), name="exam-session-grade"),
    path("sessions/<str:session_id>/result/", SessionResultView.as_view(), name="exam-session-result"),
]
