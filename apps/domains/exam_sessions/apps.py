# apps/domains/exam_sessions/apps.py
from django.apps import AppConfig


class ExamSessionsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.domains.exam_sessions"
    label = "exam_sessions"
