# Django 시작 시 Celery 앱 로드 (shared_task 바인딩)
from apps.api.celery import app as celery_app

__all__ = ("celery_app",)
