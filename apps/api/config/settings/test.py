# apps/api/config/settings/test.py

from .base import *

DEBUG = False
SECRET_KEY = "test-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# 브로커 없이 .delay() 가능 (태스크는 실행되지 않음)
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"
CELERY_TASK_ALWAYS_EAGER = False

EXAM_SESSION_LOCK_WAIT_SECONDS = 0.2
EXAM_SESSION_LOCK_RETRY_BACKOFF_SECONDS = 0.0

# 알림 예약은 필요한 테스트에서만 켠다 (settings fixture)
EXAM_SESSION_NOTIFY_EMAIL = False
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
DEFAULT_FROM_EMAIL = "exams@example.com"
EXAM_SESSION_FRONTEND_URL = "https://exams.example.com"
