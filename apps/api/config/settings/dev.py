from .base import *
import os

DEBUG = True
ALLOWED_HOSTS = ["*"]

# 로컬: DB_NAME 없으면 SQLite
if not os.getenv("DB_NAME"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

# 🔴 base 설정 유지 + 인증 방식만 순서 변경 (브라우저 세션 우선)
REST_FRAMEWORK["DEFAULT_AUTHENTICATION_CLASSES"] = [
    "rest_framework.authentication.SessionAuthentication",
    "rest_framework_simplejwt.authentication.JWTAuthentication",
]

LOGGING["loggers"]["academy"]["level"] = "DEBUG"

# 로컬: 메일은 콘솔 출력
EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "django.core.mail.backends.console.EmailBackend")
