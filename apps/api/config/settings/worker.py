# apps/api/config/settings/worker.py

from .base import *
import os

# 워커는 URLConf 불필요
ROOT_URLCONF = None

# ==================================================
# Celery (워커 필수)
# ==================================================

CELERY_BROKER_URL = os.environ["CELERY_BROKER_URL"]
CELERY_RESULT_BACKEND = os.environ["CELERY_RESULT_BACKEND"]

# ==================================================
# Deadline sweep (beat + 상주 워커 공통)
# ==================================================

# 여러 워커가 같은 세션을 잡으면 세션 락이 직렬화, 경합 세션은 다음 pass로
EXAM_SESSION_LOCK_WAIT_SECONDS = float(os.getenv("EXAM_SESSION_LOCK_WAIT_SECONDS", "0.5"))
