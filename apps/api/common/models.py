# PATH: apps/api/common/models.py
from django.db import models


class BaseModel(models.Model):
    """
    시험/문항/응시 세션 공통 베이스 (생성·수정 시각 자동 기록)

    - 세션 상태 시각(started_at, deadline 등)은 엔진이 직접 채운다
    - 여기 두 필드는 감사용 (엔진 판정에 사용하지 않음)
    """
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
