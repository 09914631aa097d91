"""
공통 API 뷰
"""
import logging

from django.db import DatabaseError, connection
from django.http import JsonResponse

from libs.redis.client import redis_health

logger = logging.getLogger(__name__)


def health_check(request):
    """
    헬스체크 엔드포인트

    Returns:
        - 200: DB 정상 (Redis disabled는 in-process 락으로 동작하므로 정상)
        - 503: 데이터베이스 연결 실패 또는 Redis 오류
    """
    redis_status = redis_health()
    try:
        # 데이터베이스 연결 확인
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as e:
        logger.warning("Health check DB failure: %s", e)
        return JsonResponse({
            "status": "unhealthy",
            "service": "exam-session-api",
            "database": "disconnected",
            "redis": redis_status,
            "error": str(e),
        }, status=503)

    healthy = redis_status != "error"
    return JsonResponse({
        "status": "healthy" if healthy else "degraded",
        "service": "exam-session-api",
        "database": "connected",
        "redis": redis_status,
    }, status=200 if healthy else 503)
