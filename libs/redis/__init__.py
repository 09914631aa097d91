"""
Redis 보호 레이어

DB(select_for_update) + 세션 락 구조.
Redis는 "세션 단위 상호배제" 목적으로만 사용.

Redis 미설정/장애 시 프로세스 내부 락으로 자동 fallback.
"""

from libs.redis.client import get_redis_client, redis_health

__all__ = [
    "get_redis_client",
    "redis_health",
]
