"""
Redis 클라이언트 - Fallback 지원

Redis 미설정 또는 장애 시 None 반환.
호출부(세션 락)에서 None 체크 후 프로세스 내부 락으로 fallback.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import redis

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None
_redis_available: Optional[bool] = None


def _build_client() -> Optional[redis.Redis]:
    host = os.getenv("REDIS_HOST")
    if not host:
        logger.debug("REDIS_HOST not set, Redis disabled")
        return None

    port = int(os.getenv("REDIS_PORT", "6379"))
    password = os.getenv("REDIS_PASSWORD") or None
    db = int(os.getenv("REDIS_DB", "0"))

    client = redis.Redis(
        host=host,
        port=port,
        password=password,
        db=db,
        decode_responses=True,
        socket_timeout=5,
        socket_connect_timeout=5,
    )
    client.ping()
    logger.info("Redis connected: %s:%s db=%s", host, port, db)
    return client


def get_redis_client() -> Optional[redis.Redis]:
    """
    Redis 클라이언트 반환 (프로세스당 1개).
    REDIS_HOST 미설정 또는 연결 실패 시 None (이후 재시도 안 함, reset_redis_state로 초기화).
    """
    global _redis_client, _redis_available

    if _redis_available is False:
        return None
    if _redis_client is not None:
        return _redis_client

    try:
        client = _build_client()
    except redis.RedisError as e:
        logger.warning("Redis connection failed (will use in-process locks): %s", e)
        client = None

    _redis_client = client
    _redis_available = client is not None
    return client


def redis_health() -> str:
    """헬스체크용: ok / disabled / error"""
    client = get_redis_client()
    if client is None:
        return "disabled"
    try:
        client.ping()
        return "ok"
    except redis.RedisError as e:
        logger.warning("Redis ping failed: %s", e)
        return "error"


def reset_redis_state():
    """테스트용: Redis 상태 리셋"""
    global _redis_client, _redis_available
    _redis_client = None
    _redis_available = None
