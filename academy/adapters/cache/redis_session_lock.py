"""
RedisSessionLock - SessionLockPort 구현체

SET NX PX 기반 세션 락 + 제한 시간 polling 대기.
Redis 미설정/장애 시 InProcessSessionLock으로 fallback (단일 프로세스에서만 안전).
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import redis

from academy.adapters.cache.local_session_lock import InProcessSessionLock
from academy.domain.shared.ids import generate_lock_token
from libs.redis import session_lock
from libs.redis.client import get_redis_client

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 0.02


class RedisSessionLock:
    """SessionLockPort 구현 (Redis)."""

    def __init__(
        self,
        client_factory: Callable[[], Optional[object]] = get_redis_client,
        ttl_seconds: float = session_lock.DEFAULT_LOCK_TTL_SECONDS,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        fallback: Optional[InProcessSessionLock] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client_factory = client_factory
        self._ttl = ttl_seconds
        self._poll = poll_interval_seconds
        self._fallback = fallback or InProcessSessionLock()
        self._clock = clock
        self._sleep = sleep

    def acquire(self, key: str, wait_seconds: float) -> Optional[str]:
        client = self._client_factory()
        if client is None:
            return self._fallback.acquire(key, wait_seconds)

        token = generate_lock_token()
        give_up_at = self._clock() + max(0.0, float(wait_seconds))
        while True:
            try:
                if session_lock.try_acquire(client, key, token, self._ttl):
                    return token
            except redis.RedisError as e:
                logger.warning("Redis lock acquire failed key=%s, using in-process lock: %s", key, e)
                return self._fallback.acquire(key, max(0.0, give_up_at - self._clock()))

            if self._clock() >= give_up_at:
                return None
            self._sleep(self._poll)

    def release(self, key: str, token: str) -> bool:
        if self._fallback.owns(key, token):
            return self._fallback.release(key, token)

        client = self._client_factory()
        if client is None:
            return False
        try:
            return session_lock.release(client, key, token)
        except redis.RedisError as e:
            logger.warning("Redis lock release failed key=%s: %s", key, e)
            # TTL 만료 시 자동 해제
            return False
