"""
Redis 기반 세션 락 (같은 세션 변경 직렬화)

- 키: exam_session:lock:{key}
- SET NX PX: 소유 토큰 저장, TTL로 크래시 시 자동 해제
- 해제는 토큰 비교 후 삭제 (Lua, 다른 소유자의 락을 지우지 않음)
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

# 락 로그 포맷 (표준화)
LOG_LOCK_ACQUIRED = "SESSION_LOCK key=%s acquired"
LOG_LOCK_BUSY = "SESSION_LOCK key=%s busy"
LOG_LOCK_RELEASED = "SESSION_LOCK key=%s released"

KEY_PREFIX = "exam_session:lock:"

# 세션 단위 작업은 짧다 (autosave/submit 수백 ms 이내)
DEFAULT_LOCK_TTL_SECONDS = 15

RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


def lock_key(key: str) -> str:
    return f"{KEY_PREFIX}{key}"


def try_acquire(client, key: str, token: str, ttl_seconds: float = DEFAULT_LOCK_TTL_SECONDS) -> bool:
    """1회 시도. 대기 없음."""
    ok = client.set(lock_key(key), token, nx=True, px=int(ttl_seconds * 1000))
    if ok:
        logger.debug(LOG_LOCK_ACQUIRED, key)
        return True
    logger.debug(LOG_LOCK_BUSY, key)
    return False


def release(client, key: str, token: str) -> bool:
    """본인 토큰일 때만 삭제. TTL 만료 후 다른 소유자가 잡았으면 False."""
    deleted = client.eval(RELEASE_SCRIPT, 1, lock_key(key), token)
    if deleted:
        logger.debug(LOG_LOCK_RELEASED, key)
    return bool(deleted)
