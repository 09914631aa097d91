"""
프로세스 내부 세션 락 — Redis 미설정(개발/테스트, 단일 프로세스) 시 사용
"""
from __future__ import annotations

import threading
from typing import Optional

from academy.domain.shared.ids import generate_lock_token


class InProcessSessionLock:
    """SessionLockPort 구현 (threading.Lock, 키별 1개)."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._owners: dict[str, str] = {}

    def acquire(self, key: str, wait_seconds: float) -> Optional[str]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
        if not lock.acquire(timeout=max(0.0, float(wait_seconds))):
            return None
        token = generate_lock_token()
        with self._guard:
            self._owners[key] = token
        return token

    def release(self, key: str, token: str) -> bool:
        with self._guard:
            if self._owners.get(key) != token:
                return False
            del self._owners[key]
            lock = self._locks[key]
        lock.release()
        return True

    def owns(self, key: str, token: str) -> bool:
        with self._guard:
            return self._owners.get(key) == token
