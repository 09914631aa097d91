"""
Session Lock 포트 — 세션 단위 상호배제 (redis 미사용)

같은 세션(또는 exam+student 키)에 대한 변경은 한 번에 하나만.
"""
from __future__ import annotations

from abc import abstractmethod
from typing import Optional, Protocol


class SessionLockPort(Protocol):
    @abstractmethod
    def acquire(self, key: str, wait_seconds: float) -> Optional[str]:
        """
        wait_seconds 동안 획득 시도.
        Returns: 소유 토큰 (실패 시 None)
        """
        ...

    @abstractmethod
    def release(self, key: str, token: str) -> bool:
        """본인 토큰일 때만 해제."""
        ...
