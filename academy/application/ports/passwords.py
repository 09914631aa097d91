"""
Password 포트 — 시험 비밀번호 검증 (해시 알고리즘 비노출)
"""
from __future__ import annotations

from typing import Protocol


class PasswordVerifier(Protocol):
    def verify(self, raw_password: str, encoded: str) -> bool:
        ...
