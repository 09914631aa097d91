"""
도메인 공통: ID 생성 (외부 라이브러리 없음)
"""
from __future__ import annotations

import uuid


def generate_session_id() -> str:
    """시험 세션 ID. 추측 불가능해야 하므로 uuid4 전체 사용."""
    return uuid.uuid4().hex


def generate_lock_token() -> str:
    """세션 락 소유 토큰 (해제 시 본인 확인용)."""
    return uuid.uuid4().hex
