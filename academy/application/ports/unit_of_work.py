"""
Unit of Work 포트 — 트랜잭션 경계 (Django 미사용)
"""
from __future__ import annotations

from typing import Protocol

from academy.application.ports.repositories import ExamSessionRepository


class UnitOfWork(Protocol):
    """트랜잭션 단위. __enter__에서 시작, __exit__에서 정상 종료 시 반영, 예외 시 폐기."""

    @property
    def exam_sessions(self) -> ExamSessionRepository:
        ...

    def __enter__(self) -> "UnitOfWork":
        ...

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        ...
