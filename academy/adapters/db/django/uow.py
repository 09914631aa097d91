"""
Django Unit of Work — transaction.atomic 래퍼 (lazy import)
"""
from __future__ import annotations


class DjangoUnitOfWork:
    """Django transaction.atomic으로 트랜잭션 경계. 메서드 내부에서 Django import."""

    def __init__(self) -> None:
        self._atomic = None
        self._exam_sessions = None

    @property
    def exam_sessions(self):
        from academy.adapters.db.django.repositories_exam_sessions import (
            DjangoExamSessionRepository,
        )
        if self._exam_sessions is None:
            self._exam_sessions = DjangoExamSessionRepository()
        return self._exam_sessions

    def __enter__(self) -> DjangoUnitOfWork:
        from django.db import transaction
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._atomic is not None:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)
            self._atomic = None
