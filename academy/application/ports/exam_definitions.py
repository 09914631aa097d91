"""
Exam Definition Provider 포트 — 시험 정의 조회 (Django/ORM 미사용)

엔진은 시험 정의를 소유하지 않는다. 읽기 전용으로만 가져온다.
"""
from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from academy.domain.exam_session.definition import ExamDefinition


class ExamDefinitionNotFound(LookupError):
    """해당 exam_id 정의 없음 (Provider 정상 응답)."""
    pass


class ExamDefinitionProvider(Protocol):
    @abstractmethod
    def get(self, exam_id: str) -> ExamDefinition:
        """
        exam_id로 정의 조회.
        없으면 ExamDefinitionNotFound, 그 외 실패(저장소 장애 등)는 다른 예외 그대로.
        """
        ...
