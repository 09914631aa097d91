"""
Repository 포트 — 영속화 추상화 (Django/ORM 미사용)
"""
from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import Iterable, Optional, Protocol

from academy.domain.exam_session.entities import ExamSession


class ExamSessionRepository(Protocol):
    """Exam Session 영속화. select_for_update/atomic은 어댑터에서 수행."""

    @abstractmethod
    def get(self, session_id: str) -> Optional[ExamSession]:
        """session_id로 조회 (락 없음). 없으면 None."""
        ...

    @abstractmethod
    def get_for_update(self, session_id: str) -> Optional[ExamSession]:
        """session_id로 조회 + row lock. 없으면 None."""
        ...

    @abstractmethod
    def find_active(self, exam_id: str, student_id: str) -> Optional[ExamSession]:
        """(exam, student) ACTIVE 세션. 최대 1건."""
        ...

    @abstractmethod
    def count_attempts(self, exam_id: str, student_id: str) -> int:
        """ACTIVE가 아닌 (종료된) 응시 수."""
        ...

    @abstractmethod
    def add(self, session: ExamSession) -> None:
        """신규 세션 insert. ACTIVE 중복이면 어댑터가 ConcurrentModification."""
        ...

    @abstractmethod
    def save(self, session: ExamSession, answer_ids: Optional[Iterable[str]] = None) -> None:
        """
        세션 저장.
        answer_ids 지정 시 해당 답안 레코드만, None이면 전체 답안 저장.
        """
        ...

    @abstractmethod
    def list_overdue_active(self, now: datetime, limit: int) -> list[str]:
        """마감 처리 시각(enforce_at) < now 인 ACTIVE 세션 id (오래된 순)."""
        ...

    @abstractmethod
    def list_for_exam(self, exam_id: str) -> list[ExamSession]:
        ...

    @abstractmethod
    def list_for_student(self, student_id: str) -> list[ExamSession]:
        ...
