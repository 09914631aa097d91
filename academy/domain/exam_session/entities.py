"""
Exam Session 도메인 엔티티 — 순수 파이썬 (Django/ORM/redis 미사용)

상태 전이 규칙은 엔티티 메서드로 표현.
  ACTIVE → SUBMITTED (학생 제출 / 마감 자동제출)
  ACTIVE → EXPIRED   (autoSubmit=False 이고 응시 창 종료)
  SUBMITTED → GRADED (수동 채점, 주관식 없으면 제출 즉시)
  GRADED → (없음, 재채점은 GRADED 유지)
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional

from academy.domain.exam_session.definition import ExamDefinition
from academy.domain.exam_session.errors import (
    DEADLINE_SUBMITTED_MESSAGE,
    AlreadySubmitted,
    SessionExpired,
)


class SessionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    SUBMITTED = "SUBMITTED"
    GRADED = "GRADED"


# 허용 전이 (역행 금지)
ALLOWED_TRANSITIONS = {
    SessionStatus.ACTIVE: frozenset({SessionStatus.SUBMITTED, SessionStatus.EXPIRED}),
    SessionStatus.SUBMITTED: frozenset({SessionStatus.GRADED}),
    SessionStatus.EXPIRED: frozenset(),
    SessionStatus.GRADED: frozenset(),
}

GRADABLE_STATUSES = (SessionStatus.SUBMITTED, SessionStatus.GRADED)


class GradeOutcome(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    PENDING = "pending"


class SubmitReason(str, Enum):
    STUDENT = "student"
    DEADLINE = "deadline"


class ViewerRole(str, Enum):
    STUDENT = "student"
    CREATOR = "creator"


@dataclass(frozen=True)
class Viewer:
    """Identity Provider가 넘겨준 호출자 (엔진은 신뢰만 한다)."""
    user_id: str
    role: ViewerRole
    is_admin: bool = False

    @property
    def is_creator(self) -> bool:
        return self.role == ViewerRole.CREATOR


@dataclass
class AnswerRecord:
    question_id: str
    value: Any = None
    time_spent_seconds: float = 0.0
    saved_at: Optional[datetime] = None
    outcome: GradeOutcome = GradeOutcome.PENDING
    auto_score: float = 0.0
    manual_score: Optional[float] = None
    feedback: Optional[str] = None

    def apply_save(self, value: Any, time_delta_seconds: float, now: datetime) -> None:
        """
        last-write-wins: value 교체
        time_spent: 누적 (교체 금지, 음수 무시)
        """
        self.value = value
        if time_delta_seconds and time_delta_seconds > 0:
            self.time_spent_seconds += float(time_delta_seconds)
        self.saved_at = now

    @property
    def effective_score(self) -> float:
        if self.manual_score is not None:
            return float(self.manual_score)
        return float(self.auto_score)

    @property
    def is_pending(self) -> bool:
        return self.outcome == GradeOutcome.PENDING and self.manual_score is None


@dataclass
class ExamSession:
    """
    학생 1명의 시험 1회 응시.
    deadline은 생성 시 고정, 이후 재계산하지 않는다 (클라이언트 시간 무시).
    """
    session_id: str
    exam_id: str
    student_id: str
    started_at: datetime
    deadline: datetime
    status: SessionStatus = SessionStatus.ACTIVE
    answers: dict[str, AnswerRecord] = field(default_factory=dict)
    question_order: list[str] = field(default_factory=list)
    max_score: float = 0.0
    auto_submit: bool = True
    window_close_at: Optional[datetime] = None
    exam_snapshot: Optional[dict[str, Any]] = None
    submitted_at: Optional[datetime] = None
    submit_reason: Optional[SubmitReason] = None
    expired_at: Optional[datetime] = None
    auto_graded: bool = False
    auto_score: float = 0.0
    manual_score: float = 0.0
    final_score: Optional[float] = None
    feedback: str = ""
    graded_at: Optional[datetime] = None
    graded_by: Optional[str] = None
    last_activity_at: Optional[datetime] = None

    # ------------------------------------------------------------------
    # 생성
    # ------------------------------------------------------------------
    @classmethod
    def start(
        cls,
        *,
        session_id: str,
        definition: ExamDefinition,
        student_id: str,
        now: datetime,
    ) -> "ExamSession":
        """
        deadline = now + duration.
        응시 창 종료가 더 빠르면 close_at으로 cap.
        """
        deadline = now + timedelta(seconds=int(definition.duration_seconds))
        if definition.close_at and definition.close_at < deadline:
            deadline = definition.close_at

        order = [q.question_id for q in definition.questions]
        if definition.shuffle_questions:
            # session_id 시드: 재접속해도 같은 순서
            random.Random(session_id).shuffle(order)

        return cls(
            session_id=session_id,
            exam_id=definition.exam_id,
            student_id=str(student_id),
            started_at=now,
            deadline=deadline,
            status=SessionStatus.ACTIVE,
            question_order=order,
            max_score=definition.max_points,
            auto_submit=definition.auto_submit,
            window_close_at=definition.close_at,
            exam_snapshot=definition.to_snapshot(),
            last_activity_at=now,
        )

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    def is_acceptable(self, now: datetime) -> bool:
        """Deadline Enforcer 판정. 서버 deadline 기준으로만 판단."""
        return self.status == SessionStatus.ACTIVE and now <= self.deadline

    def is_overdue(self, now: datetime) -> bool:
        return self.status == SessionStatus.ACTIVE and now > self.deadline

    @property
    def enforce_at(self) -> datetime:
        """
        마감 처리 시각.
        autoSubmit이면 deadline, 아니면 응시 창 종료 시각 (없으면 deadline).
        """
        if self.auto_submit or self.window_close_at is None:
            return self.deadline
        return max(self.deadline, self.window_close_at)

    def is_enforcement_due(self, now: datetime) -> bool:
        return self.status == SessionStatus.ACTIVE and now > self.enforce_at

    def remaining_seconds(self, now: datetime) -> int:
        if not self.is_acceptable(now):
            return 0
        return max(0, int((self.deadline - now).total_seconds()))

    def snapshot_definition(self) -> Optional[ExamDefinition]:
        if not self.exam_snapshot:
            return None
        return ExamDefinition.from_snapshot(self.exam_snapshot)

    def total_time_spent(self) -> float:
        return float(sum(a.time_spent_seconds for a in self.answers.values()))

    # ------------------------------------------------------------------
    # 상태 전이
    # ------------------------------------------------------------------
    def _transition(self, new_status: SessionStatus) -> None:
        if new_status not in ALLOWED_TRANSITIONS[self.status]:
            raise ValueError(
                f"Cannot move session {self.session_id} from {self.status.value} to {new_status.value}"
            )
        self.status = new_status

    def ensure_writable(self, now: datetime) -> None:
        """autosave/submit 공통 가드. 비활성 상태면 즉시 실패 (대기 없음)."""
        if self.status in GRADABLE_STATUSES:
            if self.submit_reason == SubmitReason.DEADLINE:
                raise SessionExpired(DEADLINE_SUBMITTED_MESSAGE)
            raise AlreadySubmitted()
        if self.status == SessionStatus.EXPIRED:
            raise SessionExpired()
        if now > self.deadline:
            raise SessionExpired()

    def record_answer(
        self,
        question_id: str,
        value: Any,
        time_delta_seconds: float,
        now: datetime,
    ) -> AnswerRecord:
        self.ensure_writable(now)
        record = self.answers.get(question_id)
        if record is None:
            record = AnswerRecord(question_id=question_id)
            self.answers[question_id] = record
        record.apply_save(value, time_delta_seconds, now)
        self.last_activity_at = now
        return record

    def submit(self, now: datetime, reason: SubmitReason = SubmitReason.STUDENT) -> None:
        if reason == SubmitReason.STUDENT:
            self.ensure_writable(now)
        elif self.status != SessionStatus.ACTIVE:
            raise AlreadySubmitted()
        self._transition(SessionStatus.SUBMITTED)
        self.submitted_at = now
        self.submit_reason = reason
        self.last_activity_at = now

    def expire(self, now: datetime) -> None:
        self._transition(SessionStatus.EXPIRED)
        self.expired_at = now

    def mark_graded(self, now: datetime, graded_by: Optional[str] = None) -> None:
        if self.status == SessionStatus.SUBMITTED:
            self._transition(SessionStatus.GRADED)
        self.graded_at = now
        self.graded_by = graded_by

    def recompute_scores(self) -> None:
        """final = 문항별 (manual 있으면 manual, 없으면 auto) 합."""
        self.auto_score = float(sum(a.auto_score for a in self.answers.values()))
        self.manual_score = float(
            sum(a.manual_score for a in self.answers.values() if a.manual_score is not None)
        )
        self.final_score = float(sum(a.effective_score for a in self.answers.values()))
