"""
시험 정의 (Exam Definition) — 순수 파이썬 (Django/ORM 미사용)

엔진 입장에서는 읽기 전용 스냅샷.
세션 생성 시점의 스냅샷을 세션에 고정 저장하고, 이후 채점/결과는 스냅샷 기준.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class QuestionType(str, Enum):
    SINGLE_SELECT = "single_select"
    MULTI_SELECT = "multi_select"
    TRUE_FALSE = "true_false"
    SHORT_TEXT = "short_text"
    LONG_TEXT = "long_text"

    @property
    def is_objective(self) -> bool:
        return self in OBJECTIVE_TYPES

    @property
    def has_options(self) -> bool:
        return self in (QuestionType.SINGLE_SELECT, QuestionType.MULTI_SELECT)


# 자동채점 대상
OBJECTIVE_TYPES = frozenset(
    {QuestionType.SINGLE_SELECT, QuestionType.MULTI_SELECT, QuestionType.TRUE_FALSE}
)

TRUE_FALSE_OPTIONS = ("true", "false")


class ResultVisibility(str, Enum):
    """학생에게 결과 상세를 언제 보여줄지."""
    IMMEDIATE = "immediate"          # 제출 직후 (자동채점 결과 포함)
    AFTER_GRADING = "after_grading"  # 채점 완료(Graded) 이후에만


class InvalidExamDefinition(ValueError):
    """문항/시험 정의 규칙 위반."""
    pass


def normalize_choice(value: Any) -> str:
    return str(value if value is not None else "").strip().casefold()


def normalize_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    v = normalize_choice(value)
    if v in ("true", "t", "1", "yes", "o"):
        return True
    if v in ("false", "f", "0", "no", "x"):
        return False
    return None


@dataclass(frozen=True)
class Question:
    question_id: str
    question_type: QuestionType
    text: str = ""
    options: tuple[str, ...] = ()
    correct_answer: Any = None
    points: float = 1.0
    time_limit_seconds: Optional[int] = None
    explanation: str = ""

    def __post_init__(self) -> None:
        if not self.question_id:
            raise InvalidExamDefinition("question_id is required")
        if self.points is None or float(self.points) < 0:
            raise InvalidExamDefinition(f"question {self.question_id}: points must be >= 0")

        if self.question_type.has_options:
            if not self.options:
                raise InvalidExamDefinition(
                    f"question {self.question_id}: {self.question_type.value} needs options"
                )
            option_keys = {normalize_choice(o) for o in self.options}

            if self.question_type == QuestionType.SINGLE_SELECT:
                if normalize_choice(self.correct_answer) not in option_keys:
                    raise InvalidExamDefinition(
                        f"question {self.question_id}: correct answer is not an option"
                    )
            else:
                correct = self.correct_answer
                if not isinstance(correct, (list, tuple, set, frozenset)) or not correct:
                    raise InvalidExamDefinition(
                        f"question {self.question_id}: multi_select correct answer must be a non-empty list"
                    )
                if not {normalize_choice(c) for c in correct}.issubset(option_keys):
                    raise InvalidExamDefinition(
                        f"question {self.question_id}: correct answers must be a subset of options"
                    )

        if self.question_type == QuestionType.TRUE_FALSE:
            if normalize_bool(self.correct_answer) is None:
                raise InvalidExamDefinition(
                    f"question {self.question_id}: true_false correct answer must be a boolean"
                )

    @property
    def is_objective(self) -> bool:
        return self.question_type.is_objective

    def display_options(self) -> tuple[str, ...]:
        if self.question_type == QuestionType.TRUE_FALSE and not self.options:
            return TRUE_FALSE_OPTIONS
        return self.options

    def to_snapshot(self) -> dict[str, Any]:
        correct = self.correct_answer
        if isinstance(correct, (tuple, set, frozenset)):
            correct = list(correct)
        return {
            "question_id": self.question_id,
            "question_type": self.question_type.value,
            "text": self.text,
            "options": list(self.options),
            "correct_answer": correct,
            "points": float(self.points),
            "time_limit_seconds": self.time_limit_seconds,
            "explanation": self.explanation,
        }

    def to_public(self) -> dict[str, Any]:
        """학생에게 내려줄 형태 (정답/해설 제거)."""
        return {
            "question_id": self.question_id,
            "question_type": self.question_type.value,
            "text": self.text,
            "options": list(self.display_options()),
            "points": float(self.points),
            "time_limit_seconds": self.time_limit_seconds,
        }

    @classmethod
    def from_snapshot(cls, data: dict[str, Any]) -> "Question":
        return cls(
            question_id=str(data["question_id"]),
            question_type=QuestionType(data["question_type"]),
            text=data.get("text") or "",
            options=tuple(data.get("options") or ()),
            correct_answer=data.get("correct_answer"),
            points=float(data.get("points") or 0.0),
            time_limit_seconds=data.get("time_limit_seconds"),
            explanation=data.get("explanation") or "",
        )


@dataclass(frozen=True)
class ExamDefinition:
    """
    Exam Definition Provider가 돌려주는 불변 스냅샷.

    - open_at/close_at: 응시 가능 창
    - duration_seconds: 1회 응시 제한 시간
    - max_attempts: None이면 무제한
    """
    exam_id: str
    title: str
    questions: tuple[Question, ...]
    duration_seconds: int
    open_at: Optional[datetime] = None
    close_at: Optional[datetime] = None
    description: str = ""
    creator_id: Optional[str] = None
    is_published: bool = True
    auto_submit: bool = True
    shuffle_questions: bool = False
    result_visibility: ResultVisibility = ResultVisibility.AFTER_GRADING
    password_hash: str = ""
    max_attempts: Optional[int] = 1
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if int(self.duration_seconds) <= 0:
            raise InvalidExamDefinition("duration must be positive")
        if self.open_at and self.close_at and self.close_at < self.open_at:
            raise InvalidExamDefinition("close_at is before open_at")
        seen: set[str] = set()
        for q in self.questions:
            if q.question_id in seen:
                raise InvalidExamDefinition(f"duplicate question id {q.question_id}")
            seen.add(q.question_id)

    @property
    def max_points(self) -> float:
        return float(sum(q.points for q in self.questions))

    @property
    def has_subjective(self) -> bool:
        return any(not q.is_objective for q in self.questions)

    def question(self, question_id: str) -> Optional[Question]:
        for q in self.questions:
            if q.question_id == question_id:
                return q
        return None

    def is_open(self, now: datetime) -> bool:
        if self.open_at and now < self.open_at:
            return False
        if self.close_at and now > self.close_at:
            return False
        return True

    def to_snapshot(self) -> dict[str, Any]:
        """세션에 고정 저장되는 스냅샷 (password_hash 제외)."""
        return {
            "exam_id": self.exam_id,
            "title": self.title,
            "description": self.description,
            "creator_id": self.creator_id,
            "duration_seconds": int(self.duration_seconds),
            "open_at": self.open_at.isoformat() if self.open_at else None,
            "close_at": self.close_at.isoformat() if self.close_at else None,
            "auto_submit": self.auto_submit,
            "shuffle_questions": self.shuffle_questions,
            "result_visibility": self.result_visibility.value,
            "max_attempts": self.max_attempts,
            "questions": [q.to_snapshot() for q in self.questions],
        }

    @classmethod
    def from_snapshot(cls, data: dict[str, Any]) -> "ExamDefinition":
        def _dt(v):
            return datetime.fromisoformat(v) if v else None

        return cls(
            exam_id=str(data["exam_id"]),
            title=data.get("title") or "",
            description=data.get("description") or "",
            creator_id=data.get("creator_id"),
            questions=tuple(Question.from_snapshot(q) for q in data.get("questions") or ()),
            duration_seconds=int(data["duration_seconds"]),
            open_at=_dt(data.get("open_at")),
            close_at=_dt(data.get("close_at")),
            auto_submit=bool(data.get("auto_submit", True)),
            shuffle_questions=bool(data.get("shuffle_questions", False)),
            result_visibility=ResultVisibility(
                data.get("result_visibility") or ResultVisibility.AFTER_GRADING.value
            ),
            max_attempts=data.get("max_attempts", 1),
        )
