"""
자동채점 규칙 — 순수 파이썬

- single_select: 정규화 후 일치
- multi_select: 집합 완전 일치 (부분점수 없음, 부분점수는 수동 override로만)
- true_false: bool 정규화 후 일치
- short_text/long_text: 자동채점 안 함 (pending)
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from academy.domain.exam_session.definition import (
    ExamDefinition,
    Question,
    QuestionType,
    normalize_bool,
    normalize_choice,
)
from academy.domain.exam_session.entities import AnswerRecord, ExamSession, GradeOutcome
from academy.domain.exam_session.errors import InvalidScore


def _as_choice_set(value: Any) -> Optional[frozenset[str]]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(normalize_choice(v) for v in value)
    return None


def grade_objective(question: Question, answer: Any) -> tuple[GradeOutcome, float]:
    """
    객관식 1문항 채점.
    Returns: (outcome, awarded_points)
    """
    if not question.is_objective:
        return GradeOutcome.PENDING, 0.0

    if answer is None:
        return GradeOutcome.INCORRECT, 0.0

    if question.question_type == QuestionType.SINGLE_SELECT:
        ans = normalize_choice(answer)
        is_correct = ans != "" and ans == normalize_choice(question.correct_answer)
    elif question.question_type == QuestionType.MULTI_SELECT:
        ans_set = _as_choice_set(answer)
        is_correct = bool(ans_set) and ans_set == _as_choice_set(question.correct_answer)
    else:
        ans_bool = normalize_bool(answer)
        is_correct = ans_bool is not None and ans_bool == normalize_bool(question.correct_answer)

    if is_correct:
        return GradeOutcome.CORRECT, float(question.points)
    return GradeOutcome.INCORRECT, 0.0


def clamp_score(question: Question, raw: Any) -> tuple[float, bool]:
    """
    수동 점수를 [0, points]로 clamp.
    Returns: (score, adjusted)
    """
    try:
        score = float(raw)
    except (TypeError, ValueError):
        raise InvalidScore(f"score for question {question.question_id} is not a number")
    if not math.isfinite(score):
        raise InvalidScore(f"score for question {question.question_id} is not finite")

    clamped = min(max(score, 0.0), float(question.points))
    return clamped, clamped != score


def auto_grade_session(session: ExamSession, definition: ExamDefinition) -> float:
    """
    제출 시점 자동채점.

    - 정의의 모든 문항에 대해 AnswerRecord 보장 (미응답 객관식 = incorrect)
    - 주관식은 pending 유지, 기존 manual_score는 건드리지 않음
    - 재실행해도 같은 결과 (멱등)

    Returns: auto_score
    """
    for question in definition.questions:
        record = session.answers.get(question.question_id)
        if record is None:
            record = AnswerRecord(question_id=question.question_id)
            session.answers[question.question_id] = record

        outcome, awarded = grade_objective(question, record.value)
        record.outcome = outcome
        record.auto_score = awarded

    session.auto_graded = True
    session.recompute_scores()
    return session.auto_score


@dataclass(frozen=True)
class ManualScore:
    question_id: str
    score: Any
    feedback: Optional[str] = None


@dataclass(frozen=True)
class ScoreAdjustment:
    """clamp로 보정된 점수 기록 (InvalidScore: 복구 가능한 정규화)."""
    question_id: str
    requested: float
    applied: float


def apply_manual_scores(
    session: ExamSession,
    definition: ExamDefinition,
    scores: Iterable[ManualScore],
) -> list[ScoreAdjustment]:
    """
    수동 점수 병합. 같은 입력을 두 번 적용해도 같은 상태 (덮어쓰기, 누적 아님).
    모르는 문항/숫자 아닌 점수는 전체 거부 (부분 적용 없음).
    """
    resolved: list[tuple[ManualScore, float, bool]] = []
    for item in scores:
        question = definition.question(str(item.question_id))
        if question is None:
            raise InvalidScore(f"unknown question {item.question_id}")
        applied, adjusted = clamp_score(question, item.score)
        resolved.append((item, applied, adjusted))

    adjustments: list[ScoreAdjustment] = []
    for item, applied, adjusted in resolved:
        qid = str(item.question_id)
        record = session.answers.get(qid)
        if record is None:
            record = AnswerRecord(question_id=qid)
            session.answers[qid] = record
        record.manual_score = applied
        if item.feedback is not None:
            record.feedback = item.feedback
        if adjusted:
            adjustments.append(
                ScoreAdjustment(question_id=qid, requested=float(item.score), applied=applied)
            )

    session.recompute_scores()
    return adjustments
