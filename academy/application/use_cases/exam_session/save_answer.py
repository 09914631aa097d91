"""
Answer Autosave Channel — 답안 중간 저장 (Django 미사용)

자주 호출되는 경로: 채점/무거운 계산 없음.
값은 last-write-wins, 소요 시간은 누적 (중복/재시도 호출 허용).
"""
from __future__ import annotations

import copy
import logging
import math
from datetime import datetime
from typing import Any, Optional

from academy.application.use_cases.exam_session.context import (
    SessionContext,
    definition_for,
    notify_submitted,
    session_lock_key,
    session_scope,
    utcnow,
)
from academy.application.use_cases.exam_session.deadline import (
    enforce_deadline,
    safe_definition_for,
)
from academy.domain.exam_session.definition import ExamDefinition, Question, QuestionType
from academy.domain.exam_session.entities import AnswerRecord, SubmitReason
from academy.domain.exam_session.errors import (
    DEADLINE_SUBMITTED_MESSAGE,
    InvalidAnswer,
    NotPermitted,
    SessionExpired,
    SessionNotFound,
)

logger = logging.getLogger(__name__)

_SCALAR_TYPES = (str, int, float, bool)


def validate_answer(
    definition: ExamDefinition,
    question_id: str,
    value: Any,
    max_chars: int,
) -> Question:
    question = definition.question(question_id)
    if question is None:
        raise InvalidAnswer(f"unknown question {question_id}")
    if value is None:
        # 답안 지우기
        return question

    if question.question_type == QuestionType.MULTI_SELECT:
        if not isinstance(value, (list, tuple)):
            raise InvalidAnswer("multi_select answer must be a list")
        items = list(value)
    else:
        items = [value]

    for item in items:
        if not isinstance(item, _SCALAR_TYPES):
            raise InvalidAnswer(f"answer for question {question_id} has an invalid shape")
        if isinstance(item, str) and len(item) > max_chars:
            raise InvalidAnswer(f"answer for question {question_id} is too long")
    return question


def coerce_time_delta(time_delta_seconds: Any) -> float:
    """음수/None은 0 (누적값은 줄어들지 않는다)."""
    if time_delta_seconds is None or isinstance(time_delta_seconds, bool):
        return 0.0
    try:
        delta = float(time_delta_seconds)
    except (TypeError, ValueError):
        raise InvalidAnswer("time delta must be a number")
    if not math.isfinite(delta) or delta < 0:
        return 0.0
    return delta


def save_answer(
    ctx: SessionContext,
    session_id: str,
    question_id: str,
    value: Any,
    time_delta_seconds: Any = 0,
    student_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> AnswerRecord:
    """
    Raises:
        SessionExpired / AlreadySubmitted: 더 이상 저장 불가 ("그만 시도" 신호)
        InvalidAnswer: 모르는 문항, 잘못된 값 형태
    """
    now = utcnow(now)
    question_id = str(question_id)
    delta = coerce_time_delta(time_delta_seconds)
    deadline_reached = False

    with session_scope(ctx, session_lock_key(session_id)):
        with ctx.uow_factory() as uow:
            repo = uow.exam_sessions
            session = repo.get_for_update(session_id)
            if session is None:
                raise SessionNotFound()
            if student_id is not None and str(session.student_id) != str(student_id):
                raise NotPermitted()

            if session.is_overdue(now):
                if enforce_deadline(session, safe_definition_for(ctx, session), now) is not None:
                    repo.save(session)
                deadline_reached = True
            else:
                session.ensure_writable(now)
                validate_answer(definition_for(ctx, session), question_id, value, ctx.answer_max_chars)
                record = session.record_answer(question_id, value, delta, now)
                repo.save(session, answer_ids=[question_id])
                saved = copy.deepcopy(record)

    if deadline_reached:
        # 마감 처리는 커밋된 상태
        notify_submitted(ctx, session)
        logger.info("AUTOSAVE_REJECTED session_id=%s reason=deadline", session_id)
        if session.submit_reason == SubmitReason.DEADLINE:
            raise SessionExpired(DEADLINE_SUBMITTED_MESSAGE)
        raise SessionExpired()

    logger.debug(
        "AUTOSAVE session_id=%s question_id=%s time_spent=%s",
        session_id, question_id, saved.time_spent_seconds,
    )
    return saved
