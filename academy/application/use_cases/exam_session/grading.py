"""
Grading Engine — 수동 채점 / 자동채점 재시도 (Django 미사용)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from academy.application.use_cases.exam_session.context import (
    SessionContext,
    definition_for,
    notify_graded,
    session_lock_key,
    session_scope,
    utcnow,
)
from academy.application.use_cases.exam_session.deadline import finalize_auto_grading
from academy.domain.exam_session.entities import GRADABLE_STATUSES, SessionStatus, Viewer
from academy.domain.exam_session.errors import (
    NotPermitted,
    SessionNotFound,
    SessionNotGradable,
)
from academy.domain.exam_session.grading import (
    ManualScore,
    ScoreAdjustment,
    apply_manual_scores,
    auto_grade_session,
)
from academy.domain.exam_session.result import SessionResult, can_manage_exam, materialize_result

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManualGradeOutcome:
    result: SessionResult
    adjustments: list[ScoreAdjustment]


def manual_grade(
    ctx: SessionContext,
    session_id: str,
    scores: Iterable[ManualScore],
    overall_feedback: Optional[str],
    grader: Viewer,
    now: Optional[datetime] = None,
) -> ManualGradeOutcome:
    """
    SUBMITTED/GRADED만 허용 (재채점 가능).
    점수는 문항별 덮어쓰기라 같은 입력을 두 번 적용해도 결과 동일.
    범위 밖 점수는 clamp 후 adjustments로 보고.
    """
    now = utcnow(now)
    scores = list(scores)

    with session_scope(ctx, session_lock_key(session_id)):
        with ctx.uow_factory() as uow:
            repo = uow.exam_sessions
            session = repo.get_for_update(session_id)
            if session is None:
                raise SessionNotFound()

            definition = definition_for(ctx, session)
            if not can_manage_exam(definition, grader):
                raise NotPermitted()
            if session.status not in GRADABLE_STATUSES:
                raise SessionNotGradable()

            if not session.auto_graded:
                # 제출 시 자동채점이 보류된 세션
                auto_grade_session(session, definition)

            adjustments = apply_manual_scores(session, definition, scores)
            if overall_feedback is not None:
                session.feedback = overall_feedback
            session.mark_graded(now, graded_by=str(grader.user_id))
            repo.save(session)

    for adj in adjustments:
        logger.info(
            "SCORE_CLAMPED session_id=%s question_id=%s requested=%s applied=%s",
            session_id, adj.question_id, adj.requested, adj.applied,
        )
    logger.info(
        "SESSION_GRADED session_id=%s final_score=%s graded_by=%s",
        session_id, session.final_score, grader.user_id,
    )
    notify_graded(ctx, session)
    return ManualGradeOutcome(
        result=materialize_result(session, definition, grader),
        adjustments=adjustments,
    )


def retry_auto_grade(
    ctx: SessionContext,
    session_id: str,
    now: Optional[datetime] = None,
) -> bool:
    """
    제출 시 보류된 자동채점 재시도.
    Returns: 이번 호출에서 채점했으면 True (이미 채점됨/대상 아님은 False)
    Raises: DefinitionUnavailable (호출부 재시도 대상)
    """
    now = utcnow(now)
    with session_scope(ctx, session_lock_key(session_id)):
        with ctx.uow_factory() as uow:
            repo = uow.exam_sessions
            session = repo.get_for_update(session_id)
            if session is None:
                raise SessionNotFound()
            if session.status != SessionStatus.SUBMITTED or session.auto_graded:
                return False

            definition = definition_for(ctx, session)
            finalize_auto_grading(session, definition, now)
            repo.save(session)

    logger.info(
        "AUTO_GRADE_RETRY_DONE session_id=%s status=%s auto_score=%s",
        session_id, session.status.value, session.auto_score,
    )
    notify_graded(ctx, session)
    return True
