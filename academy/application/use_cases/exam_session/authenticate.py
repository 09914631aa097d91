"""
Session Authenticator — 시험 입장 (Django 미사용)

검증 순서: 존재 → 공개 여부 → 응시 창 → 비밀번호.
ACTIVE 세션이 있으면 그대로 반환 (재접속/재시도 멱등), 없으면 새로 생성.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from academy.application.use_cases.exam_session.context import (
    SessionContext,
    load_definition,
    session_scope,
    start_lock_key,
    utcnow,
)
from academy.application.use_cases.exam_session.deadline import enforce_deadline_locked
from academy.domain.exam_session.definition import ExamDefinition
from academy.domain.exam_session.entities import ExamSession
from academy.domain.exam_session.errors import (
    AttemptsExhausted,
    ConcurrentModification,
    ExamNotPublished,
    InvalidCredentials,
    WindowClosed,
)
from academy.domain.shared.ids import generate_session_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedSession:
    session: ExamSession
    definition: ExamDefinition
    resumed: bool

    def public_questions(self) -> list[dict[str, Any]]:
        """세션 문항 순서대로, 정답/해설 제거."""
        by_id = {q.question_id: q for q in self.definition.questions}
        return [by_id[qid].to_public() for qid in self.session.question_order if qid in by_id]


def authenticate(
    ctx: SessionContext,
    exam_id: str,
    student_id: str,
    password: Optional[str],
    now: Optional[datetime] = None,
) -> AuthenticatedSession:
    now = utcnow(now)
    student_id = str(student_id)
    definition = load_definition(ctx, exam_id)

    if not definition.is_published:
        raise ExamNotPublished()
    if not definition.is_open(now):
        raise WindowClosed()
    if definition.password_hash:
        if not ctx.passwords.verify(password or "", definition.password_hash):
            logger.info("AUTH_REJECTED exam_id=%s student_id=%s", definition.exam_id, student_id)
            raise InvalidCredentials()

    with session_scope(ctx, start_lock_key(definition.exam_id, student_id)):
        with ctx.uow_factory() as uow:
            active = uow.exam_sessions.find_active(definition.exam_id, student_id)

        if active is not None and active.is_overdue(now):
            enforce_deadline_locked(ctx, active.session_id, now=now)

        try:
            with ctx.uow_factory() as uow:
                repo = uow.exam_sessions
                active = repo.find_active(definition.exam_id, student_id)
                if active is not None:
                    return _resumed(active, definition)

                if definition.max_attempts is not None:
                    attempts = repo.count_attempts(definition.exam_id, student_id)
                    if attempts >= int(definition.max_attempts):
                        raise AttemptsExhausted()

                session = ExamSession.start(
                    session_id=generate_session_id(),
                    definition=definition,
                    student_id=student_id,
                    now=now,
                )
                repo.add(session)
        except ConcurrentModification:
            # 유일 ACTIVE 제약 충돌: 다른 요청이 먼저 만든 세션을 다시 읽어 돌려준다 (1회)
            with ctx.uow_factory() as uow:
                active = uow.exam_sessions.find_active(definition.exam_id, student_id)
            if active is None:
                raise
            return _resumed(active, definition)

    logger.info(
        "SESSION_CREATED session_id=%s exam_id=%s student_id=%s deadline=%s",
        session.session_id, session.exam_id, student_id, session.deadline.isoformat(),
    )
    return AuthenticatedSession(session=session, definition=definition, resumed=False)


def _resumed(active: ExamSession, definition: ExamDefinition) -> AuthenticatedSession:
    logger.info(
        "SESSION_RESUMED session_id=%s exam_id=%s student_id=%s",
        active.session_id, active.exam_id, active.student_id,
    )
    return AuthenticatedSession(
        session=active,
        definition=active.snapshot_definition() or definition,
        resumed=True,
    )
