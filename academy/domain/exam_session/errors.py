"""
Exam Session 도메인 오류 — 순수 파이썬

전송 계층(HTTP 등)과 무관한 ErrorKind 분류.
API 계층은 kind만 보고 상태 코드를 매핑한다.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    INVALID_CREDENTIALS = "InvalidCredentials"
    WINDOW_CLOSED = "WindowClosed"
    EXAM_NOT_PUBLISHED = "ExamNotPublished"
    EXAM_NOT_FOUND = "ExamNotFound"
    ATTEMPTS_EXHAUSTED = "AttemptsExhausted"
    SESSION_EXPIRED = "SessionExpired"
    ALREADY_SUBMITTED = "AlreadySubmitted"
    SESSION_NOT_FOUND = "SessionNotFound"
    CONCURRENT_MODIFICATION = "ConcurrentModification"
    INVALID_SCORE = "InvalidScore"
    INVALID_ANSWER = "InvalidAnswer"
    DEFINITION_UNAVAILABLE = "DefinitionUnavailable"
    RESULT_NOT_AVAILABLE = "ResultNotAvailable"
    NOT_GRADABLE = "NotGradable"
    NOT_PERMITTED = "NotPermitted"


class ExamSessionError(Exception):
    """Exam Session 엔진 오류 베이스."""
    kind: ErrorKind = ErrorKind.SESSION_NOT_FOUND
    default_message = "exam session error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return self.kind.value


class InvalidCredentials(ExamSessionError):
    # 어느 부분이 틀렸는지 노출하지 않는다
    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "Invalid exam credentials."


class WindowClosed(ExamSessionError):
    kind = ErrorKind.WINDOW_CLOSED
    default_message = "The exam is not available at this time."


class ExamNotPublished(ExamSessionError):
    kind = ErrorKind.EXAM_NOT_PUBLISHED
    default_message = "The exam is not published."


class ExamNotFound(ExamSessionError):
    kind = ErrorKind.EXAM_NOT_FOUND
    default_message = "Exam not found."


class AttemptsExhausted(ExamSessionError):
    kind = ErrorKind.ATTEMPTS_EXHAUSTED
    default_message = "No attempts left for this exam."


class SessionExpired(ExamSessionError):
    """마감 이후 변경 시도. 호출부는 '그만 시도'로 취급 (알람 대상 아님)."""
    kind = ErrorKind.SESSION_EXPIRED
    default_message = "The exam session has expired."


class AlreadySubmitted(ExamSessionError):
    kind = ErrorKind.ALREADY_SUBMITTED
    default_message = "The exam session was already submitted."


class SessionNotFound(ExamSessionError):
    kind = ErrorKind.SESSION_NOT_FOUND
    default_message = "Exam session not found."


class ConcurrentModification(ExamSessionError):
    """세션 락 대기 한도 초과."""
    kind = ErrorKind.CONCURRENT_MODIFICATION
    default_message = "The exam session is busy, try again."


class InvalidScore(ExamSessionError):
    """
    수동 채점 점수 오류.
    범위 밖 점수는 clamp (오류 아님), 숫자가 아니거나 모르는 문항일 때만 발생.
    """
    kind = ErrorKind.INVALID_SCORE
    default_message = "Invalid manual score."


class InvalidAnswer(ExamSessionError):
    kind = ErrorKind.INVALID_ANSWER
    default_message = "Invalid answer."


class DefinitionUnavailable(ExamSessionError):
    kind = ErrorKind.DEFINITION_UNAVAILABLE
    default_message = "Exam definition is unavailable."


class ResultNotAvailable(ExamSessionError):
    kind = ErrorKind.RESULT_NOT_AVAILABLE
    default_message = "Result is not available for an active session."


class SessionNotGradable(ExamSessionError):
    """Submitted/Graded 상태가 아닌 세션에 수동 채점 시도."""
    kind = ErrorKind.NOT_GRADABLE
    default_message = "Only submitted exam sessions can be graded."


class NotPermitted(ExamSessionError):
    kind = ErrorKind.NOT_PERMITTED
    default_message = "You are not allowed to access this exam session."


# 마감 강제 제출 시 학생에게 보이는 메시지
DEADLINE_SUBMITTED_MESSAGE = "Time expired, your answers were submitted."
