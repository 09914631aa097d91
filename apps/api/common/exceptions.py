"""
DRF 예외 핸들러 — 엔진 ErrorKind → HTTP 상태

응답 형태: {"code": <ErrorKind>, "detail": <message>}
"""
import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from academy.domain.exam_session.errors import ErrorKind, ExamSessionError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.INVALID_CREDENTIALS: 403,
    ErrorKind.WINDOW_CLOSED: 403,
    ErrorKind.EXAM_NOT_PUBLISHED: 403,
    ErrorKind.NOT_PERMITTED: 403,
    ErrorKind.EXAM_NOT_FOUND: 404,
    ErrorKind.SESSION_NOT_FOUND: 404,
    ErrorKind.ATTEMPTS_EXHAUSTED: 409,
    ErrorKind.ALREADY_SUBMITTED: 409,
    ErrorKind.CONCURRENT_MODIFICATION: 409,
    ErrorKind.RESULT_NOT_AVAILABLE: 409,
    ErrorKind.NOT_GRADABLE: 409,
    ErrorKind.SESSION_EXPIRED: 410,
    ErrorKind.INVALID_SCORE: 400,
    ErrorKind.INVALID_ANSWER: 400,
    ErrorKind.DEFINITION_UNAVAILABLE: 503,
}

# 정상 흐름에서 흔한 결과 (알람 대상 아님)
_QUIET_KINDS = {ErrorKind.SESSION_EXPIRED, ErrorKind.ALREADY_SUBMITTED}


def exam_session_exception_handler(exc, context):
    if isinstance(exc, ExamSessionError):
        status_code = STATUS_BY_KIND.get(exc.kind, 400)
        view = context.get("view")
        level = logging.DEBUG if exc.kind in _QUIET_KINDS else logging.INFO
        if status_code >= 500:
            level = logging.ERROR
        logger.log(
            level,
            "EXAM_SESSION_ERROR code=%s view=%s detail=%s",
            exc.code, type(view).__name__ if view else "-", exc.message,
        )
        return Response({"code": exc.code, "detail": exc.message}, status=status_code)

    return exception_handler(exc, context)
