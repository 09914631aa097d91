"""
Exam Session Use Cases — 포트만 사용 (Django/redis 미사용)

외부 진입점:
  authenticate / save_answer / submit / manual_grade / get_result
  + check_availability, get_session_state, list_exam_sessions, list_my_results
  + sweep_overdue_sessions, retry_auto_grade (백그라운드)
"""
from academy.application.use_cases.exam_session.authenticate import (
    AuthenticatedSession,
    authenticate,
)
from academy.application.use_cases.exam_session.context import SessionContext
from academy.application.use_cases.exam_session.deadline import (
    SweepReport,
    enforce_deadline,
    is_acceptable,
    sweep_overdue_sessions,
)
from academy.application.use_cases.exam_session.grading import (
    ManualGradeOutcome,
    manual_grade,
    retry_auto_grade,
)
from academy.application.use_cases.exam_session.results import (
    ExamAvailability,
    SessionState,
    check_availability,
    get_result,
    get_session_state,
    list_exam_sessions,
    list_my_results,
)
from academy.application.use_cases.exam_session.save_answer import save_answer
from academy.application.use_cases.exam_session.submit import submit

__all__ = [
    "AuthenticatedSession",
    "ExamAvailability",
    "ManualGradeOutcome",
    "SessionContext",
    "SessionState",
    "SweepReport",
    "authenticate",
    "check_availability",
    "enforce_deadline",
    "get_result",
    "get_session_state",
    "is_acceptable",
    "list_exam_sessions",
    "list_my_results",
    "manual_grade",
    "retry_auto_grade",
    "save_answer",
    "submit",
    "sweep_overdue_sessions",
]
