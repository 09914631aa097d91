from .exam_session import (
    AnswerSaveSerializer,
    AuthenticateSerializer,
    ManualGradeSerializer,
    ScoreItemSerializer,
    availability_payload,
    session_payload,
    session_state_payload,
)

__all__ = [
    "AnswerSaveSerializer",
    "AuthenticateSerializer",
    "ManualGradeSerializer",
    "ScoreItemSerializer",
    "availability_payload",
    "session_payload",
    "session_state_payload",
]
