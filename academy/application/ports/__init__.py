from academy.application.ports.unit_of_work import UnitOfWork
from academy.application.ports.repositories import ExamSessionRepository
from academy.application.ports.exam_definitions import (
    ExamDefinitionNotFound,
    ExamDefinitionProvider,
)
from academy.application.ports.locks import SessionLockPort
from academy.application.ports.passwords import PasswordVerifier

__all__ = [
    "UnitOfWork",
    "ExamSessionRepository",
    "ExamDefinitionNotFound",
    "ExamDefinitionProvider",
    "SessionLockPort",
    "PasswordVerifier",
]
