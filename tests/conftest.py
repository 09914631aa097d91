import pytest

from academy.adapters.cache.local_session_lock import InProcessSessionLock
from academy.application.use_cases.exam_session import SessionContext
from academy.domain.exam_session.entities import Viewer, ViewerRole
from tests.fakes import (
    FakeDefinitionProvider,
    FakePasswordVerifier,
    FakeUnitOfWork,
    InMemoryStore,
    make_exam,
)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def definitions():
    return FakeDefinitionProvider(make_exam())


@pytest.fixture
def make_ctx(store, definitions):
    def _make(**overrides):
        data = dict(
            uow_factory=lambda: FakeUnitOfWork(store),
            definitions=definitions,
            locks=InProcessSessionLock(),
            passwords=FakePasswordVerifier(),
            lock_wait_seconds=0.05,
            lock_retry_backoff_seconds=0.0,
            sleep=lambda seconds: None,
            on_grading_deferred=store.deferred.append,
            on_submitted=store.submitted.append,
            on_graded=store.graded.append,
        )
        data.update(overrides)
        return SessionContext(**data)
    return _make


@pytest.fixture
def ctx(make_ctx):
    return make_ctx()


@pytest.fixture
def student():
    return Viewer(user_id="student-1", role=ViewerRole.STUDENT)


@pytest.fixture
def other_student():
    return Viewer(user_id="student-2", role=ViewerRole.STUDENT)


@pytest.fixture
def creator():
    return Viewer(user_id="teacher-1", role=ViewerRole.CREATOR)
