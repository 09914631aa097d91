"""
Deadline Sweeper 루프 (framework 계층)
"""
from datetime import datetime, timedelta, timezone

import pytest

from academy.application.use_cases.exam_session import authenticate
from academy.domain.exam_session.entities import SessionStatus
from academy.framework.workers import deadline_sweeper
from libs.observability.shutdown import request_shutdown, reset_shutdown_state
from tests.fakes import make_exam


@pytest.fixture(autouse=True)
def _shutdown_state():
    reset_shutdown_state()
    yield
    reset_shutdown_state()


class TestRunDeadlineSweeper:
    def test_single_pass_enforces_overdue_sessions(self, ctx, store, definitions):
        definitions.put(make_exam(open_at=None, close_at=None))
        started = datetime.now(timezone.utc) - timedelta(hours=1)
        sid = authenticate(ctx, "exam-1", "student-1", "secret", now=started).session.session_id

        code = deadline_sweeper.run_deadline_sweeper(
            lambda: ctx, interval_seconds=0, max_passes=1, install_signal_handlers=False,
        )

        assert code == 0
        assert store.session(sid).status == SessionStatus.SUBMITTED

    def test_stops_when_shutdown_requested(self, ctx):
        request_shutdown("test")
        code = deadline_sweeper.run_deadline_sweeper(
            lambda: ctx, interval_seconds=0, install_signal_handlers=False,
        )
        assert code == 0

    def test_gives_up_after_repeated_failures(self, monkeypatch):
        monkeypatch.setattr(deadline_sweeper, "MAX_CONSECUTIVE_ERRORS", 2)

        def broken_context():
            raise RuntimeError("database unreachable")

        code = deadline_sweeper.run_deadline_sweeper(
            broken_context, interval_seconds=0, install_signal_handlers=False,
        )
        assert code == 1
