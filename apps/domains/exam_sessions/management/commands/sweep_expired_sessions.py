# PATH: apps/domains/exam_sessions/management/commands/sweep_expired_sessions.py
"""
마감 지난 ACTIVE 세션 처리 (autoSubmit → 제출, 아니면 응시 창 종료 후 만료).

사용:
  python manage.py sweep_expired_sessions           # 1회
  python manage.py sweep_expired_sessions --loop    # 상주 워커 (SIGTERM 시 종료)
"""
from django.conf import settings
from django.core.management.base import BaseCommand

from academy.application.use_cases.exam_session import sweep_overdue_sessions
from academy.framework.workers.deadline_sweeper import run_deadline_sweeper
from apps.domains.exam_sessions.services.engine import get_session_context


class Command(BaseCommand):
    help = "Auto-submit or expire exam sessions whose deadline has passed."

    def add_arguments(self, parser):
        parser.add_argument("--loop", action="store_true", help="Run continuously until SIGTERM/SIGINT.")
        parser.add_argument(
            "--batch-size",
            type=int,
            default=None,
            help="Max sessions per pass (default: EXAM_SESSION_SWEEP_BATCH_SIZE).",
        )

    def handle(self, *args, **options):
        batch_size = options["batch_size"] or int(settings.EXAM_SESSION_SWEEP_BATCH_SIZE)

        if options["loop"]:
            code = run_deadline_sweeper(
                get_session_context,
                interval_seconds=float(settings.EXAM_SESSION_SWEEP_INTERVAL_SECONDS),
                batch_size=batch_size,
            )
            if code:
                raise SystemExit(code)
            return

        report = sweep_overdue_sessions(get_session_context(), batch_size=batch_size)
        self.stdout.write(
            f"scanned={report.scanned} submitted={report.submitted} "
            f"expired={report.expired} busy={report.busy} failed={report.failed}"
        )
