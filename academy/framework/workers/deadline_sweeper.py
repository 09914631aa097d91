"""
Deadline Sweeper — Hexagonal 프레임워크 계층 (thin)

- Use Case(sweep_overdue_sessions)만 호출.
- 주기마다 마감 지난 ACTIVE 세션을 제출/만료 처리 (클라이언트 접속 여부와 무관).
- SIGTERM/SIGINT 시 현재 pass 마치고 종료.
"""
from __future__ import annotations

import logging
import os
import sys
from typing import Callable, Optional

from academy.application.use_cases.exam_session import SessionContext, sweep_overdue_sessions
from libs.observability.shutdown import (
    is_shutdown_requested,
    setup_graceful_shutdown,
    wait_for_shutdown,
)

logger = logging.getLogger("academy.deadline_sweeper")

SWEEP_INTERVAL_SECONDS = float(os.getenv("EXAM_SESSION_SWEEP_INTERVAL_SECONDS", "30"))
SWEEP_BATCH_SIZE = int(os.getenv("EXAM_SESSION_SWEEP_BATCH_SIZE", "200"))
MAX_CONSECUTIVE_ERRORS = 10


def run_deadline_sweeper(
    context_factory: Callable[[], SessionContext],
    interval_seconds: float = SWEEP_INTERVAL_SECONDS,
    batch_size: int = SWEEP_BATCH_SIZE,
    max_passes: Optional[int] = None,
    install_signal_handlers: bool = True,
) -> int:
    """메인 루프. 0 정상 종료, 1 오류."""
    if install_signal_handlers:
        setup_graceful_shutdown()

    logger.info("DEADLINE_SWEEPER start interval=%ss batch=%s", interval_seconds, batch_size)
    consecutive_errors = 0
    passes = 0

    try:
        while not is_shutdown_requested():
            try:
                report = sweep_overdue_sessions(context_factory(), batch_size=batch_size)
                consecutive_errors = 0
            except Exception as e:
                logger.exception("DEADLINE_SWEEPER pass failed: %s", e)
                consecutive_errors += 1
                if consecutive_errors >= MAX_CONSECUTIVE_ERRORS:
                    logger.error("Too many consecutive errors (%s), exit", consecutive_errors)
                    return 1
                report = None

            passes += 1
            if max_passes is not None and passes >= max_passes:
                break

            # 배치가 꽉 찼으면 쉬지 않고 다음 pass
            if report is not None and report.scanned >= batch_size and (report.submitted or report.expired):
                continue
            if wait_for_shutdown(interval_seconds):
                break

        logger.info("DEADLINE_SWEEPER stopped passes=%s", passes)
        return 0
    finally:
        try:
            from django.db import connection
            connection.close()
        except Exception as e:
            logger.debug("DB connection close failed: %s", e)


if __name__ == "__main__":
    if os.environ.get("DJANGO_SETTINGS_MODULE"):
        import django
        django.setup()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] [DEADLINE-SWEEPER] %(message)s",
    )
    from apps.domains.exam_sessions.services.engine import get_session_context
    sys.exit(run_deadline_sweeper(get_session_context))
