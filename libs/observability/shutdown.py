"""
Graceful Shutdown 유틸리티

SIGTERM, SIGINT 신호를 받으면 종료 플래그만 세우고,
루프는 현재 작업을 끝낸 뒤 스스로 빠져나온다.
"""

import logging
import signal
import threading

logger = logging.getLogger(__name__)

_shutdown_event = threading.Event()


def is_shutdown_requested() -> bool:
    """종료 요청 여부 확인"""
    return _shutdown_event.is_set()


def wait_for_shutdown(timeout: float) -> bool:
    """timeout 동안 대기. 도중에 종료 요청 오면 즉시 True."""
    return _shutdown_event.wait(timeout)


def request_shutdown(reason: str = "manual") -> None:
    if _shutdown_event.is_set():
        return
    logger.info("Shutdown requested (%s), finishing current pass...", reason)
    _shutdown_event.set()


def reset_shutdown_state() -> None:
    """테스트용"""
    _shutdown_event.clear()


def _signal_handler(signum, frame):
    request_shutdown(signal.Signals(signum).name)


def setup_graceful_shutdown() -> None:
    """Graceful shutdown 설정 (메인 스레드에서만 호출 가능)"""
    signal.signal(signal.SIGTERM, _signal_handler)
    signal.signal(signal.SIGINT, _signal_handler)
    logger.info("Graceful shutdown handlers registered")
