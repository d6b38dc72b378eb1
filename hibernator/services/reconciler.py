"""
Reconciler
==========

실제 클러스터 상태가 기대 조건을 만족할 때까지 폴링한다.

- predicate는 매번 게이트웨이를 새로 호출해야 한다 (폴링 간 캐시 없음)
- 대기는 threading.Event 기반이라 cancel()로 중단할 수 있다
- clock / sleep 주입으로 테스트에서 실제로 기다리지 않는다
"""
import time
import logging
import threading
from enum import Enum
from typing import Callable, Optional

from hibernator.core.errors import GatewayError

logger = logging.getLogger(__name__)


class WaitOutcome(str, Enum):
    READY = "ready"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


class Reconciler:
    """Cooperative single-threaded poller"""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Optional[Callable[[float], None]] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        self._clock = clock
        self._cancel = cancel_event or threading.Event()
        self._sleep = sleep or self._cancel.wait

    def cancel(self) -> None:
        """진행 중인 대기를 중단"""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def wait_until(
        self,
        predicate: Callable[[], bool],
        poll_interval: float,
        max_wait: float,
        on_poll: Optional[Callable[[float], None]] = None,
    ) -> WaitOutcome:
        """predicate가 참이 되거나 max_wait가 지날 때까지 폴링

        Args:
            predicate: 조건 확인 함수. GatewayError는 "아직 아님"으로 취급
            poll_interval: 확인 간격 (초, 0보다 커야 함)
            max_wait: 최대 대기 시간 (초)
            on_poll: 조건이 거짓일 때마다 경과 시간으로 호출 (진행 로그용)
        """
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")

        start = self._clock()
        while True:
            if self._cancel.is_set():
                logger.info("Wait cancelled")
                return WaitOutcome.CANCELLED

            try:
                if predicate():
                    return WaitOutcome.READY
            except GatewayError as e:
                logger.warning(f"Poll failed, will retry: {e}")

            elapsed = self._clock() - start
            if elapsed >= max_wait:
                logger.warning(f"Timed out after {elapsed:.0f}s (max {max_wait:.0f}s)")
                return WaitOutcome.TIMED_OUT

            if on_poll:
                on_poll(elapsed)

            self._sleep(min(poll_interval, max_wait - elapsed))
