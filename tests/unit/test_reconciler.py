"""
Unit tests for the polling reconciler
"""
import threading
import pytest

from hibernator.core.errors import RemoteUnavailable
from hibernator.services.reconciler import Reconciler, WaitOutcome


class TestReconciler:
    """Tests for wait_until"""

    def test_ready_immediately(self, reconciler, clock):
        assert reconciler.wait_until(lambda: True, 10, 60) == WaitOutcome.READY
        assert clock.sleeps == []

    def test_ready_after_polls(self, reconciler, clock):
        answers = iter([False, False, True])
        assert reconciler.wait_until(lambda: next(answers), 10, 60) == WaitOutcome.READY
        assert clock.sleeps == [10, 10]

    def test_timeout(self, reconciler, clock):
        """Last sleep is cut short so max_wait is never exceeded"""
        assert reconciler.wait_until(lambda: False, 10, 25) == WaitOutcome.TIMED_OUT
        assert clock.sleeps == [10, 10, 5]
        assert clock.now == 25

    def test_predicate_evaluated_each_poll(self, reconciler):
        calls = []

        def predicate():
            calls.append(1)
            return len(calls) == 4

        reconciler.wait_until(predicate, 1, 100)
        assert len(calls) == 4

    def test_gateway_error_counts_as_not_ready(self, reconciler):
        answers = iter([RemoteUnavailable("demo"), True])

        def predicate():
            answer = next(answers)
            if isinstance(answer, Exception):
                raise answer
            return answer

        assert reconciler.wait_until(predicate, 10, 60) == WaitOutcome.READY

    def test_other_errors_propagate(self, reconciler):
        def predicate():
            raise KeyError("boom")

        with pytest.raises(KeyError):
            reconciler.wait_until(predicate, 10, 60)

    def test_cancel_before_wait(self, reconciler):
        reconciler.cancel()
        called = []
        outcome = reconciler.wait_until(lambda: called.append(1) or True, 10, 60)
        assert outcome == WaitOutcome.CANCELLED
        assert called == []
        assert reconciler.cancelled

    def test_cancel_during_wait(self, reconciler):
        def predicate():
            reconciler.cancel()
            return False

        assert reconciler.wait_until(predicate, 10, 60) == WaitOutcome.CANCELLED

    def test_on_poll_receives_elapsed(self, reconciler):
        elapsed = []
        reconciler.wait_until(lambda: False, 10, 30, on_poll=elapsed.append)
        assert elapsed == [0, 10, 20]

    @pytest.mark.parametrize("interval", [0, -5])
    def test_invalid_interval(self, reconciler, interval):
        with pytest.raises(ValueError):
            reconciler.wait_until(lambda: True, interval, 60)

    def test_default_sleep_wakes_on_cancel(self):
        """Without an injected sleep, waiting stops as soon as the event is set"""
        event = threading.Event()
        reconciler = Reconciler(cancel_event=event)
        timer = threading.Timer(0.05, event.set)
        timer.start()
        try:
            outcome = reconciler.wait_until(lambda: False, 30, 60)
        finally:
            timer.cancel()
        assert outcome == WaitOutcome.CANCELLED
