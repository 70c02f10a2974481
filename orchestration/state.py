"""
Shared session state and per-session cancellation.

One re-entrant lock guards the collectors, the current session, analysis
history and the latest real-time result. Passes snapshot under the lock and
compute outside it. In-flight real-time passes are counted so session end
can wait for them through a Condition bound to the same lock.
"""

import threading
from typing import Any, Dict, List, Optional

from analysis_core.data_models import IntegratedAnalysis, Session, TrendReport
from analysis_core.enums import AlgorithmFamily, LifecycleState


class CancellationToken:
    """Per-session stop signal shared by the timer thread and event passes."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block up to `timeout` seconds; True once cancelled."""
        return self._event.wait(timeout)


class SharedState:
    """Mutable orchestrator state; every access holds `lock`."""

    def __init__(self, collectors: Dict[AlgorithmFamily, Any]):
        self.lock = threading.RLock()
        self._idle = threading.Condition(self.lock)
        self.collectors = collectors
        self.lifecycle = LifecycleState.IDLE
        self.session: Optional[Session] = None
        self.token: Optional[CancellationToken] = None
        self.profile: Dict[str, Any] = {}
        self.history: List[IntegratedAnalysis] = []
        self.trends = TrendReport()
        self.latest_realtime: Optional[IntegratedAnalysis] = None
        self.in_flight = 0

    @property
    def is_active(self) -> bool:
        with self.lock:
            return (
                self.lifecycle == LifecycleState.ACTIVE
                and self.token is not None
                and not self.token.cancelled
            )

    def begin_pass(self) -> bool:
        """Register an in-flight real-time pass; False if no session accepts it."""
        with self.lock:
            if not self.is_active:
                return False
            self.in_flight += 1
            return True

    def end_pass(self) -> None:
        with self.lock:
            self.in_flight -= 1
            if self.in_flight <= 0:
                self.in_flight = 0
                self._idle.notify_all()

    def wait_for_passes(self, timeout: Optional[float] = None) -> bool:
        """Wait until no real-time pass is in flight."""
        with self.lock:
            return self._idle.wait_for(lambda: self.in_flight == 0, timeout)
