"""
Periodic aggregator.

Slow path driven by a daemon timer thread (or by calling `tick()` directly):
1. Under the lock: drain records collected since the previous tick; skip
   the tick when there are none
2. Outside the lock: full pass over every unit of both families
3. Under the lock: re-check the session token (drop the result if the
   session ended meanwhile), append to history and recompute trends
4. Persist the analysis and enqueue
   - a HIGH intervention when risk > 0.7
   - a LOW optimization when opportunity > 0.7

The timer waits on the session's cancellation token, so no tick fires after
the session ends.
"""

import logging
import threading
from typing import Callable, Dict, Optional

from analysis_core.data_models import IntegratedAnalysis, QueueItem
from analysis_core.enums import AnalysisMode, Priority, QueueKind
from analysis_core.interfaces import AnalysisSink
from fusion.analysis_engine import AnalysisEngine
from scoring.risk_opportunity import intervention_reason, optimization_reason
from scoring.trends import compute_trend_report

from .queue_manager import QueueManager
from .state import CancellationToken, SharedState

logger = logging.getLogger(__name__)


class PeriodicAggregator:
    """Fixed-cadence full passes over the metrics buffered since the last tick."""

    def __init__(
        self,
        state: SharedState,
        engine: AnalysisEngine,
        queues: QueueManager,
        sink: AnalysisSink,
        config: Dict,
        on_update: Optional[Callable[[], None]] = None
    ):
        self.state = state
        self.engine = engine
        self.queues = queues
        self.sink = sink
        self.config = config
        self.on_update = on_update

        thresholds = config.get('thresholds', {})
        self.risk_threshold = thresholds.get('intervention_risk', 0.7)
        self.opportunity_threshold = thresholds.get('optimization_opportunity', 0.7)

        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, token: CancellationToken, interval_ms: int) -> None:
        """Arm the timer thread for the current session (no-op for interval <= 0)."""
        if interval_ms <= 0:
            logger.info("Periodic aggregation disabled (interval <= 0)")
            return

        interval = interval_ms / 1000.0
        self._thread = threading.Thread(
            target=self._run,
            args=(token, interval),
            name="periodic-aggregator",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Periodic aggregator started (every {interval_ms} ms)")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Join the timer thread; the caller cancels the token first."""
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("Periodic aggregator thread did not stop in time")

    def _run(self, token: CancellationToken, interval: float) -> None:
        while not token.wait(interval):
            try:
                self.tick(token)
            except Exception as e:
                logger.exception(f"Periodic tick failed: {e}")

    def tick(self, token: Optional[CancellationToken] = None) -> Optional[IntegratedAnalysis]:
        """
        Run one periodic pass.

        Args:
            token: Session token to honor (default: the current session's)

        Returns:
            The appended analysis, or None when skipped or dropped
        """
        with self.state.lock:
            if token is None:
                token = self.state.token
            if token is None or token.cancelled or not self.state.is_active:
                return None

            session = self.state.session
            profile = dict(self.state.profile)
            pending = {
                family: collector.drain_pending()
                for family, collector in self.state.collectors.items()
            }

        if not any(pending.values()):
            logger.debug("Periodic tick skipped: no new records")
            return None

        data_by_family = {
            family: self.state.collectors[family].build_data(records)
            for family, records in pending.items()
        }
        analysis = self.engine.analyze(
            profile,
            data_by_family,
            mode=AnalysisMode.PERIODIC,
            session_id=session.session_id,
        )

        with self.state.lock:
            if token.cancelled or self.state.session is not session:
                logger.info("Periodic result dropped: session ended during the pass")
                return None
            self.state.history.append(analysis)
            self.state.trends = compute_trend_report(self.state.history, self.config)
            history_len = len(self.state.history)

        logger.info(
            f"Periodic pass #{history_len}: overall={analysis.overall_score:.2f}, "
            f"risk={analysis.risk_score:.2f}, opportunity={analysis.opportunity_score:.2f}"
        )

        self._persist(session, analysis)
        self._emit(analysis)

        if self.on_update is not None:
            self.on_update()

        return analysis

    def _persist(self, session, analysis: IntegratedAnalysis) -> None:
        try:
            self.sink.write_analysis(session, analysis)
        except Exception as e:
            logger.error(f"Failed to persist periodic analysis: {e}")

    def _emit(self, analysis: IntegratedAnalysis) -> None:
        reason = intervention_reason(
            analysis.risk_score, analysis.indicators, self.risk_threshold, indicator_threshold=None
        )
        if reason is not None:
            self.queues.enqueue(QueueItem.create(
                QueueKind.INTERVENTION,
                Priority.HIGH,
                analysis,
                reason=reason,
                action='schedule_support',
            ))

        reason = optimization_reason(analysis.opportunity_score, self.opportunity_threshold)
        if reason is not None:
            self.queues.enqueue(QueueItem.create(
                QueueKind.OPTIMIZATION,
                Priority.LOW,
                analysis,
                reason=reason,
                action='adjust_learning_path',
            ))
