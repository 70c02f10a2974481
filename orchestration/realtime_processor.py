"""
Real-time event processor.

Fast path run once per inbound event:
1. Under the shared lock: append the event to both collectors and snapshot
   the rolling buffers
2. Outside the lock: run the priority subset of each family
   (execute_realtime), compute risk/opportunity and recommendations
3. Under the lock: publish the latest result and enqueue
   - an IMMEDIATE intervention when risk > 0.7 or any risk indicator > 0.8
   - a MEDIUM optimization when opportunity > 0.7

The fast path never waits on a periodic pass; the lock is held only for
buffer append/snapshot and publication.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from analysis_core.data_models import IntegratedAnalysis, QueueItem
from analysis_core.enums import AlgorithmFamily, AnalysisMode, Priority, QueueKind
from analysis_core.exceptions import CollectorUnavailableError
from fusion.analysis_engine import AnalysisEngine
from scoring.risk_opportunity import (
    intervention_reason, optimization_reason, realtime_recommendations
)

from .queue_manager import QueueManager
from .state import SharedState

logger = logging.getLogger(__name__)


class RealtimeProcessor:
    """Runs the priority subsets per event and feeds the queue manager."""

    def __init__(
        self,
        state: SharedState,
        engine: AnalysisEngine,
        queues: QueueManager,
        config: Dict,
        on_update: Optional[Callable[[], None]] = None
    ):
        self.state = state
        self.engine = engine
        self.queues = queues
        self.config = config
        self.on_update = on_update

        thresholds = config.get('thresholds', {})
        self.risk_threshold = thresholds.get('intervention_risk', 0.7)
        self.indicator_threshold = thresholds.get('intervention_indicator', 0.8)
        self.opportunity_threshold = thresholds.get('optimization_opportunity', 0.7)
        self.budget_ms = config.get('orchestrator', {}).get('realtime', {}).get('budget_ms', 200)

    def process(self, event: Dict[str, Any]) -> Optional[IntegratedAnalysis]:
        """
        Process one event.

        Args:
            event: Inbound event dict ({type, timestamp, ...fields})

        Returns:
            Real-time IntegratedAnalysis, or None when no session is active
            or real-time analysis is disabled (the event is still buffered)
        """
        if not self.state.begin_pass():
            logger.debug("Event ignored: no active session")
            return None

        try:
            return self._process(event)
        finally:
            self.state.end_pass()

    def _process(self, event: Dict[str, Any]) -> Optional[IntegratedAnalysis]:
        started = time.perf_counter()
        unavailable: List[AlgorithmFamily] = []
        snapshots = {}

        with self.state.lock:
            session = self.state.session
            profile = dict(self.state.profile)
            for family, collector in self.state.collectors.items():
                try:
                    collector.collect(event)
                except CollectorUnavailableError as e:
                    logger.warning(f"Real-time pass degraded: {e}")
                    unavailable.append(family)
                snapshots[family] = collector.snapshot()

        if session is None or not session.config.realtime_enabled:
            return None

        data_by_family = {
            family: self.state.collectors[family].build_data(records)
            for family, records in snapshots.items()
        }

        analysis = self.engine.analyze(
            profile,
            data_by_family,
            mode=AnalysisMode.REALTIME,
            session_id=session.session_id,
            unavailable=unavailable,
        )
        analysis = analysis.derive(
            analysis_id=analysis.analysis_id,
            recommendations=analysis.recommendations + tuple(realtime_recommendations(
                analysis.risk_score, analysis.opportunity_score, self.config
            )),
        )

        with self.state.lock:
            self.state.latest_realtime = analysis
            self._emit(analysis)

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        if elapsed_ms > self.budget_ms:
            logger.warning(
                f"Real-time pass took {elapsed_ms:.0f} ms (budget {self.budget_ms} ms)"
            )
        else:
            logger.debug(
                f"Real-time pass {elapsed_ms:.1f} ms: risk={analysis.risk_score:.2f}, "
                f"opportunity={analysis.opportunity_score:.2f}"
            )

        if self.on_update is not None:
            self.on_update()

        return analysis

    def _emit(self, analysis: IntegratedAnalysis) -> None:
        reason = intervention_reason(
            analysis.risk_score,
            analysis.indicators,
            self.risk_threshold,
            self.indicator_threshold,
        )
        if reason is not None:
            self.queues.enqueue(QueueItem.create(
                QueueKind.INTERVENTION,
                Priority.IMMEDIATE,
                analysis,
                reason=reason,
                action='provide_immediate_support',
            ))

        reason = optimization_reason(analysis.opportunity_score, self.opportunity_threshold)
        if reason is not None:
            self.queues.enqueue(QueueItem.create(
                QueueKind.OPTIMIZATION,
                Priority.MEDIUM,
                analysis,
                reason=reason,
                action='increase_challenge',
            ))
