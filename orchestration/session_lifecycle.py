"""
Session lifecycle state machine.

    idle ──start──> active ──end──> completed ──start──> active ...

`start` and `end` are serialized by a dedicated lifecycle lock; the shared
state lock is only taken for short critical sections so event passes keep
flowing while a transition is prepared.

End sequence:
1. Cancel the session token (new events rejected, no further ticks)
2. Join the periodic timer thread
3. Wait for in-flight real-time passes
4. Stop collectors (terminal summaries)
5. Final full pass over both families, session outcomes, trends
6. Persist the SessionReport (sink failures are logged, never raised)

The lifecycle reaches COMPLETED even when steps 4-5 raise.
"""

import logging
import random
import threading
import time
from typing import Dict, Optional

from analysis_core.data_models import Session, SessionConfig, SessionReport
from analysis_core.enums import AnalysisMode, LifecycleState, SessionStatus
from analysis_core.exceptions import InvalidStateError, NoActiveSessionError
from analysis_core.interfaces import AnalysisSink
from fusion.analysis_engine import AnalysisEngine
from fusion.registry import merge_recommendations
from scoring.session_outcomes import (
    compute_session_outcomes,
    generate_session_explanation,
    generate_session_recommendations,
)
from scoring.trends import compute_trend_report

from .periodic_aggregator import PeriodicAggregator
from .state import CancellationToken, SharedState

logger = logging.getLogger(__name__)


def generate_session_id() -> str:
    """session_<epoch-ms>_<random suffix>"""
    suffix = ''.join(random.choices('abcdefghijklmnopqrstuvwxyz0123456789', k=9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


class SessionLifecycleManager:
    """Owns Session records and drives collectors, timer and final pass."""

    def __init__(
        self,
        state: SharedState,
        engine: AnalysisEngine,
        aggregator: PeriodicAggregator,
        sink: AnalysisSink,
        config: Dict
    ):
        self.state = state
        self.engine = engine
        self.aggregator = aggregator
        self.sink = sink
        self.config = config
        self._lifecycle_lock = threading.Lock()

        # Generous upper bound for a tick in progress to finish
        self.join_timeout = max(
            5.0, config.get('orchestrator', {}).get('analysis_interval_ms', 5000) / 1000.0
        )

    @property
    def current_state(self) -> LifecycleState:
        with self.state.lock:
            return self.state.lifecycle

    def start(self, session_config: SessionConfig) -> Session:
        """
        Start a new session.

        Raises:
            InvalidStateError: A session is already active
        """
        with self._lifecycle_lock:
            with self.state.lock:
                if self.state.lifecycle == LifecycleState.ACTIVE:
                    raise InvalidStateError(
                        f"Session {self.state.session.session_id} is already active"
                    )

                session = Session(
                    session_id=session_config.session_id or generate_session_id(),
                    user_id=session_config.user_id,
                    start_time=time.time(),
                    config=session_config,
                )
                context = {
                    'activity_type': session_config.activity_type,
                    'difficulty': session_config.difficulty,
                }
                for collector in self.state.collectors.values():
                    collector.start(session.session_id, session.user_id, context)

                token = CancellationToken()
                self.state.session = session
                self.state.token = token
                self.state.history = []
                self.state.trends = compute_trend_report([], self.config)
                self.state.latest_realtime = None
                self.state.lifecycle = LifecycleState.ACTIVE

            self.aggregator.start(token, session_config.analysis_interval_ms)
            self._audit(session.session_id, "start_session", "success")

        logger.info(
            f"Session started: {session.session_id} (user={session.user_id}, "
            f"activity={session_config.activity_type}, difficulty={session_config.difficulty})"
        )
        return session

    def end(self) -> SessionReport:
        """
        End the active session and build its report.

        The lifecycle reaches COMPLETED even when the report cannot be
        built; that error is audited and re-raised.

        Raises:
            NoActiveSessionError: No session is active
        """
        with self._lifecycle_lock:
            with self.state.lock:
                if self.state.lifecycle != LifecycleState.ACTIVE:
                    raise NoActiveSessionError("No active session to end")
                session = self.state.session
                self.state.token.cancel()

            logger.info(f"Ending session {session.session_id}")

            report = None
            try:
                self.aggregator.stop(timeout=self.join_timeout)
                if not self.state.wait_for_passes(timeout=self.join_timeout):
                    logger.warning("Timed out waiting for in-flight real-time passes")

                with self.state.lock:
                    summaries = {
                        family: collector.stop()
                        for family, collector in self.state.collectors.items()
                    }
                    profile = dict(self.state.profile)
                    history = tuple(self.state.history)

                report = self._build_report(session, profile, summaries, history)
            except Exception as e:
                logger.error(f"Failed to build report for session {session.session_id}: {e}")
                self._audit(session.session_id, "end_session", "error", str(e))
                raise
            finally:
                with self.state.lock:
                    if session.end_time is None:
                        session.end_time = time.time()
                    session.status = SessionStatus.COMPLETED
                    if report is not None:
                        self.state.trends = report.trends
                    self.state.lifecycle = LifecycleState.COMPLETED

            try:
                self.sink.write_report(report)
            except Exception as e:
                logger.error(f"Failed to persist session report: {e}")
                self._audit(session.session_id, "end_session", "error", str(e))
            else:
                self._audit(session.session_id, "end_session", "success")

        logger.info(
            f"Session completed: {session.session_id} ({session.duration:.1f}s, "
            f"{len(history)} periodic analyses)"
        )
        return report

    def _build_report(
        self,
        session: Session,
        profile: Dict,
        summaries: Dict,
        history: tuple
    ) -> SessionReport:
        data_by_family = {
            family: summary.get('session_data', {})
            for family, summary in summaries.items()
        }
        final_analysis = self.engine.analyze(
            profile,
            data_by_family,
            mode=AnalysisMode.FINAL,
            session_id=session.session_id,
        )

        outcomes = compute_session_outcomes(final_analysis, history)
        recommendations = merge_recommendations([
            generate_session_recommendations(outcomes, self.config),
            final_analysis.recommendations,
        ])
        logger.info(generate_session_explanation(outcomes))

        # Session is completed before the report freezes it
        session.end_time = time.time()
        session.status = SessionStatus.COMPLETED

        return SessionReport(
            session=session,
            final_analysis=final_analysis,
            history=history,
            recommendations=tuple(recommendations),
            trends=compute_trend_report(history, self.config),
            outcomes=outcomes,
            summaries={family.value: summary for family, summary in summaries.items()},
        )

    def _audit(self, session_id: str, operation: str, status: str, details: str = "") -> None:
        try:
            self.sink.log_operation(session_id, "lifecycle", operation, status, details)
        except Exception as e:
            logger.warning(f"Audit log write failed: {e}")

    def latest_session(self) -> Optional[Session]:
        with self.state.lock:
            return self.state.session
