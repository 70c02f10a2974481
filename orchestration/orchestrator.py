"""
Wellbeing analysis orchestrator.

Facade over the session lifecycle, the real-time processor, the periodic
aggregator and the queue manager. One active session per instance.

Usage:
    orchestrator = WellbeingOrchestrator('configs/orchestrator.yaml')
    orchestrator.initialize({'user_id': 'u1', 'baseline_performance': 0.6})
    orchestrator.start_session({'user_id': 'u1', 'activity_type': 'drawing'})
    orchestrator.process_event({'type': 'click', 'timestamp': time.time()})
    for item in orchestrator.get_queues()['interventions']:
        ...
        orchestrator.mark_intervention(item.item_id)
    report = orchestrator.end_session()
"""

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from analysis_core.data_models import (
    IntegratedAnalysis, Session, SessionConfig, SessionReport, TrendReport, to_serializable
)
from analysis_core.enums import AlgorithmFamily, LifecycleState, QueueKind
from analysis_core.exceptions import (
    InvalidStateError, NoActiveSessionError, WeightConfigurationError
)
from analysis_core.interfaces import AnalysisSink
from data_collectors import EmotionalDataCollector, NeuroplasticityDataCollector
from fusion.analysis_engine import AnalysisEngine, build_engine
from utils.audit_database import AuditDatabase
from utils.config_loader import load_orchestrator_config, merge_config
from utils.memory_sink import InMemorySink

from .periodic_aggregator import PeriodicAggregator
from .queue_manager import QueueManager
from .realtime_processor import RealtimeProcessor
from .session_lifecycle import SessionLifecycleManager
from .state import SharedState

logger = logging.getLogger(__name__)


def create_sink(config: Dict) -> AnalysisSink:
    """Persistence sink selected by `persistence.backend` (memory | sqlite)."""
    persistence = config.get('persistence', {})
    backend = persistence.get('backend', 'memory')
    if backend == 'sqlite':
        return AuditDatabase(persistence.get('db_path', 'data/audit/wellbeing_audit.db'))
    if backend != 'memory':
        logger.warning(f"Unknown persistence backend '{backend}', using memory")
    return InMemorySink()


class WellbeingOrchestrator:
    """
    Public entry point.

    Args:
        config: YAML path, configuration dict (merged over the defaults) or
                None for the built-in defaults
        sink: Persistence sink (default: chosen from `persistence.backend`)
        emotional_units: Override the emotional family (tests, custom units)
        neuroplasticity_units: Override the neuroplasticity family
    """

    def __init__(
        self,
        config: Union[str, Path, Dict, None] = None,
        sink: Optional[AnalysisSink] = None,
        emotional_units=None,
        neuroplasticity_units=None
    ):
        if isinstance(config, dict):
            self.config = load_orchestrator_config(overrides=config)
        else:
            self.config = load_orchestrator_config(config)

        self.sink = sink if sink is not None else create_sink(self.config)
        self._emotional_units = emotional_units
        self._neuroplasticity_units = neuroplasticity_units

        self.queues = QueueManager()
        self.state = SharedState({
            AlgorithmFamily.EMOTIONAL: EmotionalDataCollector(self.config),
            AlgorithmFamily.NEUROPLASTICITY: NeuroplasticityDataCollector(self.config),
        })

        # Configuration with the profile override applied (set by initialize)
        self.effective_config = self.config
        self.engine: Optional[AnalysisEngine] = None
        self.processor: Optional[RealtimeProcessor] = None
        self.aggregator: Optional[PeriodicAggregator] = None
        self.lifecycle: Optional[SessionLifecycleManager] = None

        self._listeners: List[Callable[[Dict[str, Any]], None]] = []
        self._listeners_lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        return self.lifecycle is not None

    def initialize(self, user_profile: Optional[Dict[str, Any]] = None) -> bool:
        """
        Build the algorithm registries for a user.

        Returns:
            False (and logs) if the units or weight tables cannot be built
        """
        if self.lifecycle is not None and self.lifecycle.current_state == LifecycleState.ACTIVE:
            logger.error("Cannot re-initialize while a session is active")
            return False

        user_profile = dict(user_profile or {})
        try:
            config = self.config
            if isinstance(user_profile.get('config'), dict):
                config = merge_config(config, user_profile['config'])
            engine = build_engine(
                config,
                emotional_units=self._emotional_units,
                neuroplasticity_units=self._neuroplasticity_units,
            )
        except (WeightConfigurationError, ValueError, TypeError, KeyError) as e:
            logger.error(f"Orchestrator initialization failed: {e}")
            return False

        if self.engine is not None:
            self.engine.shutdown()

        self.engine = engine
        self.effective_config = config
        with self.state.lock:
            self.state.profile = user_profile

        self.processor = RealtimeProcessor(
            self.state, engine, self.queues, config, on_update=self._notify
        )
        self.aggregator = PeriodicAggregator(
            self.state, engine, self.queues, self.sink, config, on_update=self._notify
        )
        self.lifecycle = SessionLifecycleManager(
            self.state, engine, self.aggregator, self.sink, config
        )

        logger.info(
            f"Orchestrator initialized for user {user_profile.get('user_id', 'unknown')}"
        )
        return True

    def _require_initialized(self) -> SessionLifecycleManager:
        if self.lifecycle is None:
            raise InvalidStateError("Orchestrator is not initialized; call initialize() first")
        return self.lifecycle

    def start_session(self, config: Union[SessionConfig, Dict[str, Any]]) -> Session:
        """
        Start a session.

        Args:
            config: SessionConfig or dict; missing interval/realtime settings
                    come from the `orchestrator` configuration section

        Raises:
            InvalidStateError: Not initialized, or a session is already active
        """
        lifecycle = self._require_initialized()

        if isinstance(config, dict):
            defaults = self.effective_config.get('orchestrator', {})
            data = {
                'analysis_interval_ms': defaults.get('analysis_interval_ms', 5000),
                'realtime_enabled': defaults.get('realtime_enabled', True),
            }
            data.update(config)
            if 'user_id' not in data:
                data['user_id'] = self.state.profile.get('user_id', 'anonymous')
            config = SessionConfig.from_dict(data)

        session = lifecycle.start(config)
        self._notify()
        return session

    def end_session(self) -> SessionReport:
        """
        End the active session.

        Raises:
            NoActiveSessionError: No session is active (or never initialized)
        """
        if self.lifecycle is None:
            raise NoActiveSessionError("No active session to end")

        report = self.lifecycle.end()
        self._notify()
        return report

    def process_event(self, event: Dict[str, Any]) -> Optional[IntegratedAnalysis]:
        """
        Feed one event through the real-time path.

        Returns:
            Real-time analysis, or None when no session is active or
            real-time analysis is disabled for the session
        """
        if self.processor is None:
            logger.debug("Event ignored: orchestrator not initialized")
            return None
        return self.processor.process(event)

    def tick(self) -> Optional[IntegratedAnalysis]:
        """Run one periodic pass now (for deterministic driving)."""
        if self.aggregator is None:
            return None
        return self.aggregator.tick()

    def get_queues(self) -> Dict[str, list]:
        """Snapshot copies of both active queues."""
        return self.queues.snapshot()

    def mark_intervention(self, item_id: str) -> bool:
        return self.queues.mark_processed(item_id, QueueKind.INTERVENTION)

    def mark_optimization(self, item_id: str) -> bool:
        return self.queues.mark_processed(item_id, QueueKind.OPTIMIZATION)

    def clear_processed_queues(self) -> int:
        return self.queues.clear_processed()

    def get_status(self) -> Dict[str, Any]:
        with self.state.lock:
            session = self.state.session
            is_active = self.state.is_active
            in_flight = self.state.in_flight
            lifecycle = self.state.lifecycle

        is_analyzing = is_active and (
            in_flight > 0 or (self.aggregator is not None and self.aggregator.is_running)
        )
        return {
            'is_active': is_active,
            'is_analyzing': is_analyzing,
            'queue_depths': self.queues.depths(),
            'state': lifecycle.value,
            'current_session': session.session_id if session is not None else None,
        }

    def update_user_profile(self, updates: Dict[str, Any]) -> None:
        """Merge profile updates; the next pass sees them."""
        with self.state.lock:
            profile = dict(self.state.profile)
            profile.update(updates)
            self.state.profile = profile
        logger.info(f"User profile updated: {sorted(updates.keys())}")

    def get_history(self) -> List[IntegratedAnalysis]:
        with self.state.lock:
            return list(self.state.history)

    def get_trends(self) -> TrendReport:
        with self.state.lock:
            return self.state.trends

    def get_snapshot(self) -> Dict[str, Any]:
        """Read-only presentation snapshot."""
        with self.state.lock:
            session = self.state.session
            snapshot = {
                'current_session': session.to_dict() if session is not None else None,
                'is_active': self.state.is_active,
                'realtime_data': (
                    self.state.latest_realtime.to_dict()
                    if self.state.latest_realtime is not None else None
                ),
            }
        queues = self.queues.snapshot()
        snapshot['intervention_queue'] = [to_serializable(item) for item in queues['interventions']]
        snapshot['optimization_queue'] = [to_serializable(item) for item in queues['optimizations']]
        return snapshot

    def subscribe(self, listener: Callable[[Dict[str, Any]], None]) -> Callable[[], None]:
        """
        Push the snapshot to `listener` after every update.

        Returns:
            Callable that removes the listener
        """
        with self._listeners_lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        if not listeners:
            return

        snapshot = self.get_snapshot()
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.warning(f"Snapshot listener failed: {e}")

    def close(self) -> None:
        """End any active session and release the engine and sink."""
        if self.lifecycle is not None and self.lifecycle.current_state == LifecycleState.ACTIVE:
            self.end_session()
        if self.engine is not None:
            self.engine.shutdown()
            self.engine = None
            self.processor = None
            self.aggregator = None
            self.lifecycle = None
        self.sink.close()
        logger.info("Orchestrator closed")
