"""
Core data models for the wellbeing analysis orchestrator.

Results flowing between components are frozen dataclasses: an
AlgorithmResult or IntegratedAnalysis is produced once per pass and never
mutated afterwards. The Session record is the only mutable model and is
owned by the session lifecycle manager.
"""

import math
import time
import uuid
from dataclasses import dataclass, field, fields, is_dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .enums import (
    AlgorithmFamily, AnalysisMode, InsightType, Priority, QueueKind,
    SessionStatus, Trend
)

# Namespace for deterministic queue item ids
_QUEUE_ITEM_NAMESPACE = uuid.UUID("6f1c2b7e-93d4-4f55-a3c1-0b7d2e4a9c11")


def clamp_unit(value: Any) -> float:
    """Clamp a value into [0, 1]; non-numeric or NaN values map to 0."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class Insight:
    """Observation emitted by a unit or by the integrator."""
    type: str
    message: str
    confidence: float = 0.5

    def __post_init__(self):
        if isinstance(self.type, InsightType):
            object.__setattr__(self, 'type', self.type.value)
        object.__setattr__(self, 'confidence', clamp_unit(self.confidence))


@dataclass(frozen=True)
class Recommendation:
    """Suggested action emitted by a unit or a processing pass."""
    type: str
    action: str
    description: str
    priority: Optional[str] = None


@dataclass(frozen=True)
class AlgorithmResult:
    """
    Output of one algorithm unit invocation.

    Attributes:
        algorithm_name: Registry name of the producing unit
        family: Algorithm family of the unit
        score: Wellbeing-oriented score (0-1, higher = better)
        confidence: Confidence in the score (0-1)
        insights: Ordered insights
        recommendations: Ordered recommendations
        metrics: Extra named indicator values (e.g. frustration_level)
        timestamp: Creation time (epoch seconds)
    """
    algorithm_name: str
    family: AlgorithmFamily
    score: float
    confidence: float
    insights: Tuple[Insight, ...] = ()
    recommendations: Tuple[Recommendation, ...] = ()
    metrics: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self):
        object.__setattr__(self, 'score', clamp_unit(self.score))
        object.__setattr__(self, 'confidence', clamp_unit(self.confidence))
        object.__setattr__(self, 'insights', tuple(self.insights))
        object.__setattr__(self, 'recommendations', tuple(self.recommendations))
        object.__setattr__(self, 'metrics', dict(self.metrics))


@dataclass(frozen=True)
class IntegratedAnalysis:
    """
    Weighted combination of algorithm results for one processing pass.

    risk_score and opportunity_score are composite gates for queue emission
    and are derived from `indicators`; they are not raw unit outputs.
    """
    overall_score: float
    confidence_score: float
    risk_score: float = 0.0
    opportunity_score: float = 0.0
    insights: Tuple[Insight, ...] = ()
    recommendations: Tuple[Recommendation, ...] = ()
    indicators: Dict[str, float] = field(default_factory=dict)
    family_scores: Dict[str, float] = field(default_factory=dict)
    coverage: float = 1.0
    mode: AnalysisMode = AnalysisMode.PERIODIC
    algorithm_results: Tuple[AlgorithmResult, ...] = ()
    failed_algorithms: Tuple[str, ...] = ()
    session_id: Optional[str] = None
    analysis_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self):
        for name in ('overall_score', 'confidence_score', 'risk_score',
                     'opportunity_score', 'coverage'):
            object.__setattr__(self, name, clamp_unit(getattr(self, name)))
        object.__setattr__(self, 'insights', tuple(self.insights))
        object.__setattr__(self, 'recommendations', tuple(self.recommendations))
        object.__setattr__(self, 'algorithm_results', tuple(self.algorithm_results))
        object.__setattr__(self, 'failed_algorithms', tuple(self.failed_algorithms))
        object.__setattr__(self, 'indicators', dict(self.indicators))
        object.__setattr__(self, 'family_scores', dict(self.family_scores))

    @property
    def degraded(self) -> bool:
        """True when at least one unit failed during the pass."""
        return bool(self.failed_algorithms) or self.coverage < 1.0

    def derive(self, **changes) -> 'IntegratedAnalysis':
        """Return a new analysis with `changes` applied (fresh id)."""
        changes.setdefault('analysis_id', uuid.uuid4().hex)
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return to_serializable(self)


@dataclass(frozen=True)
class SessionConfig:
    """Inbound configuration for one session."""
    user_id: str
    activity_type: str = "general"
    difficulty: str = "medium"
    analysis_interval_ms: int = 5000
    realtime_enabled: bool = True
    session_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionConfig':
        """Build a config from a plain dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class Session:
    """Session record; mutated only by the session lifecycle manager."""
    session_id: str
    user_id: str
    start_time: float
    config: SessionConfig
    status: SessionStatus = SessionStatus.ACTIVE
    end_time: Optional[float] = None

    @property
    def duration(self) -> float:
        end = self.end_time if self.end_time is not None else time.time()
        return max(0.0, end - self.start_time)

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        return to_serializable(self)


def make_queue_item_id(session_id: Optional[str], kind: QueueKind, analysis_id: str) -> str:
    """Deterministic id: the same trigger never creates two items of a kind."""
    key = f"{session_id or '-'}:{kind.value}:{analysis_id}"
    return uuid.uuid5(_QUEUE_ITEM_NAMESPACE, key).hex


@dataclass(frozen=True)
class QueueItem:
    """
    Intervention or optimization work item.

    Items are frozen; marking one processed produces a new instance in the
    processed view of the queue manager.
    """
    item_id: str
    kind: QueueKind
    priority: Priority
    trigger: IntegratedAnalysis
    session_id: Optional[str] = None
    reason: str = ""
    action: str = ""
    created_at: float = field(default_factory=time.time)
    processed: bool = False
    processed_at: Optional[float] = None

    @classmethod
    def create(
        cls,
        kind: QueueKind,
        priority: Priority,
        trigger: IntegratedAnalysis,
        reason: str = "",
        action: str = ""
    ) -> 'QueueItem':
        return cls(
            item_id=make_queue_item_id(trigger.session_id, kind, trigger.analysis_id),
            kind=kind,
            priority=priority,
            trigger=trigger,
            session_id=trigger.session_id,
            reason=reason,
            action=action,
        )

    def mark_processed(self) -> 'QueueItem':
        return replace(self, processed=True, processed_at=time.time())

    def to_dict(self) -> Dict[str, Any]:
        return to_serializable(self)


@dataclass(frozen=True)
class TrendReport:
    """Trend classification per tracked metric."""
    classifications: Dict[str, Trend] = field(default_factory=dict)
    slopes: Dict[str, float] = field(default_factory=dict)
    points: int = 0

    def get(self, metric: str) -> Trend:
        return self.classifications.get(metric, Trend.STABLE)


@dataclass(frozen=True)
class SessionReport:
    """
    Container for the complete analysis of one session.

    Attributes:
        session: Completed session record
        final_analysis: Full-pass integrated analysis over terminal summaries
        history: Periodic analyses in tick order
        recommendations: Session-level recommendations
        trends: Trend classification over history
        outcomes: Session composites (wellbeing, learning effectiveness, ...)
        summaries: Terminal collector summaries keyed by family
    """
    session: Session
    final_analysis: IntegratedAnalysis
    history: Tuple[IntegratedAnalysis, ...] = ()
    recommendations: Tuple[Recommendation, ...] = ()
    trends: TrendReport = field(default_factory=TrendReport)
    outcomes: Dict[str, float] = field(default_factory=dict)
    summaries: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return to_serializable(self)


def to_serializable(obj: Any) -> Any:
    """Convert dataclasses/enums/tuples into JSON-compatible structures."""
    if isinstance(obj, Enum):
        return obj.value
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_serializable(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, dict):
        return {str(to_serializable(k)): to_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [to_serializable(v) for v in obj]
    if isinstance(obj, float) and not math.isfinite(obj):
        return None
    if hasattr(obj, 'item') and callable(obj.item):
        # numpy scalars
        return obj.item()
    return obj
