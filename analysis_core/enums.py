"""
Enumerations for the wellbeing analysis orchestrator.
"""

from enum import Enum


class AlgorithmFamily(Enum):
    """Families of pluggable analysis algorithms."""
    EMOTIONAL = "emotional"
    NEUROPLASTICITY = "neuroplasticity"


class LifecycleState(Enum):
    """Orchestrator-level session lifecycle."""
    IDLE = "idle"  # No session started yet
    ACTIVE = "active"  # Session collecting and analyzing
    COMPLETED = "completed"  # Last session ended, report emitted


class SessionStatus(Enum):
    """Status of a single session record."""
    ACTIVE = "active"
    COMPLETED = "completed"


class AnalysisMode(Enum):
    """Which processing path produced an integrated analysis."""
    REALTIME = "realtime"  # Priority subset, one event
    PERIODIC = "periodic"  # Full pass over the window since the last tick
    FINAL = "final"  # Full pass over terminal session summaries


class QueueKind(Enum):
    """Downstream work queues."""
    INTERVENTION = "intervention"
    OPTIMIZATION = "optimization"


class Priority(Enum):
    """Queue item priority, ordered from least to most urgent."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    IMMEDIATE = "immediate"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.LOW: 0,
    Priority.MEDIUM: 1,
    Priority.HIGH: 2,
    Priority.IMMEDIATE: 3,
}


class Trend(Enum):
    """Trend classification over analysis history."""
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class InsightType(Enum):
    """Insight categories emitted by units and the integrator."""
    POSITIVE = "positive"
    WARNING = "warning"
    PATTERN = "pattern"
    OPPORTUNITY = "opportunity"
    DEGRADED = "degraded"  # A unit or collector failed during the pass
    TOTAL_FAILURE = "total_failure"  # No unit produced a result
    COLLECTOR_UNAVAILABLE = "collector_unavailable"
    NO_DATA = "no_data"
