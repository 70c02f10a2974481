"""
Core types shared by every part of the wellbeing analysis orchestrator.

Contains:
- Enumerations (families, lifecycle states, priorities, trends)
- Frozen result models (AlgorithmResult, IntegratedAnalysis, QueueItem, ...)
- Error taxonomy rooted at OrchestratorError
- Abstract interfaces for algorithm units, collectors and sinks
"""

from .enums import (
    AlgorithmFamily,
    AnalysisMode,
    InsightType,
    LifecycleState,
    Priority,
    QueueKind,
    SessionStatus,
    Trend,
)
from .exceptions import (
    AlgorithmExecutionError,
    CollectorUnavailableError,
    InvalidStateError,
    NoActiveSessionError,
    OrchestratorError,
    WeightConfigurationError,
)
from .data_models import (
    AlgorithmResult,
    Insight,
    IntegratedAnalysis,
    QueueItem,
    Recommendation,
    Session,
    SessionConfig,
    SessionReport,
    TrendReport,
    clamp_unit,
    make_queue_item_id,
    to_serializable,
)
from .interfaces import AlgorithmUnit, AnalysisSink, DataCollector

__all__ = [
    'AlgorithmFamily',
    'AnalysisMode',
    'InsightType',
    'LifecycleState',
    'Priority',
    'QueueKind',
    'SessionStatus',
    'Trend',
    'AlgorithmExecutionError',
    'CollectorUnavailableError',
    'InvalidStateError',
    'NoActiveSessionError',
    'OrchestratorError',
    'WeightConfigurationError',
    'AlgorithmResult',
    'Insight',
    'IntegratedAnalysis',
    'QueueItem',
    'Recommendation',
    'Session',
    'SessionConfig',
    'SessionReport',
    'TrendReport',
    'clamp_unit',
    'make_queue_item_id',
    'to_serializable',
    'AlgorithmUnit',
    'AnalysisSink',
    'DataCollector',
]
