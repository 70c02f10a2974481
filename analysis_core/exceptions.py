"""
Error taxonomy for the orchestrator.

Propagation policy:
- Lifecycle and configuration errors (InvalidStateError, NoActiveSessionError,
  WeightConfigurationError) are raised synchronously to the caller.
- Per-algorithm and per-collector errors (AlgorithmExecutionError,
  CollectorUnavailableError) are absorbed by the pass that hit them and turned
  into reduced confidence plus an insight entry.
"""

from typing import Optional


class OrchestratorError(Exception):
    """Base class for all orchestrator errors."""


class InvalidStateError(OrchestratorError):
    """Operation attempted from the wrong lifecycle state."""


class NoActiveSessionError(OrchestratorError):
    """Operation requires an active session and none exists."""


class WeightConfigurationError(OrchestratorError, ValueError):
    """Weight table cannot be validated or normalized."""


class AlgorithmExecutionError(OrchestratorError):
    """
    A single algorithm unit failed during a pass.

    Attributes:
        algorithm_name: Name of the failing unit
        cause: Original exception raised by the unit
    """

    def __init__(self, algorithm_name: str, cause: Optional[BaseException] = None):
        self.algorithm_name = algorithm_name
        self.cause = cause
        detail = f"{type(cause).__name__}: {cause}" if cause is not None else "unknown error"
        super().__init__(f"Algorithm '{algorithm_name}' failed ({detail})")


class CollectorUnavailableError(OrchestratorError):
    """A data collector could not supply data."""

    def __init__(self, collector_name: str, reason: str = "not collecting"):
        self.collector_name = collector_name
        self.reason = reason
        super().__init__(f"Collector '{collector_name}' unavailable: {reason}")
