"""
Interface definitions for the wellbeing analysis orchestrator.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from .data_models import (
    AlgorithmResult, Insight, IntegratedAnalysis, Recommendation, Session,
    SessionReport
)
from .enums import AlgorithmFamily


class AlgorithmUnit(ABC):
    """
    Stateless scorer with a uniform contract.

    Subclasses set `name` and `family` and implement `_analyze`. Tunable
    thresholds come from the `algorithms.<name>` config section; anything
    user-specific comes from the profile passed on each call.
    """

    name: str = ""
    family: AlgorithmFamily = AlgorithmFamily.EMOTIONAL
    default_confidence: float = 0.8

    def __init__(self, config: Optional[Dict] = None):
        config = config or {}
        self.params = dict(config.get('algorithms', {}).get(self.name, {}))

    def execute(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        """
        Score one window of session data.

        Args:
            profile: User profile dict (may be empty)
            data: Session data built by a collector (see data_collectors)

        Returns:
            AlgorithmResult; empty-evidence result when the window has no events
        """
        if not data or not data.get('event_count'):
            return self.empty_result()
        return self._analyze(profile or {}, data)

    def execute_realtime(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        """Fast-path scoring over the rolling buffer; defaults to `execute`."""
        return self.execute(profile, data)

    @abstractmethod
    def _analyze(self, profile: Dict[str, Any], data: Dict[str, Any]) -> AlgorithmResult:
        """Score a non-empty window."""
        pass

    def empty_result(self) -> AlgorithmResult:
        return AlgorithmResult(
            algorithm_name=self.name,
            family=self.family,
            score=0.0,
            confidence=0.0,
        )

    def _result(
        self,
        score: float,
        confidence: Optional[float] = None,
        insights: Iterable[Insight] = (),
        recommendations: Iterable[Recommendation] = (),
        metrics: Optional[Dict[str, Any]] = None
    ) -> AlgorithmResult:
        return AlgorithmResult(
            algorithm_name=self.name,
            family=self.family,
            score=score,
            confidence=self.default_confidence if confidence is None else confidence,
            insights=tuple(insights),
            recommendations=tuple(recommendations),
            metrics=metrics or {},
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class DataCollector(ABC):
    """Interface for per-family session data collectors."""

    family: AlgorithmFamily

    @property
    @abstractmethod
    def is_collecting(self) -> bool:
        pass

    @abstractmethod
    def start(self, session_id: str, user_id: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Begin buffering for a new session."""
        pass

    @abstractmethod
    def collect(self, event: Dict[str, Any]) -> Dict[str, Any]:
        """Normalize and buffer one event; returns the stored record."""
        pass

    @abstractmethod
    def snapshot(self) -> List[Dict[str, Any]]:
        """Copy of the rolling buffer."""
        pass

    @abstractmethod
    def window(self) -> Dict[str, Any]:
        """Session data over the rolling buffer."""
        pass

    @abstractmethod
    def drain_pending(self) -> List[Dict[str, Any]]:
        """Records collected since the previous drain."""
        pass

    @abstractmethod
    def stop(self) -> Dict[str, Any]:
        """Stop collecting and return the terminal summary."""
        pass


class AnalysisSink(ABC):
    """Outbound persistence boundary."""

    @abstractmethod
    def write_analysis(self, session: Session, analysis: IntegratedAnalysis) -> None:
        pass

    @abstractmethod
    def write_report(self, report: SessionReport) -> None:
        pass

    def close(self) -> None:
        """Release any held resources."""
        pass

    def log_operation(self, session_id: Optional[str], stage: str, operation: str,
                      status: str, details: str = "") -> None:
        """Record an orchestrator operation in the audit trail (optional)."""
        pass
