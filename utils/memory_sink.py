"""In-memory analysis sink (default persistence)."""

import logging
import threading
from typing import Any, Dict, List, Optional

from analysis_core.data_models import IntegratedAnalysis, Session, SessionReport
from analysis_core.interfaces import AnalysisSink

logger = logging.getLogger(__name__)


class InMemorySink(AnalysisSink):
    """Keeps analyses and reports in process memory, keyed by session id."""

    def __init__(self):
        self._lock = threading.Lock()
        self._analyses: Dict[str, List[IntegratedAnalysis]] = {}
        self._reports: Dict[str, SessionReport] = {}
        self._operations: List[Dict[str, Any]] = []

    def write_analysis(self, session: Session, analysis: IntegratedAnalysis) -> None:
        with self._lock:
            self._analyses.setdefault(session.session_id, []).append(analysis)

    def write_report(self, report: SessionReport) -> None:
        with self._lock:
            self._reports[report.session.session_id] = report
        logger.debug(f"Report stored in memory for session {report.session.session_id}")

    def log_operation(self, session_id: Optional[str], stage: str, operation: str,
                      status: str, details: str = "") -> None:
        with self._lock:
            self._operations.append({
                'session_id': session_id,
                'stage': stage,
                'operation': operation,
                'status': status,
                'details': details,
            })

    def operation_logs(self, session_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(op) for op in self._operations if op['session_id'] == session_id]

    def analyses(self, session_id: str) -> List[IntegratedAnalysis]:
        with self._lock:
            return list(self._analyses.get(session_id, []))

    def report(self, session_id: str) -> Optional[SessionReport]:
        with self._lock:
            return self._reports.get(session_id)

    @property
    def reports(self) -> List[SessionReport]:
        with self._lock:
            return list(self._reports.values())
