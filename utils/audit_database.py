"""
Audit Database Module for the wellbeing orchestrator.

Provides an audit trail for every analysis the orchestrator persists,
enabling verification, querying and tracking of system outputs.

Key features:
- Centralized SQLite database for periodic analyses and session reports
- JSON payloads keyed by session_id, user_id and timestamp
- Query interface for historical session lookup
- Operation log for lifecycle events
- Human-readable JSON export
"""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional

from analysis_core.data_models import IntegratedAnalysis, Session, SessionReport
from analysis_core.interfaces import AnalysisSink

logger = logging.getLogger(__name__)

SYSTEM_VERSION = "1.0.0"


class AuditDatabase(AnalysisSink):
    """
    SQLite-backed analysis sink.

    Stores analyses and reports for:
    - Auditability: what the system concluded and when
    - Verification: compare sessions of one user over time
    - Reporting: aggregate statistics
    """

    def __init__(self, db_path: str = "data/audit/wellbeing_audit.db"):
        """
        Initialize audit database.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_database()

        logger.info(f"Audit database initialized: {self.db_path}")

    def _init_database(self):
        """Create database tables if they don't exist."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS sessions (
                    session_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    activity_type TEXT,
                    difficulty TEXT,
                    start_time REAL NOT NULL,
                    end_time REAL,
                    status TEXT NOT NULL,

                    -- Final analysis
                    final_overall_score REAL,
                    final_confidence_score REAL,
                    final_risk_score REAL,
                    final_opportunity_score REAL,

                    -- Session outcomes
                    overall_wellbeing REAL,
                    learning_effectiveness REAL,

                    periodic_analyses INTEGER DEFAULT 0,
                    report_json TEXT,
                    system_version TEXT,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS analyses (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    analysis_id TEXT NOT NULL,
                    session_id TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    timestamp REAL NOT NULL,
                    mode TEXT NOT NULL,
                    overall_score REAL,
                    confidence_score REAL,
                    risk_score REAL,
                    opportunity_score REAL,
                    analysis_json TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS analysis_log (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    session_id TEXT,
                    stage TEXT NOT NULL,
                    operation TEXT NOT NULL,
                    status TEXT NOT NULL,
                    details TEXT,
                    timestamp DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_analyses_session
                ON analyses(session_id, timestamp)
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_sessions_user
                ON sessions(user_id, start_time)
            """)

            conn.commit()

    def write_analysis(self, session: Session, analysis: IntegratedAnalysis):
        """
        Save one periodic (or final) analysis.

        Args:
            session: Owning session
            analysis: Analysis to store
        """
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                INSERT INTO analyses (
                    analysis_id, session_id, user_id, timestamp, mode,
                    overall_score, confidence_score, risk_score, opportunity_score,
                    analysis_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                analysis.analysis_id,
                session.session_id,
                session.user_id,
                analysis.timestamp,
                analysis.mode.value,
                analysis.overall_score,
                analysis.confidence_score,
                analysis.risk_score,
                analysis.opportunity_score,
                json.dumps(analysis.to_dict(), default=str),
            ))

            conn.commit()
            logger.debug(f"Analysis {analysis.analysis_id} saved for session {session.session_id}")

    def write_report(self, report: SessionReport):
        """
        Save (or replace) the session record with its final report.

        Args:
            report: Completed session report
        """
        session = report.session
        final = report.final_analysis

        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                INSERT OR REPLACE INTO sessions (
                    session_id, user_id, activity_type, difficulty,
                    start_time, end_time, status,
                    final_overall_score, final_confidence_score,
                    final_risk_score, final_opportunity_score,
                    overall_wellbeing, learning_effectiveness,
                    periodic_analyses, report_json, system_version
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                session.session_id,
                session.user_id,
                session.config.activity_type,
                session.config.difficulty,
                session.start_time,
                session.end_time,
                session.status.value,
                final.overall_score,
                final.confidence_score,
                final.risk_score,
                final.opportunity_score,
                report.outcomes.get('overall_wellbeing'),
                report.outcomes.get('learning_effectiveness'),
                len(report.history),
                json.dumps(report.to_dict(), default=str),
                SYSTEM_VERSION,
            ))

            conn.commit()
            logger.info(f"Session report saved: {session.session_id}")

    def log_operation(self, session_id: Optional[str], stage: str, operation: str,
                      status: str, details: str = ""):
        """
        Log an orchestrator operation for the audit trail.

        Args:
            session_id: Session identifier (None for orchestrator-level events)
            stage: Component (e.g., "lifecycle", "periodic")
            operation: Specific operation (e.g., "start_session")
            status: Operation status ("success", "warning", "error")
            details: Additional details or error messages
        """
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                INSERT INTO analysis_log (session_id, stage, operation, status, details)
                VALUES (?, ?, ?, ?, ?)
            """, (session_id, stage, operation, status, details))

            conn.commit()

    def get_session(self, session_id: str) -> Optional[Dict]:
        """
        Retrieve complete session data.

        Args:
            session_id: Session identifier

        Returns:
            Dictionary with session row, parsed report, analyses and log,
            or None if not found
        """
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.cursor()

            cursor.execute("SELECT * FROM sessions WHERE session_id = ?", (session_id,))
            row = cursor.fetchone()

            if not row:
                return None

            session_data = dict(row)
            if session_data.get('report_json'):
                session_data['report'] = json.loads(session_data.pop('report_json'))

            session_data['analyses'] = self.get_analyses(session_id)
            session_data['operation_log'] = self.get_operation_logs(session_id)

            return session_data

    def get_analyses(self, session_id: str) -> List[Dict]:
        """Stored analyses of a session in timestamp order."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.cursor()

            cursor.execute("""
                SELECT * FROM analyses
                WHERE session_id = ?
                ORDER BY timestamp ASC, id ASC
            """, (session_id,))

            analyses = []
            for row in cursor.fetchall():
                entry = dict(row)
                entry['analysis'] = json.loads(entry.pop('analysis_json'))
                analyses.append(entry)
            return analyses

    def list_sessions(self, user_id: Optional[str] = None, limit: int = 100,
                      offset: int = 0) -> List[Dict]:
        """
        List recent sessions.

        Args:
            user_id: Restrict to one user
            limit: Maximum number of sessions to return
            offset: Pagination offset

        Returns:
            List of session summaries (no report payload)
        """
        query = """
            SELECT session_id, user_id, activity_type, start_time, end_time, status,
                   final_overall_score, overall_wellbeing, periodic_analyses
            FROM sessions
        """
        params: List[Any] = []
        if user_id is not None:
            query += " WHERE user_id = ?"
            params.append(user_id)
        query += " ORDER BY start_time DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [dict(row) for row in cursor.fetchall()]

    def get_operation_logs(self, session_id: str) -> List[Dict]:
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.cursor()

            cursor.execute("""
                SELECT * FROM analysis_log
                WHERE session_id = ?
                ORDER BY timestamp ASC, id ASC
            """, (session_id,))

            return [dict(row) for row in cursor.fetchall()]

    def export_session_report(self, session_id: str, output_path: str):
        """
        Export a stored session as a JSON file.

        Raises:
            KeyError: Session not found
        """
        session_data = self.get_session(session_id)
        if session_data is None:
            raise KeyError(f"Session not found: {session_id}")

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w') as f:
            json.dump(session_data, f, indent=2, default=str)

        logger.info(f"Session report exported: {output_path}")

    def get_statistics(self) -> Dict:
        """
        Get aggregate statistics across all sessions.

        Returns:
            Dictionary with summary statistics
        """
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("SELECT COUNT(*) FROM sessions")
            total_sessions = cursor.fetchone()[0]

            cursor.execute("""
                SELECT
                    AVG(final_overall_score),
                    AVG(overall_wellbeing),
                    AVG(learning_effectiveness)
                FROM sessions
            """)
            stats = cursor.fetchone()

            cursor.execute("SELECT COUNT(*) FROM analyses")
            total_analyses = cursor.fetchone()[0]

            return {
                'total_sessions': total_sessions,
                'avg_final_overall_score': stats[0],
                'avg_overall_wellbeing': stats[1],
                'avg_learning_effectiveness': stats[2],
                'total_analyses': total_analyses,
            }
