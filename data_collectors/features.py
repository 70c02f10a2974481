"""
Window feature extraction.

Turns a list of normalized event records into the session-data dict every
algorithm unit consumes:

    {
        'event_count': int,
        'records': [...],          # normalized records, oldest first
        'features': {...},         # numeric summary computed here
        'context': {...},          # session/activity context
    }

Event conventions:
- `type`: click, stroke, color_change, attempt, retry, error, success,
  undo, hint_request, help_request, task_complete, task_abandon, pause, ...
- optional fields: success (bool), accuracy / score (0-1), color, skill,
  context, response_time (seconds), duration (seconds, for pauses)
- explicitly reported levels (0-1): frustration_level, anxiety_level,
  engagement_level, motivation_level, cognitive_load

Reported levels are surfaced as the latest value seen in the window.
"""

import logging
import math
from typing import Any, Dict, List, Optional

import numpy as np

logger = logging.getLogger(__name__)

REPORTED_FIELDS = (
    'frustration_level',
    'anxiety_level',
    'engagement_level',
    'motivation_level',
    'cognitive_load',
)

ERROR_TYPES = ('error',)
SUCCESS_TYPES = ('success', 'task_complete')
HELP_TYPES = ('hint_request', 'help_request')
RETRY_TYPES = ('retry', 'attempt')


def build_session_data(
    records: List[Dict[str, Any]],
    context: Optional[Dict[str, Any]] = None,
    config: Optional[Dict] = None
) -> Dict[str, Any]:
    """
    Build the session-data dict for a window of records.

    Args:
        records: Normalized records (any order; sorted by timestamp here)
        context: Session context (session_id, user_id, activity_type, ...)
        config: Configuration dict (reads `collectors` section)

    Returns:
        Session-data dict (see module docstring)
    """
    config = config or {}
    collector_config = config.get('collectors', {})
    ordered = sorted(records, key=lambda r: r.get('timestamp', 0.0))

    return {
        'event_count': len(ordered),
        'records': ordered,
        'features': extract_features(
            ordered,
            rapid_click_sec=collector_config.get('rapid_click_sec', 0.3),
            long_pause_sec=collector_config.get('long_pause_sec', 3.0),
        ),
        'context': dict(context or {}),
    }


def extract_features(
    records: List[Dict[str, Any]],
    rapid_click_sec: float = 0.3,
    long_pause_sec: float = 3.0
) -> Dict[str, Any]:
    """
    Compute numeric window features.

    Args:
        records: Normalized records sorted by timestamp
        rapid_click_sec: Max gap between clicks counted as a rapid sequence
        long_pause_sec: Min gap between events counted as a long pause

    Returns:
        Dict of counts, rates, timing statistics and reported levels
    """
    n = len(records)
    if n == 0:
        return _empty_features()

    timestamps = np.array([float(r.get('timestamp', 0.0)) for r in records])
    intervals = np.diff(timestamps) if n > 1 else np.array([])
    duration = float(timestamps[-1] - timestamps[0]) if n > 1 else 0.0
    types = [r.get('type', '') for r in records]

    # Click rhythm
    click_ts = np.array([t for t, kind in zip(timestamps, types) if kind == 'click'])
    click_gaps = np.diff(click_ts) if len(click_ts) > 1 else np.array([])
    rapid_click_count = int(np.sum(click_gaps < rapid_click_sec))

    # Pauses: gaps between events plus explicit pause events
    explicit_pauses = [
        float(r['duration']) for r in records
        if r.get('type') == 'pause' and _is_number(r.get('duration'))
    ]
    pause_values = np.concatenate([intervals, np.array(explicit_pauses)]) \
        if explicit_pauses else intervals
    long_pauses = pause_values[pause_values > long_pause_sec] if len(pause_values) else pause_values
    max_pause = float(np.max(pause_values)) if len(pause_values) else 0.0

    error_flags = [_is_error(r) for r in records]
    success_flags = [_is_success(r) for r in records]
    error_count = int(sum(error_flags))
    success_count = int(sum(success_flags))
    completion_count = types.count('task_complete')
    abandon_count = types.count('task_abandon')
    finished = completion_count + abandon_count

    performance = [_performance_value(r) for r in records]
    performance = [p for p in performance if p is not None]

    recovery_times, recovered = _error_recovery(records, error_flags, success_flags)

    features = {
        'event_count': n,
        'duration': duration,
        'actions_per_second': n / max(duration, 1.0),
        'mean_interval': float(np.mean(intervals)) if len(intervals) else 0.0,
        'last_interval': float(intervals[-1]) if len(intervals) else 0.0,
        'interval_variability': _coefficient_of_variation(intervals),
        'click_count': int(len(click_ts)),
        'rapid_click_count': rapid_click_count,
        'long_pause_count': int(len(long_pauses)),
        'max_pause': max_pause,
        'error_count': error_count,
        'success_count': success_count,
        'error_rate': error_count / n,
        'max_error_streak': _max_streak(error_flags),
        'help_requests': sum(1 for kind in types if kind in HELP_TYPES),
        'undo_count': types.count('undo'),
        'retry_count': _count_retries(types, error_flags),
        'completion_count': completion_count,
        'abandon_count': abandon_count,
        'completion_rate': completion_count / finished if finished else 0.0,
        'performance_series': performance,
        'current_performance': float(np.mean(performance)) if performance else 1.0 - error_count / n,
        'error_recovery_times': recovery_times,
        'errors_recovered': recovered,
        'colors': [str(r['color']).lower() for r in records if r.get('color')],
        'skills': _distinct(records, 'skill'),
        'contexts': _distinct(records, 'context'),
        'context_switches': _count_switches(records, 'context'),
        'response_times': [
            float(r['response_time']) for r in records if _is_number(r.get('response_time'))
        ],
        'pause_durations': explicit_pauses,
        'reported': _latest_reported(records),
    }

    logger.debug(
        f"Extracted features from {n} records "
        f"(errors={error_count}, rapid_clicks={rapid_click_count}, "
        f"long_pauses={features['long_pause_count']})"
    )

    return features


def _empty_features() -> Dict[str, Any]:
    return {
        'event_count': 0,
        'duration': 0.0,
        'actions_per_second': 0.0,
        'mean_interval': 0.0,
        'last_interval': 0.0,
        'interval_variability': 0.0,
        'click_count': 0,
        'rapid_click_count': 0,
        'long_pause_count': 0,
        'max_pause': 0.0,
        'error_count': 0,
        'success_count': 0,
        'error_rate': 0.0,
        'max_error_streak': 0,
        'help_requests': 0,
        'undo_count': 0,
        'retry_count': 0,
        'completion_count': 0,
        'abandon_count': 0,
        'completion_rate': 0.0,
        'performance_series': [],
        'current_performance': 0.0,
        'error_recovery_times': [],
        'errors_recovered': 0,
        'colors': [],
        'skills': [],
        'contexts': [],
        'context_switches': 0,
        'response_times': [],
        'pause_durations': [],
        'reported': {},
    }


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or value is None:
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def _is_error(record: Dict[str, Any]) -> bool:
    return record.get('type') in ERROR_TYPES or record.get('success') is False


def _is_success(record: Dict[str, Any]) -> bool:
    return record.get('type') in SUCCESS_TYPES or record.get('success') is True


def _performance_value(record: Dict[str, Any]) -> Optional[float]:
    """Accuracy, else score, else success flag; None when absent."""
    for key in ('accuracy', 'score'):
        if _is_number(record.get(key)):
            return float(np.clip(float(record[key]), 0.0, 1.0))
    if isinstance(record.get('success'), bool):
        return 1.0 if record['success'] else 0.0
    return None


def _coefficient_of_variation(values: np.ndarray) -> float:
    if len(values) < 2:
        return 0.0
    mean = float(np.mean(values))
    if mean <= 0:
        return 0.0
    return float(np.clip(np.std(values) / mean, 0.0, 1.0))


def _max_streak(flags: List[bool]) -> int:
    best = current = 0
    for flag in flags:
        current = current + 1 if flag else 0
        best = max(best, current)
    return best


def _count_retries(types: List[str], error_flags: List[bool]) -> int:
    """Retry/attempt events that follow an error."""
    retries = 0
    after_error = False
    for kind, is_error in zip(types, error_flags):
        if is_error:
            after_error = True
            continue
        if after_error and kind in RETRY_TYPES:
            retries += 1
            after_error = False
    return retries


def _error_recovery(records, error_flags, success_flags, lookahead: int = 3):
    """
    Time from each error to the next success, and how many errors were
    recovered within `lookahead` events.
    """
    times = []
    recovered = 0
    for i, is_error in enumerate(error_flags):
        if not is_error:
            continue
        for j in range(i + 1, len(records)):
            if success_flags[j]:
                times.append(float(records[j]['timestamp'] - records[i]['timestamp']))
                if j - i <= lookahead:
                    recovered += 1
                break
    return times, recovered


def _distinct(records: List[Dict[str, Any]], key: str) -> List[str]:
    seen = []
    for record in records:
        value = record.get(key)
        if value is not None and value not in seen:
            seen.append(value)
    return seen


def _count_switches(records: List[Dict[str, Any]], key: str) -> int:
    values = [r.get(key) for r in records if r.get(key) is not None]
    return sum(1 for a, b in zip(values, values[1:]) if a != b)


def _latest_reported(records: List[Dict[str, Any]]) -> Dict[str, float]:
    reported = {}
    for record in records:
        for name in REPORTED_FIELDS:
            if _is_number(record.get(name)):
                reported[name] = float(np.clip(float(record[name]), 0.0, 1.0))
    return reported
