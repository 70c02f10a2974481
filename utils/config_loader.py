"""Configuration management utilities."""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "configs" / "orchestrator.yaml"

# Built-in defaults; YAML files are merged over these
DEFAULT_CONFIG: Dict[str, Any] = {
    'orchestrator': {
        'analysis_interval_ms': 5000,
        'realtime_enabled': True,
        'realtime': {
            'budget_ms': 200,
        },
    },
    'thresholds': {
        'intervention_risk': 0.7,
        'intervention_indicator': 0.8,
        'optimization_opportunity': 0.7,
        'support_risk': 0.7,
        'challenge_opportunity': 0.7,
        'complexity_risk': 0.3,
        'complexity_opportunity': 0.5,
        'session_wellbeing_floor': 0.4,
        'session_effectiveness_ceiling': 0.7,
    },
    'weights': {
        'families': {
            'emotional': 0.6,
            'neuroplasticity': 0.4,
        },
        'emotional': {
            'color_analysis': 0.15,
            'frustration_detection': 0.20,
            'engagement_analysis': 0.20,
            'anxiety_detector': 0.15,
            'adaptive_motivation': 0.10,
            'emotional_regulation': 0.10,
            'creative_expression': 0.10,
        },
        'neuroplasticity': {
            'improvement_tracker': 0.25,
            'opportunity_window': 0.20,
            'memory_consolidation': 0.15,
            'breakthrough_detector': 0.15,
            'cognitive_recovery': 0.15,
            'learning_transfer': 0.10,
        },
    },
    'priority_subsets': {
        'emotional': [
            'frustration_detection',
            'anxiety_detector',
            'engagement_analysis',
            'adaptive_motivation',
        ],
        'neuroplasticity': [
            'improvement_tracker',
            'opportunity_window',
            'cognitive_recovery',
        ],
    },
    'scoring': {
        'risk_weights': {
            'frustration': 0.4,
            'anxiety': 0.3,
            'cognitive_overload': 0.3,
        },
        'opportunity_weights': {
            'engagement': 0.4,
            'motivation': 0.3,
            'improvement_potential': 0.3,
        },
        'trends': {
            'relative_change': 0.1,
            'min_change': 0.01,
        },
    },
    'collectors': {
        'emotional': {'buffer_size': 100},
        'neuroplasticity': {'buffer_size': 200},
        'session_record_limit': 10000,
        'pending_limit': 10000,
        'rapid_click_sec': 0.3,
        'long_pause_sec': 3.0,
    },
    'algorithms': {
        'frustration_detection': {
            'error_threshold': 0.3,
            'rapid_click_threshold': 3,
            'long_pause_sec': 5.0,
            'long_pause_threshold': 2,
            'error_streak_threshold': 3,
            'undo_threshold': 3,
        },
        'anxiety_detector': {
            'hesitation_sec': 5.0,
            'rapid_actions_per_sec': 3.0,
            'realtime_pause_sec': 3.0,
        },
        'improvement_tracker': {
            'default_baseline': 0.5,
        },
        'breakthrough_detector': {
            'jump_threshold': 0.3,
        },
    },
    'persistence': {
        'backend': 'memory',
        'db_path': 'data/audit/wellbeing_audit.db',
    },
}


def load_config(config_path) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file (str or Path)

    Returns:
        Dictionary containing configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is malformed
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f) or {}

    logger.debug(f"Loaded config keys: {list(config.keys())}")

    return config


def load_orchestrator_config(
    config_path=None,
    overrides: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Built-in defaults, merged with a YAML file and then with overrides.

    Args:
        config_path: YAML file (None = defaults only)
        overrides: Dict merged last (e.g. from tests)

    Returns:
        Complete configuration dict (a fresh copy)
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if config_path is not None:
        config = merge_config(config, load_config(config_path))
    if overrides:
        config = merge_config(config, overrides)
    return config


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep-merge `override` into a copy of `base`.

    Nested dicts merge key by key; any other value replaces the base value.
    Weight tables are replaced whole so stale unit names never linger.
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict) and key not in _REPLACE_WHOLE:
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


# Keys whose dict values replace rather than merge
_REPLACE_WHOLE = ('emotional', 'neuroplasticity', 'families', 'risk_weights', 'opportunity_weights')


def get_nested_config(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Get nested configuration value using dot notation.

    Example:
        get_nested_config(config, 'orchestrator.realtime.budget_ms', default=200)

    Args:
        config: Configuration dictionary
        key_path: Dot-separated path to value
        default: Default value if path not found

    Returns:
        Configuration value or default
    """
    keys = key_path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value
