"""
Data collector adapters.

Normalize inbound events into records, buffer them per algorithm family and
build the session-data dicts algorithm units consume.
"""

from .base import BaseCollector, SubCollector
from .emotional_collector import EmotionalDataCollector
from .neuroplasticity_collector import NeuroplasticityDataCollector
from .features import REPORTED_FIELDS, build_session_data, extract_features

__all__ = [
    'BaseCollector',
    'SubCollector',
    'EmotionalDataCollector',
    'NeuroplasticityDataCollector',
    'REPORTED_FIELDS',
    'build_session_data',
    'extract_features',
]
