"""Shared utilities for the wellbeing analysis orchestrator."""

from .config_loader import (
    DEFAULT_CONFIG,
    get_nested_config,
    load_config,
    load_orchestrator_config,
    merge_config,
)
from .audit_database import AuditDatabase
from .memory_sink import InMemorySink

__all__ = [
    'DEFAULT_CONFIG',
    'get_nested_config',
    'load_config',
    'load_orchestrator_config',
    'merge_config',
    'AuditDatabase',
    'InMemorySink',
]
