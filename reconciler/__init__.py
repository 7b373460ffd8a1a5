"""
Reconciliation and item processing for prime-to-simkl.
"""

from .engine import ALWAYS_KEEP_PROVIDERS, ReconciliationEngine, validate_providers
from .processor import (
    WATCH_STATUS_COMPLETED,
    WATCH_STATUS_WATCHING,
    ItemProcessor,
    deduplicate_history,
    media_kind_for,
    process_history,
    render_csv,
)

__all__ = [
    'ALWAYS_KEEP_PROVIDERS',
    'ReconciliationEngine',
    'validate_providers',
    'WATCH_STATUS_COMPLETED',
    'WATCH_STATUS_WATCHING',
    'ItemProcessor',
    'deduplicate_history',
    'media_kind_for',
    'process_history',
    'render_csv',
]
