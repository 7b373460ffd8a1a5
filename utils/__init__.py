"""
prime-to-simkl Utilities Package.

This package contains modular utility functions organized by responsibility.
All public names are re-exported here.
"""

# Config utilities
from .config import (
    __version__,
    PROVIDER_KEYS,
    DEFAULT_PRIORITY_ORDER,
    DEFAULT_RATE_LIMITS,
    DEFAULT_OUTPUT_DATE_FORMAT,
    ENV_OVERRIDES,
    get_config_section,
    get_credential,
    get_priority_order,
    get_rate_limits,
    get_output_date_format,
    load_config,
)

# Display utilities
from .display import (
    RED,
    GREEN,
    YELLOW,
    CYAN,
    RESET,
    ANSI_PATTERN,
    LOGGER_NAME,
    ColoredFormatter,
    PlainFormatter,
    setup_logging,
    log_warning,
    print_provider_status,
    print_export_summary,
    show_progress,
)

# Date normalization
from .dates import (
    ISO_DATE_FORMAT,
    SENTINEL_DATE,
    LOCALE_MONTHS,
    MONTH_NAMES,
    register_month_names,
    lookup_month,
    parse_watch_date,
    normalize_date,
)

# Helper utilities
from .helpers import (
    TITLE_YEAR_PATTERN,
    split_title_year,
    format_last_episode,
    extract_year,
    id_to_str,
)

# Data model
from .models import (
    CSV_HEADER,
    ID_FIELDS,
    MediaKind,
    Candidate,
    CrossIds,
    CrossReferenceRecord,
    WatchHistoryEntry,
    OutputRow,
)

# Batch context
from .context import (
    FALLBACK_RETRY_DELAY,
    RateBudget,
    BatchContext,
)

__all__ = [
    # Config
    '__version__',
    'PROVIDER_KEYS',
    'DEFAULT_PRIORITY_ORDER',
    'DEFAULT_RATE_LIMITS',
    'DEFAULT_OUTPUT_DATE_FORMAT',
    'ENV_OVERRIDES',
    'get_config_section',
    'get_credential',
    'get_priority_order',
    'get_rate_limits',
    'get_output_date_format',
    'load_config',
    # Display
    'RED',
    'GREEN',
    'YELLOW',
    'CYAN',
    'RESET',
    'ANSI_PATTERN',
    'LOGGER_NAME',
    'ColoredFormatter',
    'PlainFormatter',
    'setup_logging',
    'log_warning',
    'print_provider_status',
    'print_export_summary',
    'show_progress',
    # Dates
    'ISO_DATE_FORMAT',
    'SENTINEL_DATE',
    'LOCALE_MONTHS',
    'MONTH_NAMES',
    'register_month_names',
    'lookup_month',
    'parse_watch_date',
    'normalize_date',
    # Helpers
    'TITLE_YEAR_PATTERN',
    'split_title_year',
    'format_last_episode',
    'extract_year',
    'id_to_str',
    # Models
    'CSV_HEADER',
    'ID_FIELDS',
    'MediaKind',
    'Candidate',
    'CrossIds',
    'CrossReferenceRecord',
    'WatchHistoryEntry',
    'OutputRow',
    # Context
    'FALLBACK_RETRY_DELAY',
    'RateBudget',
    'BatchContext',
]
