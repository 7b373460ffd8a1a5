"""
Console and logging helpers for prime-to-simkl.
Coloured status lines, the export progress indicator, and logger setup.
"""

import sys
import re
import logging
from typing import Dict, Optional

# ANSI color codes
RED = '\033[91m'
GREEN = '\033[92m'
YELLOW = '\033[93m'
CYAN = '\033[96m'
RESET = '\033[0m'

# Matches colour codes so they can be kept out of log files
ANSI_PATTERN = re.compile(r'\x1b\[[0-9;]*m')

LOGGER_NAME = 'prime_to_simkl'

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Custom formatter that adds colors to log levels"""

    LEVEL_COLORS = {
        logging.DEBUG: CYAN,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: RED,
    }

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelno, '')
        record.levelname = f"{color}{record.levelname}{RESET}"
        return super().format(record)


class PlainFormatter(logging.Formatter):
    """Formatter for log files: strips any ANSI colour codes from the message."""

    def format(self, record):
        return ANSI_PATTERN.sub('', super().format(record))


def _resolve_level(debug: bool, config: Optional[Dict]) -> int:
    if debug:
        return logging.DEBUG
    level_name = ((config or {}).get('logging') or {}).get('level')
    if not level_name:
        return logging.INFO
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def setup_logging(debug: bool = False, config: dict = None, colored: bool = False,
                  log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure logging for an export run.

    Args:
        debug: If True, set level to DEBUG. Otherwise use config or default to INFO.
        config: Optional config dict that may contain logging.level setting.
        colored: Colour level names on the console.
        log_file: Optional path; the same records are appended there without colour codes.

    Returns:
        The prime_to_simkl logger.
    """
    level = _resolve_level(debug, config)

    console = logging.StreamHandler()
    console.setLevel(level)
    formatter_class = ColoredFormatter if colored else logging.Formatter
    console.setFormatter(formatter_class(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # Replace, don't stack, when called again
    root_logger.handlers = [console]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(PlainFormatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        root_logger.addHandler(file_handler)

    # Keep per-request chatter out of the export log
    for noisy in ('urllib3', 'requests'):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    return logger


def log_warning(message: str):
    """Log warning and print with yellow color"""
    logging.getLogger(LOGGER_NAME).warning(message)
    print(f"{YELLOW}{message}{RESET}")


def print_provider_status(api_name: str, valid: bool):
    """Print one credential-check result, green when valid."""
    logging.getLogger(LOGGER_NAME).info(f"{api_name} API: {'Valid' if valid else 'Invalid'}")
    if valid:
        print(f"{GREEN}{api_name} API: Valid{RESET}")
    else:
        print(f"{RED}{api_name} API: Invalid{RESET}")


def print_export_summary(total: int, elapsed: float, call_counts: Dict[str, int],
                         rate_limit_waits: int = 0):
    """
    Print and log the end-of-batch summary.

    Args:
        total: Rows produced
        elapsed: Seconds spent on the batch
        call_counts: HTTP calls per provider key
        rate_limit_waits: Number of rate-limit backoffs
    """
    calls = ', '.join(f"{key}={count}" for key, count in sorted(call_counts.items())) or 'none'
    message = f"Processed {total} items in {elapsed:.1f}s (API calls: {calls}; rate-limit waits: {rate_limit_waits})"
    logging.getLogger(LOGGER_NAME).info(message)
    print(f"{GREEN}{message}{RESET}")


def show_progress(prefix: str, current: int, total: int):
    """
    Rewrite a single console line with the batch progress.

    Args:
        prefix: Label shown before the counter
        current: Items done so far
        total: Items in the batch
    """
    pct = int((current / total) * 100) if total > 0 else 0
    sys.stdout.write(f"\r{CYAN}{prefix} {current}/{total} ({pct}%){RESET}")
    sys.stdout.flush()
    if current == total:
        sys.stdout.write("\n")
