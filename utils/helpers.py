"""
Miscellaneous helper utilities for prime-to-simkl.
"""

import re
from typing import Optional, Tuple

# Trailing " (2010)" on a watch-history title
TITLE_YEAR_PATTERN = re.compile(r'\s*\((\d{4})\)\s*$')

_FIRST_NUMBER = re.compile(r'(\d+)')
_LEADING_YEAR = re.compile(r'^(\d{4})')


def split_title_year(title: str) -> Tuple[str, str]:
    """
    Split a trailing "(YYYY)" off a title.

    Args:
        title: Title as shown in the watch history, e.g. "Inception (2010)"

    Returns:
        Tuple of (clean title, year string or '')
    """
    if not title:
        return '', ''

    match = TITLE_YEAR_PATTERN.search(title)
    if not match:
        return title.strip(), ''
    return title[:match.start()].strip(), match.group(1)


def format_last_episode(episode_label: Optional[str]) -> str:
    """
    Format an episode label as a Simkl season-1 episode reference.

    "Episode 7" -> "s1e7"; labels without a number give ''.
    """
    if not episode_label:
        return ''
    match = _FIRST_NUMBER.search(episode_label)
    if not match:
        return ''
    return f"s1e{int(match.group(1))}"


def extract_year(value) -> str:
    """
    Pull a 4-digit year from a date string or a year value.

    Args:
        value: '2010-07-16', 2010, '2010', or None

    Returns:
        Year string, or '' when none is present
    """
    if value is None:
        return ''
    match = _LEADING_YEAR.match(str(value).strip())
    return match.group(1) if match else ''


def id_to_str(value) -> str:
    """Normalize an external ID to a string, with None/0/'' becoming ''."""
    if value is None or value == '' or value == 0:
        return ''
    if isinstance(value, bool):
        return ''
    return str(value).strip()
