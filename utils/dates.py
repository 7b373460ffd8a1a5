"""
Watch-date normalization for prime-to-simkl.

Prime Video renders the watch-history date headers in the account's display
language ("April 23, 2024", "23. April 2024", "23 de abril de 2024",
"2024年4月23日", ...). Everything here turns such strings into one calendar
date, falling back to a fixed sentinel so every watched item still gets a row.
"""

import re
import logging
import unicodedata
from datetime import date, datetime
from typing import Dict, List, Optional

import dateutil.parser

logger = logging.getLogger('prime_to_simkl')

ISO_DATE_FORMAT = '%Y-%m-%d'

# Returned when nothing in the string can be read as a date
SENTINEL_DATE = date(2023, 1, 1)

# dateutil fills missing components from this instead of today's date
_PARSE_DEFAULT = datetime(2000, 1, 1)

# Locales whose numeric dates read month first ("04/23/2024")
_MONTH_FIRST_LOCALES = ('en', 'en-us')

_ENGLISH_MONTHS = [
    'january', 'february', 'march', 'april', 'may', 'june',
    'july', 'august', 'september', 'october', 'november', 'december',
]
_ENGLISH_ABBREVIATIONS = [
    'jan', 'feb', 'mar', 'apr', 'may', 'jun',
    'jul', 'aug', 'sep', 'oct', 'nov', 'dec',
]
_GERMAN_MONTHS = [
    'januar', 'februar', 'märz', 'april', 'mai', 'juni',
    'juli', 'august', 'september', 'oktober', 'november', 'dezember',
]
_SPANISH_MONTHS = [
    'enero', 'febrero', 'marzo', 'abril', 'mayo', 'junio',
    'julio', 'agosto', 'septiembre', 'octubre', 'noviembre', 'diciembre',
]
_FRENCH_MONTHS = [
    'janvier', 'février', 'mars', 'avril', 'mai', 'juin',
    'juillet', 'août', 'septembre', 'octobre', 'novembre', 'décembre',
]
_PORTUGUESE_MONTHS = [
    'janeiro', 'fevereiro', 'março', 'abril', 'maio', 'junho',
    'julho', 'agosto', 'setembro', 'outubro', 'novembro', 'dezembro',
]
_ITALIAN_MONTHS = [
    'gennaio', 'febbraio', 'marzo', 'aprile', 'maggio', 'giugno',
    'luglio', 'agosto', 'settembre', 'ottobre', 'novembre', 'dicembre',
]
_GERMAN_ABBREVIATIONS = [
    'jan', 'feb', 'mär', 'apr', 'mai', 'jun',
    'jul', 'aug', 'sep', 'okt', 'nov', 'dez',
]
_SPANISH_ABBREVIATIONS = [
    'ene', 'feb', 'mar', 'abr', 'may', 'jun',
    'jul', 'ago', 'sept', 'oct', 'nov', 'dic',
]
_FRENCH_ABBREVIATIONS = [
    'janv', 'févr', 'mars', 'avr', 'mai', 'juin',
    'juil', 'août', 'sept', 'oct', 'nov', 'déc',
]
_PORTUGUESE_ABBREVIATIONS = [
    'jan', 'fev', 'mar', 'abr', 'mai', 'jun',
    'jul', 'ago', 'set', 'out', 'nov', 'dez',
]
_ITALIAN_ABBREVIATIONS = [
    'gen', 'feb', 'mar', 'apr', 'mag', 'giu',
    'lug', 'ago', 'set', 'ott', 'nov', 'dic',
]
_CJK_MONTHS = [
    '一月', '二月', '三月', '四月', '五月', '六月',
    '七月', '八月', '九月', '十月', '十一月', '十二月',
]

# locale tag -> {month name: month index 0-11}
LOCALE_MONTHS: Dict[str, Dict[str, int]] = {}

# Union of every registered table; first registration of a name wins
MONTH_NAMES: Dict[str, int] = {}

# "23 April 2024", "23. April 2024", "23 de abril de 2024"
_DAY_MONTH_YEAR = re.compile(r'(\d{1,2})\.?\s+(?:de\s+)?([^\W\d_]+)\.?,?\s+(?:de\s+)?(\d{4})')
# "April 23, 2024"
_MONTH_DAY_YEAR = re.compile(r'([^\W\d_]+)\.?\s+(\d{1,2}),?\s+(\d{4})')
# "2024年4月23日" (Chinese and Japanese)
_CJK_YEAR_MONTH_DAY = re.compile(r'(\d{4})\s*年\s*(\d{1,2})\s*月\s*(\d{1,2})\s*日')
_ISO_DATE = re.compile(r'(\d{4})-(\d{2})-(\d{2})')
_NUMBER_RUN = re.compile(r'\d+')


def register_month_names(locale: str, names: List[str]) -> None:
    """
    Register a locale's month names.

    Args:
        locale: Locale tag such as 'de' or 'pt-BR'
        names: Twelve month names, January first
    """
    if len(names) != 12:
        raise ValueError(f"Expected 12 month names for {locale}, got {len(names)}")

    table = LOCALE_MONTHS.setdefault(locale.lower(), {})
    for index, name in enumerate(names):
        key = name.lower()
        table.setdefault(key, index)
        MONTH_NAMES.setdefault(key, index)


def _strip_accents(name: str) -> str:
    decomposed = unicodedata.normalize('NFKD', name)
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch))


register_month_names('en', _ENGLISH_MONTHS)
register_month_names('en', _ENGLISH_ABBREVIATIONS)
register_month_names('de', _GERMAN_MONTHS)
register_month_names('de', [name.replace('ä', 'ae') for name in _GERMAN_MONTHS])
register_month_names('de', _GERMAN_ABBREVIATIONS)
register_month_names('es-es', _SPANISH_MONTHS)
register_month_names('es-419', _SPANISH_MONTHS)
register_month_names('es-419', [name.replace('septiembre', 'setiembre') for name in _SPANISH_MONTHS])
register_month_names('es-es', _SPANISH_ABBREVIATIONS)
register_month_names('es-419', _SPANISH_ABBREVIATIONS)
register_month_names('es-419', [name.replace('sept', 'sep') for name in _SPANISH_ABBREVIATIONS])
register_month_names('fr', _FRENCH_MONTHS)
register_month_names('fr', [_strip_accents(name) for name in _FRENCH_MONTHS])
register_month_names('fr', _FRENCH_ABBREVIATIONS)
register_month_names('fr', [_strip_accents(name) for name in _FRENCH_ABBREVIATIONS])
register_month_names('pt-br', _PORTUGUESE_MONTHS)
register_month_names('pt-pt', _PORTUGUESE_MONTHS)
register_month_names('pt-pt', [_strip_accents(name) for name in _PORTUGUESE_MONTHS])
register_month_names('pt-br', _PORTUGUESE_ABBREVIATIONS)
register_month_names('pt-pt', _PORTUGUESE_ABBREVIATIONS)
register_month_names('zh-cn', _CJK_MONTHS)
register_month_names('zh-tw', _CJK_MONTHS)
register_month_names('ja', _CJK_MONTHS)
register_month_names('it', _ITALIAN_MONTHS)
register_month_names('it', _ITALIAN_ABBREVIATIONS)


def _locale_tables(locale: Optional[str]) -> List[Dict[str, int]]:
    """Tables matching a locale tag, exact tag before bare language."""
    if not locale:
        return []
    tag = locale.replace('_', '-').lower()
    language = tag.split('-')[0]
    tables = []
    if tag in LOCALE_MONTHS:
        tables.append(LOCALE_MONTHS[tag])
    for key, table in LOCALE_MONTHS.items():
        if key != tag and key.split('-')[0] == language:
            tables.append(table)
    return tables


def lookup_month(name: str, locale: Optional[str] = None) -> Optional[int]:
    """
    Resolve a localized month name to a month index (0-11).

    The display-language tables are consulted first when a locale is given,
    then the union of all registered tables.
    """
    key = name.lower().rstrip('.')
    for table in _locale_tables(locale):
        if key in table:
            return table[key]
    return MONTH_NAMES.get(key)


def _build_date(year, month, day) -> Optional[date]:
    try:
        return date(int(year), int(month), int(day))
    except (TypeError, ValueError):
        return None


def _parse_general(raw: str, locale: Optional[str] = None) -> Optional[date]:
    dayfirst = bool(locale) and locale.replace('_', '-').lower() not in _MONTH_FIRST_LOCALES
    try:
        return dateutil.parser.parse(raw, default=_PARSE_DEFAULT, dayfirst=dayfirst).date()
    except (ValueError, OverflowError):
        return None


def _parse_month_names(raw: str, locale: Optional[str]) -> Optional[date]:
    match = _DAY_MONTH_YEAR.search(raw)
    if match:
        day, month, year = match.groups()
        index = lookup_month(month, locale)
        if index is not None:
            parsed = _build_date(year, index + 1, day)
            if parsed:
                return parsed

    match = _MONTH_DAY_YEAR.search(raw)
    if match:
        month, day, year = match.groups()
        index = lookup_month(month, locale)
        if index is not None:
            parsed = _build_date(year, index + 1, day)
            if parsed:
                return parsed

    match = _CJK_YEAR_MONTH_DAY.search(raw)
    if match:
        year, month, day = match.groups()
        return _build_date(year, month, day)

    return None


def _parse_iso(raw: str) -> Optional[date]:
    match = _ISO_DATE.search(raw)
    if match:
        year, month, day = match.groups()
        return _build_date(year, month, day)
    return None


def _parse_number_runs(raw: str) -> Optional[date]:
    numbers = _NUMBER_RUN.findall(raw)
    if len(numbers) < 3:
        return None
    # Assume day, month, year
    day, month, year = numbers[0], numbers[1], numbers[2]
    if len(year) == 2:
        year = f"20{year}"
    return _build_date(year, month, day)


def parse_watch_date(raw: str, locale: Optional[str] = None) -> Optional[date]:
    """
    Parse a locale-formatted watch date.

    Attempts, first success wins: the general-purpose parser, localized
    month-name patterns (including the CJK year/month/day form), ISO
    YYYY-MM-DD, and finally the first three numeric runs read as
    day, month, year.

    Args:
        raw: Date string as rendered on the watch-history page
        locale: Optional display-language tag used to prefer that locale's month names

    Returns:
        Parsed date, or None when nothing matched
    """
    if not raw or not str(raw).strip():
        return None

    text = str(raw).replace('\u00a0', ' ').strip()

    for step in (lambda value: _parse_general(value, locale),
                 lambda value: _parse_month_names(value, locale),
                 _parse_iso,
                 _parse_number_runs):
        parsed = step(text)
        if parsed is not None:
            return parsed

    return None


def normalize_date(raw: str, locale: Optional[str] = None,
                   output_format: str = ISO_DATE_FORMAT) -> str:
    """
    Normalize a watch-date string to the canonical output format.

    Unparseable input yields SENTINEL_DATE and a warning rather than an error.

    Args:
        raw: Date string as rendered on the watch-history page
        locale: Optional display-language tag
        output_format: strftime format for the result (ISO by default)

    Returns:
        Formatted date string
    """
    parsed = parse_watch_date(raw, locale)
    if parsed is None:
        logger.warning(f"Could not parse date: {raw!r}, using {SENTINEL_DATE.isoformat()}")
        parsed = SENTINEL_DATE
    return parsed.strftime(output_format)
