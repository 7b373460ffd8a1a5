"""
Watch-history item processing for prime-to-simkl.

Turns scraped watch-history entries into Simkl CSV import rows.
"""

import io
import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Union

from utils.config import DEFAULT_OUTPUT_DATE_FORMAT, get_output_date_format
from utils.dates import normalize_date, parse_watch_date
from utils.display import print_export_summary, show_progress
from utils.helpers import format_last_episode, split_title_year
from utils.models import CSV_HEADER, MediaKind, OutputRow, WatchHistoryEntry

from .engine import ReconciliationEngine

logger = logging.getLogger('prime_to_simkl')

WATCH_STATUS_COMPLETED = 'completed'
WATCH_STATUS_WATCHING = 'watching'

# Characters that force a CSV cell to be quoted
_CSV_SPECIAL = (',', '"', '\r', '\n')

EntryLike = Union[WatchHistoryEntry, Dict]


def _as_entry(entry: EntryLike) -> WatchHistoryEntry:
    if isinstance(entry, WatchHistoryEntry):
        return entry
    return WatchHistoryEntry.from_dict(entry)


def media_kind_for(entry: WatchHistoryEntry) -> MediaKind:
    """TV when the entry carries an episode label, movie otherwise."""
    return MediaKind.TV if entry.episode_label else MediaKind.MOVIE


def deduplicate_history(entries: Iterable[EntryLike], locale: Optional[str] = None) -> List[WatchHistoryEntry]:
    """
    Keep only the most recent entry per TV title.

    Movies are never deduplicated. For TV, the entry with the later
    normalized watch date wins; ties and unparseable dates keep the
    entry seen first.

    Args:
        entries: Watch-history entries (or scraper dicts)
        locale: Display-language hint for date parsing

    Returns:
        Movies in input order, followed by one entry per TV title in
        first-seen order
    """
    movies = []
    latest_tv: Dict[str, WatchHistoryEntry] = {}
    latest_dates: Dict[str, date] = {}

    for raw in entries:
        entry = _as_entry(raw)
        if media_kind_for(entry) == MediaKind.MOVIE:
            movies.append(entry)
            continue

        watched = parse_watch_date(entry.date_watched_raw, locale) or date.min
        current = latest_dates.get(entry.title)
        if current is None or watched > current:
            latest_tv[entry.title] = entry
            latest_dates[entry.title] = watched

    deduped = movies + list(latest_tv.values())
    logger.info(f"Deduplicated history: {len(movies)} movies, {len(latest_tv)} TV shows")
    return deduped


class ItemProcessor:
    """
    Build one OutputRow per watch-history entry.
    """

    def __init__(self, engine: ReconciliationEngine,
                 output_date_format: str = DEFAULT_OUTPUT_DATE_FORMAT,
                 locale: Optional[str] = None):
        """
        Initialize processor.

        Args:
            engine: Reconciliation engine used for ID lookups
            output_date_format: strftime format for WatchedDate
            locale: Display-language hint for date parsing
        """
        self.engine = engine
        self.output_date_format = output_date_format
        self.locale = locale

    @classmethod
    def from_config(cls, config: Dict, engine: ReconciliationEngine) -> 'ItemProcessor':
        return cls(engine,
                   output_date_format=get_output_date_format(config),
                   locale=config.get('locale') or None)

    def process(self, entry: EntryLike) -> OutputRow:
        """
        Process one watch-history entry.

        Args:
            entry: WatchHistoryEntry or scraper dict

        Returns:
            OutputRow ready for CSV rendering
        """
        entry = _as_entry(entry)
        media_kind = media_kind_for(entry)
        clean_title, title_year = split_title_year(entry.title)

        record = self.engine.reconcile(clean_title, media_kind, title_year)
        watched_date = normalize_date(entry.date_watched_raw, self.locale, self.output_date_format)

        last_episode = ''
        if media_kind == MediaKind.TV:
            last_episode = format_last_episode(entry.episode_label)

        if media_kind == MediaKind.TV and last_episode:
            watch_status = WATCH_STATUS_WATCHING
        else:
            watch_status = WATCH_STATUS_COMPLETED

        return OutputRow(
            simkl_id=record.simkl_id,
            tvdb_id=record.tvdb_id,
            tmdb_id=record.tmdb_id,
            imdb_id=record.imdb_id,
            mal_id=record.mal_id,
            media_kind=media_kind,
            title=clean_title,
            year=record.resolved_year or title_year,
            last_episode=last_episode,
            watch_status=watch_status,
            watched_date=watched_date,
        )


def process_history(entries: Iterable[EntryLike], processor: ItemProcessor,
                    deduplicate: bool = True, progress: bool = False) -> List[OutputRow]:
    """
    Process a whole watch history sequentially.

    Args:
        entries: Watch-history entries (or scraper dicts)
        processor: Configured ItemProcessor
        deduplicate: Collapse TV entries to the latest per title first
        progress: Show a console progress line

    Returns:
        List of OutputRows, one per surviving entry
    """
    if deduplicate:
        items = deduplicate_history(entries, processor.locale)
    else:
        items = [_as_entry(entry) for entry in entries]

    rows = []
    total = len(items)
    for i, entry in enumerate(items, 1):
        row = processor.process(entry)
        rows.append(row)
        logger.info(f"Processed {row.media_kind.value}: {row.title} ({row.watched_date})")
        if progress:
            show_progress("Processing", i, total)

    context = processor.engine.context
    print_export_summary(len(rows), context.elapsed, dict(context.call_counts),
                         sum(context.rate_limit_waits.values()))
    return rows


def _csv_cell(value, always_quote: bool = False) -> str:
    text = '' if value is None else str(value)
    if always_quote or any(ch in text for ch in _CSV_SPECIAL):
        return '"' + text.replace('"', '""') + '"'
    return text


def render_csv(rows: Iterable[OutputRow]) -> str:
    """
    Render rows as Simkl import CSV text.

    The Title column is always double-quoted; other cells are quoted only
    when they contain a delimiter, quote or newline.

    Args:
        rows: Output rows

    Returns:
        CSV text including the header line
    """
    title_index = CSV_HEADER.index('Title')
    buffer = io.StringIO()
    buffer.write(','.join(CSV_HEADER) + '\n')
    for row in rows:
        cells = [_csv_cell(value, always_quote=(i == title_index))
                 for i, value in enumerate(row.as_list())]
        buffer.write(','.join(cells) + '\n')
    return buffer.getvalue()
