"""
Data model shared by the provider adapters, the reconciliation engine and
the item processor.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, List, Optional

# Column order of the Simkl CSV import format
CSV_HEADER = [
    'simkl_id', 'TVDB_ID', 'TMDB', 'IMDB_ID', 'MAL_ID',
    'Type', 'Title', 'Year', 'LastEpWatched', 'Watchlist',
    'WatchedDate', 'Rating', 'Memo',
]

# Identifier fields of a cross-reference record, in CSV order
ID_FIELDS = ('simkl_id', 'tvdb_id', 'tmdb_id', 'imdb_id', 'mal_id')


class MediaKind(str, Enum):
    """Movie vs. TV classification."""

    MOVIE = 'movie'
    TV = 'tv'

    @classmethod
    def parse(cls, value) -> 'MediaKind':
        """
        Coerce a media kind value.

        Raises:
            ValueError: For anything other than 'movie' or 'tv'; this is a
                caller defect and must not be swallowed.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unrecognized media kind: {value!r}") from None


@dataclass(frozen=True)
class Candidate:
    """One search hit from a provider."""

    id: str
    title: str = ''
    year: str = ''
    # Free-text field the year filter matches against ("(2010)", "2010-04-07")
    description: str = ''


@dataclass(frozen=True)
class CrossIds:
    """
    Identifiers one provider holds for one title.

    Every adapter returns this shape; unknown fields are '' rather than None.
    """

    simkl_id: str = ''
    tvdb_id: str = ''
    tmdb_id: str = ''
    imdb_id: str = ''
    mal_id: str = ''
    release_year: str = ''

    def populated(self) -> Dict[str, str]:
        """Non-empty fields as a dict."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name)}


@dataclass(frozen=True)
class CrossReferenceRecord:
    """Reconciled identifiers for one title."""

    title: str
    media_kind: MediaKind
    year: str = ''
    simkl_id: str = ''
    tvdb_id: str = ''
    tmdb_id: str = ''
    imdb_id: str = ''
    mal_id: str = ''
    resolved_year: str = ''

    @property
    def ids(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in ID_FIELDS}


@dataclass(frozen=True)
class WatchHistoryEntry:
    """One scraped watch-history item (produced by the browser collaborator)."""

    date_watched_raw: str
    title: str
    episode_label: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WatchHistoryEntry':
        """Build from the scraper's {date, title, episode} dicts."""
        return cls(
            date_watched_raw=data.get('date', data.get('date_watched', '')) or '',
            title=data.get('title', '') or '',
            episode_label=data.get('episode') or data.get('episode_label') or None,
        )


@dataclass(frozen=True)
class OutputRow:
    """One Simkl CSV import row."""

    simkl_id: str
    tvdb_id: str
    tmdb_id: str
    imdb_id: str
    mal_id: str
    media_kind: MediaKind
    title: str
    year: str
    last_episode: str
    watch_status: str
    watched_date: str
    rating: str = ''
    memo: str = ''

    def as_list(self) -> List[str]:
        """Values in CSV_HEADER order."""
        return [
            self.simkl_id, self.tvdb_id, self.tmdb_id, self.imdb_id, self.mal_id,
            self.media_kind.value, self.title, self.year, self.last_episode,
            self.watch_status, self.watched_date, self.rating, self.memo,
        ]
