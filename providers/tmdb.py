"""
TMDB API adapter for prime-to-simkl.
Handles title search and external ID lookups.
"""

import logging
from typing import Dict, List, Optional

from utils.config import get_credential
from utils.context import BatchContext
from utils.helpers import extract_year, id_to_str
from utils.models import Candidate, CrossIds, MediaKind

from .api_client import APIClient

logger = logging.getLogger('prime_to_simkl')

TMDB_API_URL = "https://api.themoviedb.org/3"

# HTTP request timeout in seconds
TMDB_REQUEST_TIMEOUT = 15

# Fight Club, used to probe the API key
TMDB_PROBE_MOVIE_ID = 550


class TMDBAPIError(Exception):
    """Raised when TMDB API request fails."""
    pass


class TMDBProvider:
    """
    Movie-database adapter.

    Search hits carry release dates; the external_ids lookup also yields
    the IMDb and TVDB IDs.
    """

    key = 'tmdb'
    api_name = 'TMDB'
    primary_field = 'tmdb_id'
    authoritative = False
    provides_release_year = True
    media_kinds = (MediaKind.MOVIE, MediaKind.TV)

    def __init__(self, api_key: Optional[str] = None, context: Optional[BatchContext] = None):
        """
        Initialize TMDB adapter.

        Args:
            api_key: TMDB v3 API key
            context: Batch context
        """
        self.api_key = api_key
        self.http = APIClient(
            api_name=self.api_name,
            base_url=TMDB_API_URL,
            provider_key=self.key,
            context=context,
            exception_class=TMDBAPIError,
            request_timeout=TMDB_REQUEST_TIMEOUT,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _make_request(self, endpoint: str, params: Optional[Dict] = None):
        params = dict(params or {})
        params['api_key'] = self.api_key
        return self.http.request("GET", endpoint, params=params)

    def search(self, title: str, media_kind: MediaKind, year: str = '') -> List[Candidate]:
        """
        Search TMDB by title.

        Args:
            title: Title to search
            media_kind: Movie or TV
            year: Optional release year (first_air_date_year for TV)

        Returns:
            Candidates in TMDB's relevance order
        """
        media_kind = MediaKind.parse(media_kind)
        if not self.is_configured:
            return []

        params = {'query': title, 'include_adult': 'false'}
        # Add year parameter (different field name for TV)
        if year:
            if media_kind == MediaKind.MOVIE:
                params['year'] = year
            else:
                params['first_air_date_year'] = year

        data = self._make_request(f"/search/{media_kind.value}", params)
        results = data.get('results') if isinstance(data, dict) else None
        if not isinstance(results, list):
            return []

        date_field = 'release_date' if media_kind == MediaKind.MOVIE else 'first_air_date'
        title_field = 'title' if media_kind == MediaKind.MOVIE else 'name'
        candidates = []
        for item in results:
            if not isinstance(item, dict) or not id_to_str(item.get('id')):
                continue
            release_date = item.get(date_field) or ''
            candidates.append(Candidate(
                id=id_to_str(item['id']),
                title=item.get(title_field, ''),
                year=extract_year(release_date),
                description=release_date,
            ))
        return candidates

    def fetch_cross_ids(self, candidate_id: str, media_kind: MediaKind) -> CrossIds:
        """
        Get external IDs for a TMDB title.

        Args:
            candidate_id: TMDB ID
            media_kind: Movie or TV

        Returns:
            CrossIds with tmdb_id and whatever IMDb/TVDB IDs TMDB holds
        """
        media_kind = MediaKind.parse(media_kind)
        if not self.is_configured or not candidate_id:
            return CrossIds()

        data = self._make_request(f"/{media_kind.value}/{candidate_id}/external_ids")
        if not isinstance(data, dict):
            return CrossIds(tmdb_id=id_to_str(candidate_id))

        return CrossIds(
            tmdb_id=id_to_str(data.get('id')) or id_to_str(candidate_id),
            imdb_id=id_to_str(data.get('imdb_id')),
            tvdb_id=id_to_str(data.get('tvdb_id')),
        )

    def filter_candidates(self, candidates: List[Candidate], year: str) -> List[Candidate]:
        return list(candidates)

    def test_connection(self) -> bool:
        """Check the API key against a known movie."""
        if not self.is_configured:
            return False
        try:
            return self._make_request(f"/movie/{TMDB_PROBE_MOVIE_ID}") is not None
        except TMDBAPIError as e:
            logger.warning(f"TMDB API key validation failed: {e}")
            return False


def create_tmdb_provider(config: Dict, context: Optional[BatchContext] = None) -> TMDBProvider:
    """
    Create a TMDB adapter from config.

    Args:
        config: Full config dict containing 'tmdb' section
        context: Batch context

    Returns:
        TMDBProvider (unconfigured when no API key is set)
    """
    return TMDBProvider(api_key=get_credential(config, 'tmdb', 'api_key'), context=context)
