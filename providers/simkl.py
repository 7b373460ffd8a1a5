"""
Simkl API adapter for prime-to-simkl.
Simkl aggregates catalog IDs, so one detail lookup can fill every column at once.
"""

import logging
from typing import Dict, List, Optional, Any

from utils.config import get_credential
from utils.context import BatchContext
from utils.helpers import extract_year, id_to_str
from utils.models import Candidate, CrossIds, MediaKind

from .api_client import APIClient

logger = logging.getLogger('prime_to_simkl')

# Simkl API endpoints
SIMKL_API_URL = "https://api.simkl.com"

# HTTP request timeout in seconds
SIMKL_REQUEST_TIMEOUT = 30

# Simkl names the TV catalog 'tv' in search and detail paths, movies differ
SIMKL_SEARCH_TYPES = {MediaKind.MOVIE: 'movie', MediaKind.TV: 'tv'}
SIMKL_DETAIL_TYPES = {MediaKind.MOVIE: 'movies', MediaKind.TV: 'tv'}


class SimklAPIError(Exception):
    """Raised when Simkl API request fails."""
    pass


class SimklProvider:
    """
    Catalog-aggregator adapter.

    Authoritative: always consulted when listed, and its IDs overwrite
    whatever is in the record.
    """

    key = 'simkl'
    api_name = 'Simkl'
    primary_field = 'simkl_id'
    authoritative = True
    provides_release_year = True
    media_kinds = (MediaKind.MOVIE, MediaKind.TV)

    def __init__(self, client_id: Optional[str] = None,
                 context: Optional[BatchContext] = None):
        """
        Initialize Simkl adapter.

        Args:
            client_id: Simkl API application client ID (sent as simkl-api-key)
            context: Batch context
        """
        self.client_id = client_id
        self.http = APIClient(
            api_name=self.api_name,
            base_url=SIMKL_API_URL,
            provider_key=self.key,
            context=context,
            exception_class=SimklAPIError,
            request_timeout=SIMKL_REQUEST_TIMEOUT,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id)

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API requests."""
        return {
            "Content-Type": "application/json",
            "simkl-api-key": self.client_id
        }

    def _make_request(self, endpoint: str, params: Optional[Dict] = None) -> Any:
        params = dict(params or {})
        params['client_id'] = self.client_id
        return self.http.request("GET", endpoint, params=params, headers=self._get_headers())

    def search(self, title: str, media_kind: MediaKind, year: str = '') -> List[Candidate]:
        """
        Search Simkl by title.

        Args:
            title: Title to search
            media_kind: Movie or TV
            year: Optional release year passed through as a filter

        Returns:
            Candidates with a Simkl ID (empty when unconfigured or not found)
        """
        media_kind = MediaKind.parse(media_kind)
        if not self.is_configured:
            return []

        params = {'q': title}
        if year:
            params['year'] = year

        results = self._make_request(f"/search/{SIMKL_SEARCH_TYPES[media_kind]}", params)
        if not isinstance(results, list):
            return []

        candidates = []
        for item in results:
            if not isinstance(item, dict):
                continue
            ids = item.get('ids') or {}
            simkl_id = id_to_str(ids.get('simkl') or ids.get('simkl_id'))
            if not simkl_id:
                continue
            item_year = extract_year(item.get('year'))
            candidates.append(Candidate(
                id=simkl_id,
                title=item.get('title', ''),
                year=item_year,
                description=item_year,
            ))
        return candidates

    def fetch_cross_ids(self, candidate_id: str, media_kind: MediaKind) -> CrossIds:
        """
        Get every catalog ID Simkl holds for one title.

        Args:
            candidate_id: Simkl ID
            media_kind: Movie or TV

        Returns:
            CrossIds (empty when unconfigured or not found)
        """
        media_kind = MediaKind.parse(media_kind)
        if not self.is_configured or not candidate_id:
            return CrossIds()

        data = self._make_request(f"/{SIMKL_DETAIL_TYPES[media_kind]}/{candidate_id}",
                                  {'extended': 'full'})
        if not isinstance(data, dict) or not isinstance(data.get('ids'), dict):
            return CrossIds()

        ids = data['ids']
        return CrossIds(
            simkl_id=id_to_str(ids.get('simkl')) or id_to_str(candidate_id),
            tvdb_id=id_to_str(ids.get('tvdb')),
            tmdb_id=id_to_str(ids.get('tmdb')),
            imdb_id=id_to_str(ids.get('imdb')),
            mal_id=id_to_str(ids.get('mal')),
            release_year=extract_year(data.get('year')),
        )

    def filter_candidates(self, candidates: List[Candidate], year: str) -> List[Candidate]:
        # Year already went to the server as a query filter
        return list(candidates)

    def test_connection(self) -> bool:
        """
        Probe the API key with a known title.

        Returns:
            True if the key returns search results
        """
        if not self.is_configured:
            return False
        try:
            results = self._make_request("/search/movie", {'q': 'inception'})
        except SimklAPIError as e:
            logger.warning(f"Simkl API key validation failed: {e}")
            return False
        return isinstance(results, list) and len(results) > 0


def create_simkl_provider(config: Dict, context: Optional[BatchContext] = None) -> SimklProvider:
    """
    Create a Simkl adapter from config.

    Args:
        config: Full config dict containing 'simkl' section
        context: Batch context

    Returns:
        SimklProvider (unconfigured when no client ID is set)
    """
    return SimklProvider(
        client_id=get_credential(config, 'simkl', 'client_id'),
        context=context,
    )
