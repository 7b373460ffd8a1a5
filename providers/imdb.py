"""
IMDb title lookups via the keyless imdbapi.dev service.
"""

import logging
from typing import Dict, List, Optional

from utils.context import BatchContext
from utils.helpers import extract_year, id_to_str
from utils.models import Candidate, CrossIds, MediaKind

from .adapter import filter_by_year_substring
from .api_client import APIClient

logger = logging.getLogger('prime_to_simkl')

IMDB_API_URL = "https://imdbapi.dev"

# The free API is slow under load; keep requests from hanging the batch
IMDB_REQUEST_TIMEOUT = 5

IMDB_SEARCH_TYPES = {MediaKind.MOVIE: 'movie', MediaKind.TV: 'tvSeries'}


class IMDBAPIError(Exception):
    """Raised when imdbapi.dev request fails."""
    pass


class IMDBProvider:
    """
    Title-registry adapter.

    Needs no credentials, so it is always configured. Responses are
    shape-checked and anything unexpected degrades to no results.
    """

    key = 'imdb'
    api_name = 'IMDB'
    primary_field = 'imdb_id'
    authoritative = False
    provides_release_year = False
    media_kinds = (MediaKind.MOVIE, MediaKind.TV)

    def __init__(self, context: Optional[BatchContext] = None):
        self.http = APIClient(
            api_name=self.api_name,
            base_url=IMDB_API_URL,
            provider_key=self.key,
            context=context,
            exception_class=IMDBAPIError,
            request_timeout=IMDB_REQUEST_TIMEOUT,
        )

    @property
    def is_configured(self) -> bool:
        return True

    def search(self, title: str, media_kind: MediaKind, year: str = '') -> List[Candidate]:
        """
        Search IMDb titles.

        Args:
            title: Title to search
            media_kind: Movie or TV
            year: Unused by the service; applied afterwards by filter_candidates

        Returns:
            Candidates whose description is "(YYYY)" when a year is known
        """
        media_kind = MediaKind.parse(media_kind)
        params = {'query': title, 'type': IMDB_SEARCH_TYPES[media_kind]}
        try:
            data = self.http.request("GET", "/search", params=params)
        except IMDBAPIError as e:
            logger.warning(f"IMDB search failed: {e}")
            return []

        results = data.get('data') if isinstance(data, dict) else None
        if not isinstance(results, list):
            if data is not None:
                logger.warning("IMDB API returned unexpected data structure")
            return []

        candidates = []
        for item in results:
            if not isinstance(item, dict):
                continue
            imdb_id = id_to_str(item.get('id'))
            if not imdb_id:
                continue
            item_year = extract_year(item.get('year'))
            candidates.append(Candidate(
                id=imdb_id,
                title=str(item.get('title') or ''),
                year=item_year,
                description=f"({item_year})" if item_year else '',
            ))
        return candidates

    def fetch_cross_ids(self, candidate_id: str, media_kind: MediaKind) -> CrossIds:
        """
        Confirm an IMDb ID against the title endpoint.

        The registry only knows its own IDs, so the fragment carries
        imdb_id alone; lookup failures still report the candidate ID.
        """
        MediaKind.parse(media_kind)
        if not candidate_id:
            return CrossIds()

        fallback = CrossIds(imdb_id=id_to_str(candidate_id))
        try:
            data = self.http.request("GET", f"/title/{candidate_id}")
        except IMDBAPIError as e:
            logger.warning(f"IMDB details failed: {e}")
            return fallback

        if not isinstance(data, dict) or not data.get('id'):
            return fallback
        return CrossIds(imdb_id=id_to_str(data['id']))

    def filter_candidates(self, candidates: List[Candidate], year: str) -> List[Candidate]:
        return filter_by_year_substring(candidates, year)

    def test_connection(self) -> bool:
        """Check imdbapi.dev availability."""
        try:
            return self.http.request("GET", "/search",
                                     params={'query': 'inception', 'type': 'movie'}) is not None
        except IMDBAPIError as e:
            logger.warning(f"IMDB API availability check failed: {e}")
            return False


def create_imdb_provider(config: Dict, context: Optional[BatchContext] = None) -> IMDBProvider:
    """Create the keyless IMDb adapter."""
    return IMDBProvider(context=context)
