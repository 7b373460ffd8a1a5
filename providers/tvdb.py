"""
TVDB API adapter for prime-to-simkl.
Handles v4 token login, transparent re-authentication, and remote ID lookups.
"""

import logging
from typing import Any, Dict, List, Optional

from utils.config import get_credential
from utils.context import BatchContext
from utils.helpers import extract_year, id_to_str
from utils.models import Candidate, CrossIds, MediaKind

from .api_client import APIClient

logger = logging.getLogger('prime_to_simkl')

TVDB_API_URL = "https://api4.thetvdb.com/v4"

# HTTP request timeout in seconds
TVDB_REQUEST_TIMEOUT = 30

TVDB_SEARCH_TYPES = {MediaKind.MOVIE: 'movie', MediaKind.TV: 'series'}
TVDB_DETAIL_TYPES = {MediaKind.MOVIE: 'movies', MediaKind.TV: 'series'}

# remoteIds sourceName -> CrossIds field
TVDB_REMOTE_SOURCES = {
    'imdb': 'imdb_id',
    'themoviedb.com': 'tmdb_id',
    'tmdb': 'tmdb_id',
}


class TVDBAuthError(Exception):
    """Raised when TVDB authentication fails."""
    pass


class TVDBAPIError(Exception):
    """Raised when TVDB API request fails."""
    pass


class TVDBProvider:
    """
    TV-database adapter with session-token authentication.

    The token is obtained on first use and reused for the whole batch. A 401
    triggers exactly one re-login and retry; a second 401 raises
    TVDBAuthError for that call only.
    """

    key = 'tvdb'
    api_name = 'TVDB'
    primary_field = 'tvdb_id'
    authoritative = False
    provides_release_year = False
    media_kinds = (MediaKind.MOVIE, MediaKind.TV)

    def __init__(self, api_key: Optional[str] = None, context: Optional[BatchContext] = None):
        """
        Initialize TVDB adapter.

        Args:
            api_key: TVDB v4 project API key
            context: Batch context
        """
        self.api_key = api_key
        self.token: Optional[str] = None
        self.http = APIClient(
            api_name=self.api_name,
            base_url=TVDB_API_URL,
            provider_key=self.key,
            context=context,
            exception_class=TVDBAPIError,
            auth_exception_class=TVDBAuthError,
            request_timeout=TVDB_REQUEST_TIMEOUT,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API requests."""
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def authenticate(self) -> str:
        """
        Exchange the API key for a session token.

        Returns:
            The new token

        Raises:
            TVDBAuthError: If login fails or returns no token
        """
        if not self.api_key:
            raise TVDBAuthError("TVDB API key not configured")

        logger.info("Authenticating with TVDB API...")
        try:
            data = self.http.request(
                "POST", "/login",
                data={"apikey": self.api_key},
                headers={"Content-Type": "application/json", "Accept": "application/json"}
            )
        except TVDBAPIError as e:
            raise TVDBAuthError(f"TVDB authentication failed: {e}")

        token = None
        if isinstance(data, dict):
            payload = data.get('data') if isinstance(data.get('data'), dict) else data
            token = payload.get('token')
        if not token:
            raise TVDBAuthError("TVDB authentication response did not contain a token")

        self.token = token
        return token

    def _make_request(self, endpoint: str, params: Optional[Dict] = None,
                      retry_auth: bool = True) -> Any:
        """
        Make an authenticated request, re-logging in once on 401.

        Args:
            endpoint: API endpoint (without base URL)
            params: Query parameters
            retry_auth: Whether to re-authenticate and retry on 401

        Returns:
            Response JSON or None
        """
        if not self.token:
            self.authenticate()

        try:
            return self.http.request("GET", endpoint, params=params, headers=self._get_headers())
        except TVDBAuthError:
            if not retry_auth:
                raise
            logger.info("TVDB token expired, re-authenticating...")
            self.token = None
            self.authenticate()
            return self._make_request(endpoint, params, retry_auth=False)

    def search(self, title: str, media_kind: MediaKind, year: str = '') -> List[Candidate]:
        """
        Search TVDB by title.

        Args:
            title: Title to search
            media_kind: Movie or TV
            year: Optional release year passed through as a filter

        Returns:
            Candidates with TVDB IDs (empty when unconfigured or login fails)
        """
        media_kind = MediaKind.parse(media_kind)
        if not self.is_configured:
            return []

        if not self.token:
            try:
                self.authenticate()
            except TVDBAuthError as e:
                logger.warning(f"TVDB authentication failed, skipping search: {e}")
                return []

        params = {'query': title, 'type': TVDB_SEARCH_TYPES[media_kind]}
        if year:
            params['year'] = year

        data = self._make_request("/search", params)
        results = data.get('data') if isinstance(data, dict) else None
        if not isinstance(results, list):
            return []

        candidates = []
        for item in results:
            if not isinstance(item, dict):
                continue
            tvdb_id = id_to_str(item.get('tvdb_id')) or id_to_str(item.get('id'))
            if not tvdb_id:
                continue
            item_year = extract_year(item.get('year') or item.get('first_air_time'))
            candidates.append(Candidate(
                id=tvdb_id,
                title=item.get('name', ''),
                year=item_year,
                description=item_year,
            ))
        return candidates

    def fetch_cross_ids(self, candidate_id: str, media_kind: MediaKind) -> CrossIds:
        """
        Get the TVDB record and its remote IDs.

        A lookup that fails for reasons other than authorization still
        reports the candidate's own TVDB ID.

        Args:
            candidate_id: TVDB ID
            media_kind: Movie or TV

        Returns:
            CrossIds with tvdb_id and any IMDb/TMDB remote IDs
        """
        media_kind = MediaKind.parse(media_kind)
        if not self.is_configured or not candidate_id:
            return CrossIds()

        fallback = CrossIds(tvdb_id=id_to_str(candidate_id))
        endpoint = f"/{TVDB_DETAIL_TYPES[media_kind]}/{candidate_id}/extended"
        try:
            data = self._make_request(endpoint, {'short': 'true'})
        except TVDBAPIError as e:
            logger.warning(f"TVDB details failed for {candidate_id}: {e}")
            return fallback

        record = data.get('data') if isinstance(data, dict) else None
        if not isinstance(record, dict):
            return fallback

        fields = {'tvdb_id': id_to_str(record.get('id')) or id_to_str(candidate_id)}
        remote_ids = record.get('remoteIds') or []
        if isinstance(remote_ids, list):
            for remote in remote_ids:
                if not isinstance(remote, dict):
                    continue
                target = TVDB_REMOTE_SOURCES.get(str(remote.get('sourceName', '')).lower())
                if target and target not in fields:
                    value = id_to_str(remote.get('id'))
                    if value:
                        fields[target] = value
        return CrossIds(**fields)

    def filter_candidates(self, candidates: List[Candidate], year: str) -> List[Candidate]:
        return list(candidates)

    def test_connection(self) -> bool:
        """Validate the API key by logging in."""
        if not self.is_configured:
            return False
        try:
            self.authenticate()
            return True
        except TVDBAuthError as e:
            logger.warning(f"TVDB API key validation failed: {e}")
            return False


def create_tvdb_provider(config: Dict, context: Optional[BatchContext] = None) -> TVDBProvider:
    """
    Create a TVDB adapter from config.

    Args:
        config: Full config dict containing 'tvdb' section
        context: Batch context

    Returns:
        TVDBProvider (unconfigured when no API key is set)
    """
    return TVDBProvider(api_key=get_credential(config, 'tvdb', 'api_key'), context=context)
