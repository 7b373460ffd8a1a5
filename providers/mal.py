"""
MyAnimeList API adapter for prime-to-simkl.
Handles client-credential token exchange with a client-ID header fallback.
"""

import logging
from typing import Any, Dict, List, Optional

from utils.config import get_credential
from utils.context import BatchContext
from utils.helpers import extract_year, id_to_str
from utils.models import Candidate, CrossIds, MediaKind

from .adapter import filter_by_year_substring
from .api_client import APIClient

logger = logging.getLogger('prime_to_simkl')

MAL_API_URL = "https://api.myanimelist.net/v2"
MAL_TOKEN_URL = "https://myanimelist.net/v1/oauth2/token"

# HTTP request timeout in seconds
MAL_REQUEST_TIMEOUT = 30

MAL_SEARCH_LIMIT = 5

# MAL rejects search queries longer than this
MAL_MAX_QUERY_LENGTH = 64


class MALAuthError(Exception):
    """Raised when MyAnimeList rejects the credentials."""
    pass


class MALAPIError(Exception):
    """Raised when MyAnimeList API request fails."""
    pass


class MALProvider:
    """
    Anime-catalog adapter, consulted for TV titles only.

    With a client secret it tries to exchange the credential pair for a
    bearer token once per batch; if that fails it quietly uses the
    X-MAL-CLIENT-ID header instead.
    """

    key = 'mal'
    api_name = 'MyAnimeList'
    primary_field = 'mal_id'
    authoritative = False
    provides_release_year = False
    media_kinds = (MediaKind.TV,)

    def __init__(self, client_id: Optional[str] = None,
                 client_secret: Optional[str] = None,
                 context: Optional[BatchContext] = None):
        """
        Initialize MyAnimeList adapter.

        Args:
            client_id: MAL API client ID
            client_secret: MAL client secret (enables the bearer-token path)
            context: Batch context
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.access_token: Optional[str] = None
        self._token_exchange_failed = False
        self.http = APIClient(
            api_name=self.api_name,
            base_url=MAL_API_URL,
            provider_key=self.key,
            context=context,
            exception_class=MALAPIError,
            auth_exception_class=MALAuthError,
            request_timeout=MAL_REQUEST_TIMEOUT,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id)

    def get_access_token(self) -> Optional[str]:
        """
        Exchange client ID and secret for a bearer token.

        Never raises; returns None when the exchange is unavailable or fails.
        """
        if not self.client_id or not self.client_secret:
            return None

        try:
            data = self.http.request(
                "POST", MAL_TOKEN_URL,
                form={
                    'client_id': self.client_id,
                    'client_secret': self.client_secret,
                    'grant_type': 'client_credentials',
                },
                headers={'Content-Type': 'application/x-www-form-urlencoded'}
            )
        except (MALAPIError, MALAuthError) as e:
            logger.warning(f"MAL OAuth failed, using client ID header: {e}")
            self._token_exchange_failed = True
            return None

        token = data.get('access_token') if isinstance(data, dict) else None
        if not token:
            logger.warning("MAL OAuth returned no access token, using client ID header")
            self._token_exchange_failed = True
            return None

        self.access_token = token
        return token

    def _get_headers(self) -> Dict[str, str]:
        """Bearer token when available, client-ID header otherwise."""
        if not self.access_token and self.client_secret and not self._token_exchange_failed:
            self.get_access_token()
        if self.access_token:
            return {'Authorization': f'Bearer {self.access_token}'}
        return {'X-MAL-CLIENT-ID': self.client_id}

    def _make_request(self, endpoint: str, params: Dict) -> Any:
        """
        GET with the current headers, dropping a rejected bearer token once.

        A 401 while a token is in use clears the token, stops further
        exchanges for this batch and retries with the client-ID header.
        """
        try:
            return self.http.request("GET", endpoint, params=params, headers=self._get_headers())
        except MALAuthError:
            if not self.access_token:
                raise
            logger.warning("MAL rejected the bearer token, using client ID header")
            self.access_token = None
            self._token_exchange_failed = True
            return self.http.request("GET", endpoint, params=params, headers=self._get_headers())

    def search(self, title: str, media_kind: MediaKind = MediaKind.TV, year: str = '') -> List[Candidate]:
        """
        Search anime by title.

        Args:
            title: Title to search
            media_kind: Must be TV; movies return no candidates
            year: Applied afterwards by filter_candidates

        Returns:
            Candidates whose description is the anime's start_date
        """
        media_kind = MediaKind.parse(media_kind)
        if not self.is_configured or media_kind not in self.media_kinds:
            return []

        params = {
            'q': title[:MAL_MAX_QUERY_LENGTH],
            'limit': MAL_SEARCH_LIMIT,
            'fields': 'id,title,start_date',
        }
        data = self._make_request("/anime", params)
        results = data.get('data') if isinstance(data, dict) else None
        if not isinstance(results, list):
            return []

        candidates = []
        for item in results:
            node = item.get('node') if isinstance(item, dict) else None
            if not isinstance(node, dict) or not id_to_str(node.get('id')):
                continue
            start_date = node.get('start_date') or ''
            candidates.append(Candidate(
                id=id_to_str(node['id']),
                title=node.get('title', ''),
                year=extract_year(start_date),
                description=start_date,
            ))
        return candidates

    def fetch_cross_ids(self, candidate_id: str, media_kind: MediaKind = MediaKind.TV) -> CrossIds:
        """
        Confirm a MAL ID against the anime details endpoint.

        Args:
            candidate_id: MAL anime ID
            media_kind: Must be TV

        Returns:
            CrossIds with mal_id
        """
        media_kind = MediaKind.parse(media_kind)
        if not self.is_configured or not candidate_id or media_kind not in self.media_kinds:
            return CrossIds()

        data = self._make_request(f"/anime/{candidate_id}", {'fields': 'id,title,start_date'})
        if not isinstance(data, dict):
            return CrossIds(mal_id=id_to_str(candidate_id))
        return CrossIds(mal_id=id_to_str(data.get('id')) or id_to_str(candidate_id))

    def filter_candidates(self, candidates: List[Candidate], year: str) -> List[Candidate]:
        return filter_by_year_substring(candidates, year)

    def test_connection(self) -> bool:
        """
        Validate credentials: bearer token if a secret is set, else a client-ID search.
        """
        if not self.is_configured:
            return False
        if self.client_secret and self.get_access_token():
            return True
        try:
            return self.http.request("GET", "/anime", params={'q': 'test', 'limit': 1},
                                     headers={'X-MAL-CLIENT-ID': self.client_id}) is not None
        except (MALAPIError, MALAuthError) as e:
            logger.warning(f"MyAnimeList API validation failed: {e}")
            return False


def create_mal_provider(config: Dict, context: Optional[BatchContext] = None) -> MALProvider:
    """
    Create a MyAnimeList adapter from config.

    Args:
        config: Full config dict containing 'mal' section
        context: Batch context

    Returns:
        MALProvider (unconfigured when no client ID is set)
    """
    return MALProvider(
        client_id=get_credential(config, 'mal', 'client_id'),
        client_secret=get_credential(config, 'mal', 'client_secret'),
        context=context,
    )
