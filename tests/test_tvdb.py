"""Tests for providers/tvdb.py - TVDB adapter."""

import pytest
from unittest.mock import Mock, patch

from providers.tvdb import (
    TVDBProvider,
    TVDBAuthError,
    create_tvdb_provider,
    TVDB_API_URL,
)
from utils.context import BatchContext
from utils.models import CrossIds, MediaKind


def make_response(status_code, json_data=None, headers=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = json_data
    response.headers = headers or {}
    response.text = ''
    return response


def login_response(token='token-1'):
    return make_response(200, {'status': 'success', 'data': {'token': token}})


@pytest.fixture
def provider():
    return TVDBProvider(api_key="tvdb_key", context=BatchContext(sleep=Mock()))


class TestTVDBAuthenticate:
    """Tests for token login."""

    @patch('providers.api_client.requests.request')
    def test_authenticate_stores_token(self, mock_request, provider):
        """Test login posts the API key and keeps the token."""
        mock_request.return_value = login_response('abc')

        assert provider.authenticate() == 'abc'
        assert provider.token == 'abc'
        assert provider.is_authenticated is True
        kwargs = mock_request.call_args.kwargs
        assert kwargs['method'] == 'POST'
        assert kwargs['url'] == f"{TVDB_API_URL}/login"
        assert kwargs['json'] == {'apikey': 'tvdb_key'}

    @patch('providers.api_client.requests.request')
    def test_rejected_key_raises(self, mock_request, provider):
        mock_request.return_value = make_response(401)
        with pytest.raises(TVDBAuthError):
            provider.authenticate()

    @patch('providers.api_client.requests.request')
    def test_missing_token_raises(self, mock_request, provider):
        mock_request.return_value = make_response(200, {'data': {}})
        with pytest.raises(TVDBAuthError, match='token'):
            provider.authenticate()

    def test_no_key_raises(self):
        with pytest.raises(TVDBAuthError):
            TVDBProvider().authenticate()

    def test_headers_include_bearer(self):
        provider = TVDBProvider("key")
        provider.token = "tok"
        assert provider._get_headers()["Authorization"] == "Bearer tok"


class TestTVDBReauthentication:
    """Tests for the single transparent re-login."""

    @patch('providers.api_client.requests.request')
    def test_401_reauthenticates_once_and_retries(self, mock_request, provider):
        """Test an expired token is refreshed and the call retried."""
        provider.token = 'expired'
        mock_request.side_effect = [
            make_response(401),
            login_response('fresh'),
            make_response(200, {'data': [{'tvdb_id': '81189', 'name': 'Breaking Bad', 'year': '2008'}]}),
        ]

        results = provider.search("Breaking Bad", MediaKind.TV)

        assert [c.id for c in results] == ['81189']
        assert provider.token == 'fresh'
        assert mock_request.call_args.kwargs['headers']['Authorization'] == 'Bearer fresh'
        assert mock_request.call_count == 3

    @patch('providers.api_client.requests.request')
    def test_second_401_propagates(self, mock_request, provider):
        """Test a second authorization failure raises for that call only."""
        provider.token = 'expired'
        mock_request.side_effect = [
            make_response(401),
            login_response('fresh'),
            make_response(401),
        ]

        with pytest.raises(TVDBAuthError):
            provider.search("Breaking Bad", MediaKind.TV)

        # Provider stays usable for the next title
        mock_request.side_effect = [make_response(200, {'data': []})]
        assert provider.search("Another", MediaKind.TV) == []


class TestTVDBSearch:
    """Tests for search."""

    def test_unconfigured_returns_empty(self):
        """Test search without an API key returns [] without HTTP."""
        with patch('providers.api_client.requests.request') as mock_request:
            assert TVDBProvider().search("Breaking Bad", MediaKind.TV) == []
            mock_request.assert_not_called()

    @patch('providers.api_client.requests.request')
    def test_login_failure_returns_empty(self, mock_request, provider):
        """Test a failed initial login degrades to no results."""
        mock_request.return_value = make_response(401)
        assert provider.search("Breaking Bad", MediaKind.TV) == []

    @patch('providers.api_client.requests.request')
    def test_search_params(self, mock_request, provider):
        """Test query, type and year parameters."""
        mock_request.side_effect = [
            login_response(),
            make_response(200, {'data': [{'id': 'movie-123', 'tvdb_id': '123', 'name': 'Heat', 'year': '1995'}]}),
        ]

        results = provider.search("Heat", MediaKind.MOVIE, "1995")

        assert results[0].id == '123'
        assert results[0].year == '1995'
        assert mock_request.call_args.kwargs['params'] == {'query': 'Heat', 'type': 'movie', 'year': '1995'}


class TestTVDBFetchCrossIds:
    """Tests for fetch_cross_ids."""

    @patch('providers.api_client.requests.request')
    def test_remote_ids(self, mock_request, provider):
        """Test remoteIds map to IMDb and TMDB fields."""
        provider.token = 'tok'
        mock_request.return_value = make_response(200, {'data': {
            'id': 81189,
            'remoteIds': [
                {'id': 'tt0903747', 'sourceName': 'IMDB'},
                {'id': '1396', 'sourceName': 'TheMovieDB.com'},
                {'id': 'breakingbad', 'sourceName': 'Official Website'},
            ],
        }})

        ids = provider.fetch_cross_ids('81189', MediaKind.TV)

        assert ids == CrossIds(tvdb_id='81189', imdb_id='tt0903747', tmdb_id='1396')
        assert mock_request.call_args.kwargs['url'] == f"{TVDB_API_URL}/series/81189/extended"

    @patch('providers.api_client.requests.request')
    def test_movie_path(self, mock_request, provider):
        provider.token = 'tok'
        mock_request.return_value = make_response(200, {'data': {'id': 5}})
        provider.fetch_cross_ids('5', MediaKind.MOVIE)
        assert mock_request.call_args.kwargs['url'] == f"{TVDB_API_URL}/movies/5/extended"

    @patch('providers.api_client.requests.request')
    def test_lookup_failure_keeps_own_id(self, mock_request, provider):
        """Test a failed detail lookup still reports the TVDB ID."""
        provider.token = 'tok'
        mock_request.return_value = make_response(500, {'message': 'boom'})
        assert provider.fetch_cross_ids('81189', MediaKind.TV) == CrossIds(tvdb_id='81189')

    @patch('providers.api_client.requests.request')
    def test_not_found_keeps_own_id(self, mock_request, provider):
        provider.token = 'tok'
        mock_request.return_value = make_response(404)
        assert provider.fetch_cross_ids('81189', MediaKind.TV) == CrossIds(tvdb_id='81189')


class TestTVDBTestConnection:
    """Tests for test_connection."""

    @patch('providers.api_client.requests.request')
    def test_valid_key(self, mock_request, provider):
        mock_request.return_value = login_response()
        assert provider.test_connection() is True

    @patch('providers.api_client.requests.request')
    def test_invalid_key(self, mock_request, provider):
        mock_request.return_value = make_response(401)
        assert provider.test_connection() is False


class TestCreateTVDBProvider:
    """Tests for create_tvdb_provider factory."""

    def test_from_config(self):
        assert create_tvdb_provider({'tvdb': {'api_key': 'k'}}).api_key == 'k'

    def test_missing_section(self):
        assert create_tvdb_provider({}).is_configured is False
