"""Tests for utils/config.py"""

import os
import tempfile
import pytest
from unittest.mock import patch

from utils.config import (
    DEFAULT_PRIORITY_ORDER,
    DEFAULT_RATE_LIMITS,
    DEFAULT_OUTPUT_DATE_FORMAT,
    get_config_section,
    get_credential,
    get_priority_order,
    get_rate_limits,
    get_output_date_format,
    load_config,
)


class TestGetConfigSection:
    """Tests for get_config_section function"""

    def test_returns_lowercase_key(self):
        config = {'tmdb': {'api_key': 'abc'}}
        assert get_config_section(config, 'tmdb') == {'api_key': 'abc'}

    def test_returns_uppercase_key(self):
        config = {'TMDB': {'api_key': 'abc'}}
        assert get_config_section(config, 'tmdb') == {'api_key': 'abc'}

    def test_returns_default_when_missing(self):
        assert get_config_section({}, 'tmdb') == {}
        assert get_config_section({}, 'tmdb', {'x': 1}) == {'x': 1}

    def test_returns_default_for_none_section(self):
        """A YAML key with no value loads as None"""
        assert get_config_section({'tmdb': None}, 'tmdb') == {}

    def test_handles_none_config(self):
        assert get_config_section(None, 'tmdb') == {}


class TestGetCredential:
    """Tests for get_credential function"""

    def test_returns_value(self):
        config = {'tvdb': {'api_key': ' real-key '}}
        assert get_credential(config, 'tvdb', 'api_key') == 'real-key'

    def test_missing_returns_none(self):
        assert get_credential({}, 'tvdb', 'api_key') is None

    def test_placeholder_returns_none(self):
        config = {'tmdb': {'api_key': 'YOUR_TMDB_API_KEY'}}
        assert get_credential(config, 'tmdb', 'api_key') is None

    def test_empty_and_null_return_none(self):
        assert get_credential({'mal': {'client_id': ''}}, 'mal', 'client_id') is None
        assert get_credential({'mal': {'client_id': 'null'}}, 'mal', 'client_id') is None

    def test_numeric_value_is_stringified(self):
        assert get_credential({'mal': {'client_id': 12345}}, 'mal', 'client_id') == '12345'


class TestGetPriorityOrder:
    """Tests for get_priority_order function"""

    def test_default_order(self):
        assert get_priority_order({}) == ['simkl', 'tmdb', 'tvdb', 'imdb', 'mal']

    def test_default_is_a_copy(self):
        order = get_priority_order({})
        order.append('extra')
        assert DEFAULT_PRIORITY_ORDER == ['simkl', 'tmdb', 'tvdb', 'imdb', 'mal']

    def test_custom_order(self):
        assert get_priority_order({'priority_order': ['tmdb', 'simkl']}) == ['tmdb', 'simkl']

    def test_camel_case_key(self):
        assert get_priority_order({'priorityOrder': ['IMDB', 'mal']}) == ['imdb', 'mal']

    def test_duplicates_dropped(self):
        assert get_priority_order({'priority_order': ['tmdb', 'tmdb', 'imdb']}) == ['tmdb', 'imdb']

    def test_unknown_provider_raises(self):
        with pytest.raises(ValueError, match='trakt'):
            get_priority_order({'priority_order': ['simkl', 'trakt']})


class TestGetRateLimits:
    """Tests for get_rate_limits function"""

    def test_defaults(self):
        limits = get_rate_limits({})
        assert limits == DEFAULT_RATE_LIMITS

    def test_override_one_provider(self):
        limits = get_rate_limits({'rate_limit': {'imdb': {'calls': 1, 'per_seconds': 3}}})
        assert limits['imdb'] == {'calls': 1, 'per_seconds': 3}
        assert limits['tmdb'] == DEFAULT_RATE_LIMITS['tmdb']

    def test_partial_override_keeps_default(self):
        limits = get_rate_limits({'rate_limit': {'mal': {'calls': 5}}})
        assert limits['mal'] == {'calls': 5, 'per_seconds': 1}

    def test_camel_case_window(self):
        limits = get_rate_limits({'rate_limit': {'tvdb': {'perSeconds': 30}}})
        assert limits['tvdb']['per_seconds'] == 30


class TestGetOutputDateFormat:
    """Tests for get_output_date_format function"""

    def test_default(self):
        assert get_output_date_format({}) == DEFAULT_OUTPUT_DATE_FORMAT == '%d/%m/%Y'

    def test_custom(self):
        assert get_output_date_format({'output': {'date_format': '%Y-%m-%d'}}) == '%Y-%m-%d'


class TestLoadConfig:
    """Tests for load_config function"""

    def _write(self, content):
        f = tempfile.NamedTemporaryFile(mode='w', suffix='.yml', delete=False)
        f.write(content)
        f.close()
        return f.name

    def test_loads_yaml(self):
        path = self._write("tmdb:\n  api_key: abc\npriority_order: [tmdb, imdb]\n")
        try:
            with patch.dict(os.environ, {}, clear=True):
                config = load_config(path)
            assert config['tmdb']['api_key'] == 'abc'
            assert config['priority_order'] == ['tmdb', 'imdb']
        finally:
            os.unlink(path)

    def test_env_overrides_file_values(self):
        path = self._write("tmdb:\n  api_key: from_file\n")
        try:
            env = {'TMDB_API_KEY': 'from_env', 'MAL_CLIENT_ID': 'mal_env'}
            with patch.dict(os.environ, env, clear=True):
                config = load_config(path)
            assert config['tmdb']['api_key'] == 'from_env'
            assert config['mal']['client_id'] == 'mal_env'
        finally:
            os.unlink(path)

    def test_empty_file_gives_empty_config(self):
        path = self._write("")
        try:
            with patch.dict(os.environ, {}, clear=True):
                assert load_config(path) == {}
        finally:
            os.unlink(path)

    def test_missing_file_raises(self):
        with pytest.raises(OSError):
            load_config("/nonexistent/config.yml")

    def test_invalid_priority_order_raises(self):
        path = self._write("priority_order: [simkl, nope]\n")
        try:
            with patch.dict(os.environ, {}, clear=True):
                with pytest.raises(ValueError):
                    load_config(path)
        finally:
            os.unlink(path)
