"""
Configuration utilities for prime-to-simkl.
Handles config loading, section access, provider priority and rate budgets.
"""

import os
import logging
import yaml
from typing import Dict, List, Optional

logger = logging.getLogger('prime_to_simkl')

# Project version - single source of truth
__version__ = "1.2.0"

# Provider keys, in the default consultation order
PROVIDER_KEYS = ('simkl', 'tmdb', 'tvdb', 'imdb', 'mal')
DEFAULT_PRIORITY_ORDER = list(PROVIDER_KEYS)

# Advisory request budgets per provider (calls per window)
DEFAULT_RATE_LIMITS = {
    'simkl': {'calls': 30, 'per_seconds': 10},
    'tmdb': {'calls': 40, 'per_seconds': 10},
    'tvdb': {'calls': 100, 'per_seconds': 60},
    'imdb': {'calls': 5, 'per_seconds': 10},    # imdbapi.dev is the strictest
    'mal': {'calls': 2, 'per_seconds': 1},
}

# Simkl's CSV importer expects day-first dates
DEFAULT_OUTPUT_DATE_FORMAT = '%d/%m/%Y'

# Environment variables take precedence over config file values
ENV_OVERRIDES = [
    ('SIMKL_CLIENT_ID', 'simkl', 'client_id'),
    ('TMDB_API_KEY', 'tmdb', 'api_key'),
    ('TVDB_API_KEY', 'tvdb', 'api_key'),
    ('MAL_CLIENT_ID', 'mal', 'client_id'),
    ('MAL_CLIENT_SECRET', 'mal', 'client_secret'),
]


def get_config_section(config: Dict, key: str, default: Dict = None) -> Dict:
    """
    Get a config section case-insensitively.

    Args:
        config: The configuration dictionary
        key: The key to look for (will check lowercase and uppercase)
        default: Default value if key not found

    Returns:
        The config section or default value
    """
    if default is None:
        default = {}
    if not config:
        return default
    section = config.get(key.lower(), config.get(key.upper(), default))
    return section if section is not None else default


def get_credential(config: Dict, provider: str, key: str) -> Optional[str]:
    """
    Read one credential, treating template placeholders as missing.

    Args:
        config: Root configuration dictionary
        provider: Provider key (e.g. 'tmdb')
        key: Credential name within the provider section

    Returns:
        The credential string, or None when absent or still a placeholder
    """
    value = get_config_section(config, provider).get(key)
    if value is None:
        return None
    value = str(value).strip()
    if not value or value.lower() == 'null' or value.upper().startswith('YOUR_'):
        return None
    return value


def get_priority_order(config: Dict) -> List[str]:
    """
    Get the provider priority order from config.

    Unknown provider keys are a configuration error and raise. Duplicate
    entries are dropped, keeping the first occurrence.

    Args:
        config: Root configuration dictionary

    Returns:
        Ordered list of provider keys
    """
    order = (config or {}).get('priority_order', (config or {}).get('priorityOrder'))
    if order is None:
        return list(DEFAULT_PRIORITY_ORDER)

    result = []
    for key in order:
        key = str(key).lower()
        if key not in PROVIDER_KEYS:
            raise ValueError(f"Unknown provider in priority_order: {key}")
        if key not in result:
            result.append(key)
    return result


def get_rate_limits(config: Dict) -> Dict[str, Dict[str, int]]:
    """
    Get per-provider rate descriptors, filling in defaults.

    Args:
        config: Root configuration dictionary

    Returns:
        Dict mapping provider key to {'calls', 'per_seconds'}
    """
    configured = get_config_section(config, 'rate_limit')
    limits = {}
    for key in PROVIDER_KEYS:
        default = DEFAULT_RATE_LIMITS[key]
        entry = configured.get(key) or {}
        limits[key] = {
            'calls': int(entry.get('calls', default['calls'])),
            'per_seconds': int(entry.get('per_seconds', entry.get('perSeconds', default['per_seconds']))),
        }
    return limits


def get_output_date_format(config: Dict) -> str:
    """Get the strftime format used for the WatchedDate column."""
    return get_config_section(config, 'output').get('date_format', DEFAULT_OUTPUT_DATE_FORMAT)


def load_config(config_path: str) -> dict:
    """
    Load YAML configuration.

    Environment variables take precedence over all config values:
        SIMKL_CLIENT_ID     -> simkl.client_id
        TMDB_API_KEY        -> tmdb.api_key
        TVDB_API_KEY        -> tvdb.api_key
        MAL_CLIENT_ID       -> mal.client_id
        MAL_CLIENT_SECRET   -> mal.client_secret

    Args:
        config_path: Path to config.yml file

    Returns:
        Parsed config dictionary
    """
    try:
        with open(config_path, 'r', encoding='utf-8') as file:
            config = yaml.safe_load(file) or {}
        logger.info(f"Successfully loaded configuration from {config_path}")

        for env_var, section, key in ENV_OVERRIDES:
            value = os.environ.get(env_var)
            if value:
                if not isinstance(config.get(section), dict):
                    config[section] = {}
                config[section][key] = value
                logger.info(f"Using {env_var} from environment")

        # Fail early on a bad provider list
        get_priority_order(config)

        return config
    except Exception as e:
        logger.error(f"Error loading config from {config_path}: {e}")
        raise
