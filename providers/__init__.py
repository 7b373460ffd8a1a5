"""
Metadata provider adapters for prime-to-simkl.

One adapter per external ID service, all conforming to MetadataProvider.
"""

from typing import Dict, List, Optional

from utils.config import get_priority_order
from utils.context import BatchContext

from .adapter import MetadataProvider, filter_by_year_substring
from .api_client import APIClient
from .imdb import IMDBAPIError, IMDBProvider, create_imdb_provider
from .mal import MALAPIError, MALAuthError, MALProvider, create_mal_provider
from .simkl import SimklAPIError, SimklProvider, create_simkl_provider
from .tmdb import TMDBAPIError, TMDBProvider, create_tmdb_provider
from .tvdb import TVDBAPIError, TVDBAuthError, TVDBProvider, create_tvdb_provider

# Provider key -> factory(config, context)
PROVIDER_FACTORIES = {
    'simkl': create_simkl_provider,
    'tmdb': create_tmdb_provider,
    'tvdb': create_tvdb_provider,
    'imdb': create_imdb_provider,
    'mal': create_mal_provider,
}


def create_providers(config: Dict, context: Optional[BatchContext] = None,
                     priority_order: Optional[List[str]] = None) -> List[MetadataProvider]:
    """
    Build adapters in priority order.

    Args:
        config: Root configuration dictionary
        context: Batch context shared by all adapters
        priority_order: Provider keys (defaults to the configured order)

    Returns:
        List of adapters, one per listed key
    """
    if context is None:
        context = BatchContext.from_config(config)
    if priority_order is None:
        priority_order = get_priority_order(config)

    providers = []
    for key in priority_order:
        factory = PROVIDER_FACTORIES.get(key)
        if factory is None:
            raise ValueError(f"Unknown provider: {key}")
        providers.append(factory(config, context))
    return providers


__all__ = [
    'MetadataProvider',
    'filter_by_year_substring',
    'APIClient',
    'PROVIDER_FACTORIES',
    'create_providers',
    # Simkl
    'SimklAPIError',
    'SimklProvider',
    'create_simkl_provider',
    # TMDB
    'TMDBAPIError',
    'TMDBProvider',
    'create_tmdb_provider',
    # TVDB
    'TVDBAPIError',
    'TVDBAuthError',
    'TVDBProvider',
    'create_tvdb_provider',
    # IMDB
    'IMDBAPIError',
    'IMDBProvider',
    'create_imdb_provider',
    # MyAnimeList
    'MALAPIError',
    'MALAuthError',
    'MALProvider',
    'create_mal_provider',
]
