"""
Metadata reconciliation for prime-to-simkl.

Consults the provider adapters in priority order and merges their partial
answers into one CrossReferenceRecord per title.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional

from providers import MetadataProvider, create_providers
from utils.config import get_priority_order
from utils.context import BatchContext
from utils.display import log_warning, print_provider_status
from utils.models import CrossIds, CrossReferenceRecord, ID_FIELDS, MediaKind

logger = logging.getLogger('prime_to_simkl')

# Providers kept in the order even when their probe fails (keyless, may recover)
ALWAYS_KEEP_PROVIDERS = ('imdb',)

# CrossIds field -> record field
_FRAGMENT_TO_RECORD = {name: name for name in ID_FIELDS}
_FRAGMENT_TO_RECORD['release_year'] = 'resolved_year'


def validate_providers(providers: List[MetadataProvider]) -> List[MetadataProvider]:
    """
    Drop providers whose credentials fail their probe.

    Run once before a batch. The keyless title registry stays even if its
    probe fails. If nothing survives, the original list is kept.

    Args:
        providers: Adapters in priority order

    Returns:
        Adapters that passed validation, order preserved
    """
    valid = []
    for provider in providers:
        if not provider.is_configured:
            logger.info(f"{provider.api_name} not configured, skipping validation")
            ok = False
        else:
            ok = provider.test_connection()
            print_provider_status(provider.api_name, ok)

        if ok or provider.key in ALWAYS_KEEP_PROVIDERS:
            valid.append(provider)
        else:
            log_warning(f"Removing {provider.key} from priority order due to invalid or missing credentials")

    if not valid:
        log_warning("No valid API keys found. Metadata lookup will be limited.")
        return list(providers)

    logger.info(f"Using the following APIs in order: {', '.join(p.key for p in valid)}")
    return valid


class ReconciliationEngine:
    """
    Merge provider results into cross-reference records.

    Merge rules:
        - Authoritative providers (Simkl) always run and overwrite the fields
          they return.
        - Other providers are skipped when their primary field is already
          set, and otherwise only fill empty fields.
        - Providers only run for the media kinds they serve.
        - Any provider failure is logged and the loop continues.
    """

    def __init__(self, providers: List[MetadataProvider],
                 context: Optional[BatchContext] = None,
                 use_cache: bool = True):
        """
        Initialize engine.

        Args:
            providers: Adapters in priority order
            context: Batch context (holds the lookup cache)
            use_cache: Memoize results per (media kind, title, year) for the batch
        """
        self.providers = list(providers)
        self.context = context or BatchContext()
        self.use_cache = use_cache

    @classmethod
    def from_config(cls, config: Dict, context: Optional[BatchContext] = None,
                    validate: bool = True) -> 'ReconciliationEngine':
        """
        Build an engine from a loaded config.

        Args:
            config: Root configuration dictionary
            context: Batch context (built from config if omitted)
            validate: Probe credentials and prune failing providers first

        Returns:
            ReconciliationEngine
        """
        if context is None:
            context = BatchContext.from_config(config)
        providers = create_providers(config, context, get_priority_order(config))
        if validate:
            providers = validate_providers(providers)
        return cls(providers, context)

    @property
    def priority_order(self) -> List[str]:
        return [provider.key for provider in self.providers]

    def _should_consult(self, provider: MetadataProvider, fields: Dict[str, str],
                        media_kind: MediaKind) -> bool:
        if media_kind not in provider.media_kinds:
            return False
        if provider.authoritative:
            return True
        return not fields.get(provider.primary_field)

    def _lookup(self, provider: MetadataProvider, title: str,
                media_kind: MediaKind, year: str) -> Optional[CrossIds]:
        """Search one provider and fetch cross IDs for its best candidate."""
        candidates = provider.search(title, media_kind, year)
        candidates = provider.filter_candidates(candidates or [], year)
        if not candidates:
            logger.debug(f"{provider.api_name}: no match for {title!r} ({year or 'no year'})")
            return None

        best = candidates[0]
        fragment = provider.fetch_cross_ids(best.id, media_kind) or CrossIds()
        if provider.provides_release_year and not fragment.release_year and best.year:
            fragment = replace(fragment, release_year=best.year)
        return fragment

    def _merge(self, provider: MetadataProvider, fields: Dict[str, str], fragment: CrossIds) -> None:
        for name, value in fragment.populated().items():
            target = _FRAGMENT_TO_RECORD[name]
            if provider.authoritative or not fields[target]:
                fields[target] = value

    def reconcile(self, title: str, media_kind, year: str = '') -> CrossReferenceRecord:
        """
        Resolve cross-catalog IDs for one title.

        Args:
            title: Clean title (year suffix already removed)
            media_kind: 'movie' or 'tv'
            year: Optional 4-digit year used for disambiguation

        Returns:
            Best-effort CrossReferenceRecord; unresolved fields are ''

        Raises:
            ValueError: If media_kind is not movie or tv
        """
        media_kind = MediaKind.parse(media_kind)
        title = title or ''
        year = str(year or '')

        cache_key = (media_kind.value, title, year)
        if self.use_cache and cache_key in self.context.lookup_cache:
            return self.context.lookup_cache[cache_key]

        fields = {target: '' for target in _FRAGMENT_TO_RECORD.values()}

        for provider in self.providers:
            if not self._should_consult(provider, fields, media_kind):
                continue
            try:
                fragment = self._lookup(provider, title, media_kind, year)
            except Exception as e:
                logger.warning(f"Error querying {provider.key} for {title!r}: {e}")
                continue
            if fragment is not None:
                self._merge(provider, fields, fragment)
                logger.debug(f"{provider.api_name} contributed {fragment.populated()} for {title!r}")

        record = CrossReferenceRecord(title=title, media_kind=media_kind, year=year, **fields)
        if self.use_cache:
            self.context.lookup_cache[cache_key] = record
        return record
