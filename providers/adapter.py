"""
Interface every metadata provider adapter conforms to.
"""

from typing import List, Protocol, Tuple

from utils.models import Candidate, CrossIds, MediaKind


class MetadataProvider(Protocol):
    """
    Uniform adapter contract used by the reconciliation engine.

    Attributes:
        key: Provider key used in priority_order ('simkl', 'tmdb', ...)
        api_name: Display name for logs
        primary_field: CrossReferenceRecord field this provider is consulted for
        authoritative: Writes unconditionally and is never skipped
        provides_release_year: Candidate year may populate resolved_year
        media_kinds: Media kinds this provider is queried for
    """

    key: str
    api_name: str
    primary_field: str
    authoritative: bool
    provides_release_year: bool
    media_kinds: Tuple[MediaKind, ...]

    @property
    def is_configured(self) -> bool: ...

    def search(self, title: str, media_kind: MediaKind, year: str = '') -> List[Candidate]: ...

    def fetch_cross_ids(self, candidate_id: str, media_kind: MediaKind) -> CrossIds: ...

    def filter_candidates(self, candidates: List[Candidate], year: str) -> List[Candidate]: ...

    def test_connection(self) -> bool: ...


def filter_by_year_substring(candidates: List[Candidate], year: str) -> List[Candidate]:
    """
    Keep candidates whose description contains the year.

    Plain substring containment: "2010" also matches "(2010)" and
    "2010-04-07", and would match any other 4-digit run that happens to equal it.
    """
    if not year:
        return list(candidates)
    return [c for c in candidates if c.description and year in c.description]
