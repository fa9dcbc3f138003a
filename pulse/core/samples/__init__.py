"""Sample library models and the Sample Resolver."""

from pulse.core.samples.models import SampleLibrary, SampleMetadata, SampleRef, to_ref
from pulse.core.samples.resolver import (
    SEARCH_ALIASES,
    SUBCATEGORY_ALIASES,
    SampleMatch,
    candidate_samples,
    category_structure,
    compact_index,
    find_sample,
    resolve_sample,
    sample_key,
    search_samples,
)

__all__ = [
    # Models
    "SampleLibrary",
    "SampleMetadata",
    "SampleRef",
    "to_ref",
    # Resolver
    "SEARCH_ALIASES",
    "SUBCATEGORY_ALIASES",
    "SampleMatch",
    "candidate_samples",
    "category_structure",
    "compact_index",
    "find_sample",
    "resolve_sample",
    "sample_key",
    "search_samples",
]
