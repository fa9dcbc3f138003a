"""Sample library models.

The manifest is a JSON document shaped ``category -> subcategory -> [sample]``
(camelCase keys on the wire).  ``SampleRef`` is what the resolver hands
back: a concrete sample plus the taxonomy position it was found at.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Optional

from pydantic import Field

from pulse.models.base import CamelModel

logger = logging.getLogger(__name__)


class SampleMetadata(CamelModel):
    """One audio asset in the library manifest."""

    id: str
    name: str
    filename: str = ""
    path: str = ""
    duration: float = 0.0  # seconds
    tags: list[str] = Field(default_factory=list)
    license: str = ""
    author: str = ""
    freesound_id: Optional[int] = None


class SampleRef(CamelModel):
    """A resolved sample and where it sits in the taxonomy."""

    sample_id: str
    name: str
    path: str = ""
    duration: float = 0.0
    category: str
    subcategory: str


class SampleLibrary(CamelModel):
    """Read-only catalogue of ``category -> subcategory -> samples``."""

    library_name: str = "Pulse Sample Library"
    version: str = "1.0.0"
    created_at: Optional[str] = None
    total_samples: int = 0
    categories: dict[str, dict[str, list[SampleMetadata]]] = Field(default_factory=dict)

    @classmethod
    def from_manifest(cls, data: dict[str, Any]) -> "SampleLibrary":
        """Build a library from a decoded manifest, filling ``totalSamples`` when absent."""
        library = cls.model_validate(data)
        if not library.total_samples:
            library = library.model_copy(update={"total_samples": sum(1 for _ in library.iter_samples())})
        return library

    @classmethod
    def from_path(cls, path: str | Path) -> "SampleLibrary":
        manifest = json.loads(Path(path).read_text())
        library = cls.from_manifest(manifest)
        logger.info(f"🎧 Loaded sample library '{library.library_name}' ({library.total_samples} samples) from {path}")
        return library

    def iter_samples(self) -> Iterator[tuple[str, str, SampleMetadata]]:
        """Yield ``(category, subcategory, sample)`` in manifest order."""
        for category, subcategories in self.categories.items():
            for subcategory, samples in subcategories.items():
                for sample in samples:
                    yield category, subcategory, sample

    def get(self, sample_id: str) -> Optional[SampleRef]:
        """Exact id lookup."""
        for category, subcategory, sample in self.iter_samples():
            if sample.id == sample_id:
                return to_ref(sample, category, subcategory)
        return None


def to_ref(sample: SampleMetadata, category: str, subcategory: str) -> SampleRef:
    return SampleRef(
        sample_id=sample.id,
        name=sample.name,
        path=sample.path,
        duration=sample.duration,
        category=category,
        subcategory=subcategory,
    )
