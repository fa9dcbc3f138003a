"""Process-wide sample library, loaded once from the configured manifest."""

from __future__ import annotations

import logging
from functools import lru_cache

from pulse.config import settings
from pulse.core.samples.models import SampleLibrary
from pulse.data.sample_manifest import SEED_MANIFEST

logger = logging.getLogger(__name__)


@lru_cache()
def get_sample_library() -> SampleLibrary:
    """Load the manifest at ``settings.sample_manifest_path`` or fall back to the seed catalogue."""
    if settings.sample_manifest_path:
        try:
            return SampleLibrary.from_path(settings.sample_manifest_path)
        except FileNotFoundError:
            logger.warning(
                f"⚠️ Sample manifest not found at {settings.sample_manifest_path}; using seed catalogue"
            )
    library = SampleLibrary.from_manifest(SEED_MANIFEST)
    logger.info(f"🎧 Using seed sample library ({library.total_samples} samples)")
    return library
