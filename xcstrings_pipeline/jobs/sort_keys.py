"""Stage 1: split the catalog into complete keys and keys needing translation."""

import time
from typing import Optional

import structlog

from xcstrings_pipeline.config import Settings, get_settings
from xcstrings_pipeline.metrics import STAGE_DURATION
from xcstrings_pipeline.schemas.catalog import CatalogChunk, CatalogFile, ChunkMeta
from xcstrings_pipeline.services.catalog_store import (
    chunk_filename,
    read_catalog,
    reset_directory,
    write_catalog,
)

logger = structlog.get_logger(__name__)


def missing_languages(entry: dict, all_languages: list[str], source_language: str) -> list[str]:
    """Languages the entry lacks. The source language never counts as missing."""
    available = set(entry.get("localizations") or {})
    return [lang for lang in all_languages if lang not in available and lang != source_language]


def sort_keys(settings: Optional[Settings] = None) -> tuple[int, int]:
    """Write one chunk per key into the complete or needs-translation directory.

    The whole output directory is wiped first so stale chunks from an earlier
    run never leak into the merge.

    Returns:
        (complete_count, needs_translation_count)

    Raises:
        CatalogNotFoundError: If the input catalog does not exist
        CatalogStoreError: If the input catalog cannot be parsed
    """
    settings = settings or get_settings()
    started = time.monotonic()

    catalog = read_catalog(settings.catalog_input_file)

    reset_directory(settings.output_dir)
    settings.needs_translation_dir.mkdir(parents=True, exist_ok=True)
    settings.complete_dir.mkdir(parents=True, exist_ok=True)

    all_languages = catalog.languages()
    logger.info("Discovered languages", count=len(all_languages), languages=all_languages)
    logger.info(
        "Source language is ignored when checking for missing translations",
        source_language=catalog.source_language,
    )

    complete_count = 0
    needs_translation_count = 0
    for index, (key, entry) in enumerate(catalog.strings.items(), start=1):
        missing = missing_languages(entry, all_languages, catalog.source_language)
        chunk = _chunk_for(catalog, key, entry)
        if missing:
            chunk.meta = ChunkMeta(missing_langs=missing)
            target_dir = settings.needs_translation_dir
            needs_translation_count += 1
        else:
            target_dir = settings.complete_dir
            complete_count += 1
        write_catalog(target_dir / chunk_filename(index, key), chunk)

    STAGE_DURATION.labels(stage="sort").observe(time.monotonic() - started)
    logger.info(
        "Sorting complete",
        complete=complete_count,
        complete_dir=str(settings.complete_dir),
        needs_translation=needs_translation_count,
        needs_translation_dir=str(settings.needs_translation_dir),
    )
    return complete_count, needs_translation_count


def _chunk_for(catalog: CatalogFile, key: str, entry: dict) -> CatalogChunk:
    return CatalogChunk(
        source_language=catalog.source_language,
        version=catalog.version,
        strings={key: entry},
        **catalog.extra_fields,
    )
