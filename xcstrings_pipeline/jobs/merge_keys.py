"""Stage 3: merge complete and translated keys back into a single catalog."""

import time
from pathlib import Path
from typing import Any, Dict, Optional

import structlog

from xcstrings_pipeline.config import Settings, get_settings
from xcstrings_pipeline.exceptions import NothingToMergeError
from xcstrings_pipeline.metrics import STAGE_DURATION
from xcstrings_pipeline.schemas.catalog import CatalogFile
from xcstrings_pipeline.services.catalog_store import read_chunk, write_catalog

logger = structlog.get_logger(__name__)

DEFAULT_SOURCE_LANGUAGE = "en"
DEFAULT_VERSION = "1.0"


def catalog_sort_key(key: str) -> bytes:
    """Order keys by UTF-16 code units, the order Xcode and JavaScript sort in."""
    return key.encode("utf-16-be", "surrogatepass")


def _json_files(directory: Path) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(path for path in directory.iterdir() if path.suffix == ".json" and path.is_file())


def merge_keys(settings: Optional[Settings] = None) -> Path:
    """Combine every key file into the final catalog, keys sorted for stable diffs.

    Translated keys override complete ones with the same key. Keys that are
    still missing languages are merged as they are. The first file supplies
    the catalog header, unknown top-level fields included.

    Returns:
        Path of the written catalog

    Raises:
        NothingToMergeError: If neither directory holds any key file
        CatalogStoreError: If a key file cannot be read
    """
    settings = settings or get_settings()
    started = time.monotonic()

    file_paths = _json_files(settings.complete_dir) + _json_files(settings.translated_dir)
    if not file_paths:
        raise NothingToMergeError(
            "No files found in 'complete' or 'translated' directories. Nothing to merge."
        )
    logger.info("Found key files to merge", count=len(file_paths))

    source_language = DEFAULT_SOURCE_LANGUAGE
    version = DEFAULT_VERSION
    extra_fields: Dict[str, Any] = {}
    strings: Dict[str, Dict[str, Any]] = {}
    for index, path in enumerate(file_paths):
        chunk = read_chunk(path)
        if index == 0:
            source_language = chunk.source_language
            version = chunk.version
            extra_fields = chunk.extra_fields
        strings.update(chunk.strings)

    merged = CatalogFile(
        source_language=source_language,
        version=version,
        strings={key: strings[key] for key in sorted(strings, key=catalog_sort_key)},
        **extra_fields,
    )

    settings.final_output_dir.mkdir(parents=True, exist_ok=True)
    output_path = settings.final_output_dir / settings.final_catalog_filename
    write_catalog(output_path, merged)

    STAGE_DURATION.labels(stage="merge").observe(time.monotonic() - started)
    logger.info("Merging complete", path=str(output_path), keys=len(merged.strings))
    return output_path
