"""Split a catalog into one file per key and report missing translations.

Unlike stage 1 this neither partitions the keys nor cleans the output
directory; it is a quick way to inspect a catalog key by key.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from xcstrings_pipeline.config import Settings, get_settings
from xcstrings_pipeline.schemas.catalog import CatalogChunk
from xcstrings_pipeline.services.catalog_store import chunk_filename, read_catalog, write_catalog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MissingReport:
    key: str
    missing: list[str]


def split_catalog(settings: Optional[Settings] = None) -> list[MissingReport]:
    settings = settings or get_settings()
    catalog = read_catalog(settings.catalog_input_file)
    logger.info("Read catalog", path=str(settings.catalog_input_file), keys=len(catalog.strings))

    if not settings.chunks_dir.exists():
        logger.info("Creating output directory", directory=str(settings.chunks_dir))
        settings.chunks_dir.mkdir(parents=True, exist_ok=True)

    for index, (key, entry) in enumerate(catalog.strings.items(), start=1):
        chunk = CatalogChunk(
            source_language=catalog.source_language,
            version=catalog.version,
            strings={key: entry},
            **catalog.extra_fields,
        )
        write_catalog(settings.chunks_dir / chunk_filename(index, key), chunk)
    logger.info("Split catalog into chunks", count=len(catalog.strings), directory=str(settings.chunks_dir))

    all_languages = catalog.languages()
    logger.info("Detected languages", count=len(all_languages), languages=all_languages)

    report: list[MissingReport] = []
    for key, entry in catalog.strings.items():
        # Keys without a localizations object (e.g. the empty key) are not reported
        localizations = entry.get("localizations")
        if localizations is None:
            continue
        missing = [lang for lang in all_languages if lang not in localizations]
        if missing:
            report.append(MissingReport(key=key.replace("\n", "\\n"), missing=missing))

    if report:
        logger.warning("Found keys with missing translations", count=len(report))
        for item in report:
            logger.info("Missing translations", key=item.key, missing=item.missing)
    else:
        logger.info("All keys have entries for all detected languages")
    return report
