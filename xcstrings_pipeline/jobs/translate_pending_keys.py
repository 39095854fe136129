"""Stage 2: fill missing languages of pending catalog keys.

Every chunk in the needs-translation directory becomes one file task bound
by the pool's file gate. A file task fans out one language task per missing
language, each bound by the shared API call gate, waits for all of them, and
writes the updated fragment to the translated directory. A failed language is
simply left out of the fragment; a failed file is logged and counted. Neither
stops the rest of the run.
"""

import asyncio
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

import structlog

from xcstrings_pipeline.config import Settings, get_settings
from xcstrings_pipeline.exceptions import CatalogStoreError, MissingCredentialError
from xcstrings_pipeline.metrics import STAGE_DURATION, TRANSLATION_CALLS, UNITS_PROCESSED
from xcstrings_pipeline.schemas.catalog import RunSummary, TranslationResult, WorkUnit
from xcstrings_pipeline.services.catalog_store import (
    extract_ordinal,
    list_chunk_files,
    read_work_unit,
    write_catalog,
)
from xcstrings_pipeline.services.llm_translator import CatalogTranslator
from xcstrings_pipeline.services.translation_pool import TranslationPool

logger = structlog.get_logger(__name__)


class Translator(Protocol):
    async def translate(
        self,
        source_text: str,
        source_lang: str,
        target_lang: str,
        comment: Optional[str] = None,
    ) -> str: ...


@dataclass
class FileOutcome:
    """What happened to one chunk file. A chunk that could not be parsed was never read."""

    read: bool = False
    persisted: bool = False
    results: list[TranslationResult] = field(default_factory=list)


def _one_line(text: str) -> str:
    return text.replace("\n", "\\n")


async def translate_language(
    unit: WorkUnit,
    language: str,
    translator: Translator,
    pool: TranslationPool,
) -> TranslationResult:
    """Translate one key into one language. Never raises; failures become results."""
    log = logger.bind(ordinal=unit.ordinal, language=language)
    try:
        value = await pool.run_translation(
            translator.translate(
                unit.source_text,
                unit.source_language,
                language,
                unit.comment,
            )
        )
    except Exception as e:
        # Any provider error is confined to this (key, language) pair
        error = f"{type(e).__name__}: {e}"
        TRANSLATION_CALLS.labels(outcome="failure").inc()
        log.error("Translation failed", error=error)
        return TranslationResult.failure(language, error)

    TRANSLATION_CALLS.labels(outcome="success").inc()
    log.info("Translated", value=_one_line(value))
    return TranslationResult.success(language, value)


async def process_file(
    path: Path,
    output_dir: Path,
    translator: Translator,
    pool: TranslationPool,
) -> FileOutcome:
    """Translate every missing language of one chunk and persist the fragment.

    Storage errors are logged and reported through the outcome, never raised.
    """
    outcome = FileOutcome()
    log = logger.bind(ordinal=extract_ordinal(path.name), file=path.name)
    try:
        unit, chunk = read_work_unit(path)
    except CatalogStoreError as e:
        log.error("Cannot read key file", error=str(e))
        return outcome
    outcome.read = True

    log.info(
        "Processing key",
        text=_one_line(unit.key),
        comment=_one_line(unit.comment) if unit.comment else None,
        missing_languages=list(unit.missing_languages),
    )

    entry = chunk.entry
    if not isinstance(entry.get("localizations"), dict):
        log.info("Initializing localizations for new key")
        entry["localizations"] = {}

    results = await asyncio.gather(
        *(
            translate_language(unit, language, translator, pool)
            for language in unit.missing_languages
        )
    )

    outcome.results = list(results)
    for result in results:
        if result.succeeded:
            entry["localizations"][result.language] = result.to_localization()

    chunk.meta = None
    try:
        write_catalog(output_dir / path.name, chunk)
    except CatalogStoreError as e:
        log.error("Cannot write translated key", error=str(e))
        return outcome
    outcome.persisted = True

    failed = [r.language for r in results if not r.succeeded]
    if failed:
        log.warning("Key saved with missing languages", failed_languages=failed)
    else:
        log.info("Key completed")
    return outcome


async def translate_pending_keys(
    settings: Optional[Settings] = None,
    translator: Optional[Translator] = None,
    pool: Optional[TranslationPool] = None,
) -> RunSummary:
    """Translate all pending keys and report aggregate counts.

    Raises:
        MissingCredentialError: If no API key is configured; nothing is read
    """
    settings = settings or get_settings()
    if not settings.openai_api_key:
        raise MissingCredentialError(
            "OPENAI_API_KEY not found. "
            "Please ensure you have a .env file with OPENAI_API_KEY='your_key_here'"
        )
    translator = translator or CatalogTranslator(settings)
    pool = pool or TranslationPool.from_settings(settings)

    logger.info(
        "Translating keys",
        max_concurrent_files=pool.file_gate.capacity,
        max_concurrent_api_calls=pool.call_gate.capacity,
        api_delay_seconds=pool.pacing_delay,
    )

    summary = RunSummary()
    source_dir = settings.needs_translation_dir
    if not source_dir.is_dir():
        logger.info("No needs-translation directory found. Nothing to do.", directory=str(source_dir))
        return summary

    files = list_chunk_files(source_dir)
    if not files:
        logger.info("No key files found. Nothing to do.", directory=str(source_dir))
        return summary

    output_dir = settings.translated_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Found keys to translate", count=len(files))

    started = time.monotonic()
    outcomes = await asyncio.gather(
        *(pool.run_file(process_file(path, output_dir, translator, pool)) for path in files),
        return_exceptions=True,
    )
    summary.elapsed_seconds = time.monotonic() - started
    STAGE_DURATION.labels(stage="translate").observe(summary.elapsed_seconds)

    for path, outcome in zip(files, outcomes):
        if isinstance(outcome, BaseException):
            logger.error(
                "Key processing crashed",
                file=path.name,
                error=f"{type(outcome).__name__}: {outcome}",
            )
            outcome = FileOutcome()
        if outcome.read:
            summary.units_read += 1
        if not outcome.persisted:
            summary.units_failed += 1
            UNITS_PROCESSED.labels(outcome="failed").inc()
            continue
        summary.units_persisted += 1
        UNITS_PROCESSED.labels(outcome="persisted").inc()
        summary.languages_translated += sum(1 for r in outcome.results if r.succeeded)
        summary.languages_failed += sum(1 for r in outcome.results if not r.succeeded)

    logger.info(
        "Translation complete",
        output_dir=str(output_dir),
        units_read=summary.units_read,
        units_persisted=summary.units_persisted,
        units_failed=summary.units_failed,
        languages_translated=summary.languages_translated,
        languages_failed=summary.languages_failed,
        elapsed_seconds=round(summary.elapsed_seconds, 2),
    )
    return summary
