"""Catalog Store - flat-file persistence for catalogs and per-key chunks.

Chunk files are named ``key_<N>_<sanitized key>.json`` where N is the
1-based position of the key in the source catalog. The number is the only
thing later stages read back from the name: it fixes processing order no
matter how the directory is listed.
"""

import json
import logging
import os
import re
import shutil
from pathlib import Path
from typing import Any, Dict, List, Type, TypeVar

from pydantic import ValidationError

from xcstrings_pipeline.exceptions import CatalogNotFoundError, CatalogStoreError
from xcstrings_pipeline.schemas.catalog import CatalogChunk, CatalogFile, WorkUnit

logger = logging.getLogger(__name__)

CatalogT = TypeVar("CatalogT", bound=CatalogFile)

UNSAFE_FILENAME_CHARS = re.compile(r'[\n\r\s/\\%:*?"<>|]')
KEY_ORDINAL_RE = re.compile(r"^key_(\d+)_")
MAX_KEY_CHARS_IN_FILENAME = 50


def chunk_filename(ordinal: int, key: str) -> str:
    safe_key = UNSAFE_FILENAME_CHARS.sub("_", key)[:MAX_KEY_CHARS_IN_FILENAME]
    return f"key_{ordinal}_{safe_key}.json"


def extract_ordinal(filename: str) -> int:
    """Return the key number embedded in a chunk filename, 0 if there is none."""
    match = KEY_ORDINAL_RE.match(filename)
    return int(match.group(1)) if match else 0


def list_chunk_files(directory: Path) -> List[Path]:
    """List chunk files in ascending ordinal order (ties broken by name)."""
    if not directory.is_dir():
        return []
    files = [path for path in directory.iterdir() if path.suffix == ".json" and path.is_file()]
    return sorted(files, key=lambda path: (extract_ordinal(path.name), path.name))


def reset_directory(directory: Path) -> None:
    if directory.exists():
        shutil.rmtree(directory)
    directory.mkdir(parents=True, exist_ok=True)


def _read_json(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError as e:
        raise CatalogNotFoundError(f"Catalog file not found: {path}", path=path) from e
    except json.JSONDecodeError as e:
        raise CatalogStoreError(f"Invalid JSON in {path}: {e}", path=path) from e
    except OSError as e:
        raise CatalogStoreError(f"Cannot read {path}: {e}", path=path) from e
    if not isinstance(data, dict):
        raise CatalogStoreError(f"{path} does not contain a JSON object", path=path)
    return data


def _load(path: Path, model: Type[CatalogT]) -> CatalogT:
    data = _read_json(path)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise CatalogStoreError(f"{path} is not a valid string catalog: {e}", path=path) from e


def read_catalog(path: Path) -> CatalogFile:
    return _load(path, CatalogFile)


def read_chunk(path: Path) -> CatalogChunk:
    chunk = _load(path, CatalogChunk)
    if len(chunk.strings) != 1:
        raise CatalogStoreError(
            f"{path} must hold exactly one key, found {len(chunk.strings)}", path=path
        )
    return chunk


def write_catalog(path: Path, catalog: CatalogFile) -> None:
    """Write a catalog or chunk as two-space indented UTF-8 JSON.

    The payload goes to a hidden sibling first and is renamed over ``path``,
    so readers see either the old file or the complete new one.
    """
    payload = json.dumps(catalog.to_json_dict(), indent=2, ensure_ascii=False)
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise CatalogStoreError(f"Cannot write {path}: {e}", path=path) from e
    logger.debug("Wrote %s", path)


def read_work_unit(path: Path) -> tuple[WorkUnit, CatalogChunk]:
    """Load a pending chunk and describe the translation work it carries."""
    chunk = read_chunk(path)
    if chunk.meta is None:
        raise CatalogStoreError(f"{path} has no _meta block listing missing languages", path=path)
    comment = chunk.entry.get("comment")
    unit = WorkUnit(
        ordinal=extract_ordinal(path.name),
        file_name=path.name,
        key=chunk.key,
        source_language=chunk.source_language,
        comment=comment if isinstance(comment, str) and comment else None,
        missing_languages=tuple(chunk.meta.missing_langs),
    )
    return unit, chunk
