import json
import os
from pathlib import Path

import pytest

os.environ.setdefault("OPENAI_API_KEY", "test_openai_key")
os.environ.setdefault("API_DELAY_MS", "0")

from xcstrings_pipeline.config import Settings  # noqa: E402


@pytest.fixture
def make_settings(tmp_path: Path):
    """Build settings rooted in the test's temporary directory."""

    def _make(**overrides) -> Settings:
        values = {
            "openai_api_key": "test_openai_key",
            "catalog_input_file": tmp_path / "Localizable.xcstrings",
            "output_dir": tmp_path / "output",
            "chunks_dir": tmp_path / "output_chunks",
            "api_delay_ms": 0,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def write_json():
    def _write(path: Path, data: dict) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def read_json():
    def _read(path: Path) -> dict:
        return json.loads(path.read_text(encoding="utf-8"))

    return _read
