import pytest

from xcstrings_pipeline.exceptions import CatalogNotFoundError, CatalogStoreError
from xcstrings_pipeline.schemas.catalog import CatalogChunk, TranslationResult
from xcstrings_pipeline.services.catalog_store import (
    chunk_filename,
    extract_ordinal,
    list_chunk_files,
    read_catalog,
    read_work_unit,
    write_catalog,
)


def test_chunk_filename_sanitizes_key():
    assert chunk_filename(3, 'Save to "Files"/iCloud?') == "key_3_Save_to__Files__iCloud_.json"
    assert chunk_filename(1, "Line one\nLine two: 50%") == "key_1_Line_one_Line_two__50_.json"


def test_chunk_filename_truncates_long_keys():
    name = chunk_filename(12, "x" * 80)
    assert name == f"key_12_{'x' * 50}.json"


def test_extract_ordinal():
    assert extract_ordinal("key_42_Hello.json") == 42
    assert extract_ordinal("key_7_.json") == 7
    assert extract_ordinal("notes.json") == 0


def test_list_chunk_files_sorts_numerically(tmp_path):
    for name in ("key_10_a.json", "key_9_b.json", "key_100_c.json", "readme.txt"):
        (tmp_path / name).write_text("{}", encoding="utf-8")

    assert [p.name for p in list_chunk_files(tmp_path)] == [
        "key_9_b.json",
        "key_10_a.json",
        "key_100_c.json",
    ]


def test_list_chunk_files_missing_directory(tmp_path):
    assert list_chunk_files(tmp_path / "absent") == []


def test_read_work_unit(tmp_path, write_json):
    path = write_json(
        tmp_path / "key_5_Open.json",
        {
            "sourceLanguage": "en",
            "version": "1.0",
            "strings": {"Open": {"comment": "Menu item"}},
            "_meta": {"missingLangs": ["fr", "ja"]},
        },
    )

    unit, chunk = read_work_unit(path)

    assert unit.ordinal == 5
    assert unit.key == unit.source_text == "Open"
    assert unit.comment == "Menu item"
    assert unit.missing_languages == ("fr", "ja")
    assert chunk.meta.missing_langs == ["fr", "ja"]


def test_read_work_unit_requires_meta(tmp_path, write_json):
    path = write_json(
        tmp_path / "key_1_Open.json",
        {"sourceLanguage": "en", "version": "1.0", "strings": {"Open": {}}},
    )

    with pytest.raises(CatalogStoreError):
        read_work_unit(path)


def test_read_rejects_multi_key_chunk(tmp_path, write_json):
    path = write_json(
        tmp_path / "key_1_x.json",
        {"sourceLanguage": "en", "strings": {"a": {}, "b": {}}, "_meta": {"missingLangs": []}},
    )

    with pytest.raises(CatalogStoreError):
        read_work_unit(path)


def test_read_catalog_errors(tmp_path):
    with pytest.raises(CatalogNotFoundError):
        read_catalog(tmp_path / "missing.xcstrings")

    invalid = tmp_path / "invalid.xcstrings"
    invalid.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(CatalogStoreError):
        read_catalog(invalid)

    no_source = tmp_path / "nosource.xcstrings"
    no_source.write_text('{"strings": {}}', encoding="utf-8")
    with pytest.raises(CatalogStoreError):
        read_catalog(no_source)


def test_catalog_keeps_unknown_fields(tmp_path, write_json, read_json):
    path = write_json(
        tmp_path / "Localizable.xcstrings",
        {"sourceLanguage": "en", "strings": {}, "version": "1.0", "generator": "xcode"},
    )

    catalog = read_catalog(path)
    write_catalog(path, catalog)

    assert read_json(path)["generator"] == "xcode"


def test_write_keeps_non_ascii_and_indent(tmp_path):
    chunk = CatalogChunk(
        source_language="en",
        version="1.0",
        strings={"Café": {"localizations": {"ja": TranslationResult.success("ja", "カフェ").to_localization()}}},
    )
    path = tmp_path / "key_1_Café.json"

    write_catalog(path, chunk)

    text = path.read_text(encoding="utf-8")
    assert "カフェ" in text
    assert '\n  "sourceLanguage": "en",' in text
    assert "_meta" not in text


def test_failed_write_leaves_previous_file_intact(tmp_path, monkeypatch):
    path = tmp_path / "Localizable.xcstrings"
    path.write_text('{"sourceLanguage": "en", "strings": {}}', encoding="utf-8")

    def refuse(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("xcstrings_pipeline.services.catalog_store.os.replace", refuse)
    with pytest.raises(CatalogStoreError, match="disk full"):
        write_catalog(path, CatalogChunk(source_language="fr", strings={"Hi": {}}))

    assert path.read_text(encoding="utf-8") == '{"sourceLanguage": "en", "strings": {}}'
    assert [p.name for p in tmp_path.iterdir()] == ["Localizable.xcstrings"]


def test_write_replaces_existing_file(tmp_path, read_json):
    path = tmp_path / "key_1_Hi.json"
    path.write_text("stale", encoding="utf-8")

    write_catalog(path, CatalogChunk(source_language="en", strings={"Hi": {}}))

    assert read_json(path)["strings"] == {"Hi": {}}
    assert sorted(p.name for p in tmp_path.iterdir()) == ["key_1_Hi.json"]
