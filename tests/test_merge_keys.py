import pytest

from xcstrings_pipeline.exceptions import NothingToMergeError
from xcstrings_pipeline.jobs.merge_keys import catalog_sort_key, merge_keys
from xcstrings_pipeline.jobs.sort_keys import sort_keys


def unit(value: str) -> dict:
    return {"stringUnit": {"state": "translated", "value": value}}


def chunk(key: str, entry: dict, source_language: str = "en") -> dict:
    return {"sourceLanguage": source_language, "version": "1.0", "strings": {key: entry}}


def test_merges_and_sorts_keys(make_settings, write_json, read_json):
    settings = make_settings()
    write_json(settings.complete_dir / "key_1_b.json", chunk("b", {"localizations": {"fr": unit("B")}}))
    write_json(settings.complete_dir / "key_2_a.json", chunk("a", {"localizations": {"fr": unit("A")}}))
    write_json(settings.translated_dir / "key_3_C.json", chunk("C", {"localizations": {"fr": unit("C")}}))

    output_path = merge_keys(settings)

    assert output_path == settings.final_output_dir / "Localizable.xcstrings"
    merged = read_json(output_path)
    assert list(merged) == ["sourceLanguage", "version", "strings"]
    assert list(merged["strings"]) == ["C", "a", "b"]


def test_translated_key_overrides_complete_key(make_settings, write_json, read_json):
    settings = make_settings()
    write_json(settings.complete_dir / "key_1_Hi.json", chunk("Hi", {"localizations": {}}))
    write_json(settings.translated_dir / "key_1_Hi.json", chunk("Hi", {"localizations": {"fr": unit("Salut")}}))

    merged = read_json(merge_keys(settings))

    assert merged["strings"]["Hi"]["localizations"] == {"fr": unit("Salut")}


def test_merge_is_byte_identical_when_repeated(make_settings, write_json):
    settings = make_settings()
    write_json(settings.complete_dir / "key_1_z.json", chunk("zèbre", {"localizations": {"fr": unit("zèbre")}}))
    write_json(settings.translated_dir / "key_2_a.json", chunk("a\nb", {"comment": "two lines"}))

    first = merge_keys(settings).read_bytes()
    second = merge_keys(settings).read_bytes()

    assert first == second
    assert "zèbre".encode("utf-8") in first


def test_split_then_merge_round_trip(make_settings, write_json, read_json):
    settings = make_settings()
    strings = {
        "Welcome": {"localizations": {"en": unit("Welcome"), "fr": unit("Bienvenue")}},
        "%d items": {
            "comment": "Item count",
            "extractionState": "manual",
            "localizations": {"en": unit("%d items"), "fr": unit("%d articles")},
        },
        "About": {"localizations": {"fr": unit("À propos")}},
    }
    write_json(settings.catalog_input_file, {"sourceLanguage": "en", "version": "1.0", "strings": strings})

    complete, pending = sort_keys(settings)
    merged = read_json(merge_keys(settings))

    assert (complete, pending) == (3, 0)
    assert merged["sourceLanguage"] == "en"
    assert merged["version"] == "1.0"
    assert merged["strings"] == strings
    assert list(merged["strings"]) == ["%d items", "About", "Welcome"]


def test_unknown_catalog_fields_survive_sort_and_merge(make_settings, write_json, read_json):
    settings = make_settings()
    write_json(
        settings.catalog_input_file,
        {
            "sourceLanguage": "en",
            "generator": "xcode",
            "strings": {"Hi": {"localizations": {"fr": unit("Salut")}}},
            "version": "1.0",
        },
    )

    sort_keys(settings)
    chunk_file = settings.complete_dir / "key_1_Hi.json"
    merged = read_json(merge_keys(settings))

    assert read_json(chunk_file)["generator"] == "xcode"
    assert merged["generator"] == "xcode"
    assert merged["strings"] == {"Hi": {"localizations": {"fr": unit("Salut")}}}


def test_incomplete_keys_are_merged_as_is(make_settings, write_json, read_json):
    settings = make_settings()
    write_json(settings.translated_dir / "key_1_Hi.json", chunk("Hi", {"localizations": {"fr": unit("Salut")}}))

    merged = read_json(merge_keys(settings))

    assert merged["strings"] == {"Hi": {"localizations": {"fr": unit("Salut")}}}


def test_nothing_to_merge_raises(make_settings):
    with pytest.raises(NothingToMergeError):
        merge_keys(make_settings())


def test_sort_key_uses_utf16_order():
    # U+1F600 is a surrogate pair (0xD83D...) and so sorts before U+FF5E in UTF-16.
    assert sorted(["～", "\U0001f600"], key=catalog_sort_key) == ["\U0001f600", "～"]
