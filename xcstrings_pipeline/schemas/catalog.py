"""Pydantic schemas for string catalogs and translation work."""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

TRANSLATED_STATE = "translated"


# === Catalog files ===

class ChunkMeta(BaseModel):
    missing_langs: List[str] = Field(default_factory=list, alias="missingLangs")

    model_config = ConfigDict(populate_by_name=True)


class CatalogFile(BaseModel):
    """A whole `.xcstrings` catalog. Unknown top-level fields survive a round trip."""

    source_language: str = Field(alias="sourceLanguage")
    version: str = "1.0"
    strings: Dict[str, Dict[str, Any]] = {}

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def languages(self) -> List[str]:
        """Every localization language used by any entry, in first-seen order."""
        seen: Dict[str, None] = {}
        for entry in self.strings.values():
            for lang in entry.get("localizations") or {}:
                seen.setdefault(lang, None)
        return list(seen)

    @property
    def extra_fields(self) -> Dict[str, Any]:
        """Top-level fields this model does not know about, keyed as in the file."""
        return dict(self.model_extra or {})

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class CatalogChunk(CatalogFile):
    """A single-key slice of a catalog, optionally tagged with pending work."""

    meta: Optional[ChunkMeta] = Field(default=None, alias="_meta")

    @property
    def key(self) -> str:
        if len(self.strings) != 1:
            raise ValueError(f"chunk must hold exactly one key, found {len(self.strings)}")
        return next(iter(self.strings))

    @property
    def entry(self) -> Dict[str, Any]:
        return self.strings[self.key]

    def to_json_dict(self) -> Dict[str, Any]:
        if self.meta is None:
            return self.model_dump(by_alias=True, exclude={"meta"})
        return self.model_dump(by_alias=True)


# === Translation work ===

class WorkUnit(BaseModel):
    ordinal: int
    file_name: str
    key: str
    source_language: str
    comment: Optional[str] = None
    missing_languages: Tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def source_text(self) -> str:
        # Catalog keys are the source-language strings themselves.
        return self.key


class TranslationResult(BaseModel):
    language: str
    value: Optional[str] = None
    error: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def success(cls, language: str, value: str) -> "TranslationResult":
        return cls(language=language, value=value)

    @classmethod
    def failure(cls, language: str, error: str) -> "TranslationResult":
        return cls(language=language, error=error)

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.value is not None

    def to_localization(self) -> Dict[str, Any]:
        return {"stringUnit": {"state": TRANSLATED_STATE, "value": self.value}}


class RunSummary(BaseModel):
    units_read: int = 0
    units_persisted: int = 0
    units_failed: int = 0
    languages_translated: int = 0
    languages_failed: int = 0
    elapsed_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        """A run counts as failed when no key file could be read."""
        return self.units_read > 0
