from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, computed_field, field_validator
from functools import lru_cache
from pathlib import Path
from typing import Optional


class Settings(BaseSettings):

    # OpenAI API (Translations)
    openai_api_key: str = ""
    openai_model: str = "gpt-3.5-turbo"
    openai_temperature: float = 0.1
    openai_timeout: float = 30.0  # seconds, enforced by the client

    # Application
    app_env: str = "development"
    app_debug: bool = False

    # Catalog locations
    catalog_input_file: Path = Path("Localizable.xcstrings")
    output_dir: Path = Path("output")
    chunks_dir: Path = Path("output_chunks")
    final_catalog_filename: str = "Localizable.xcstrings"

    # Translation concurrency
    max_concurrent_files: int = Field(default=5, ge=1)  # Outer gate: files in flight
    max_concurrent_languages: int = Field(default=3, ge=1)  # Languages per file in flight
    translation_call_concurrency: Optional[int] = None  # Inner gate override, shared by all files
    api_delay_ms: int = Field(default=100, ge=0)  # Pause after every API call

    @field_validator("translation_call_concurrency", mode="before")
    @classmethod
    def parse_call_concurrency(cls, v):
        if v == "" or v is None:
            return None
        return v

    @field_validator("translation_call_concurrency")
    @classmethod
    def check_call_concurrency(cls, v):
        if v is not None and v < 1:
            raise ValueError("translation_call_concurrency must be at least 1")
        return v

    @computed_field
    @property
    def needs_translation_dir(self) -> Path:
        return self.output_dir / "1_needs_translation"

    @computed_field
    @property
    def complete_dir(self) -> Path:
        return self.output_dir / "2_complete"

    @computed_field
    @property
    def translated_dir(self) -> Path:
        return self.output_dir / "3_translated"

    @computed_field
    @property
    def final_output_dir(self) -> Path:
        return self.output_dir / "4_final_xcstrings"

    @computed_field
    @property
    def call_concurrency(self) -> int:
        """Capacity of the API call gate.

        The gate is shared across every file in flight, so unless overridden it
        is sized to let each concurrent file run its full language quota.
        """
        if self.translation_call_concurrency is not None:
            return self.translation_call_concurrency
        return self.max_concurrent_files * self.max_concurrent_languages

    @computed_field
    @property
    def pacing_delay_seconds(self) -> float:
        return self.api_delay_ms / 1000.0

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
