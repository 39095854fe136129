import logging
import time
from typing import Optional

from openai import AsyncOpenAI

from xcstrings_pipeline.config import Settings, get_settings
from xcstrings_pipeline.exceptions import MissingCredentialError, TranslationError
from xcstrings_pipeline.metrics import TRANSLATION_CALL_DURATION

logger = logging.getLogger(__name__)

# Format specifiers are substituted at runtime and must survive translation untouched.
PLACEHOLDER_EXAMPLES = ("%@", "%d", "%1$@")


class CatalogTranslator:
    """Translate single catalog strings through the OpenAI chat completions API."""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.api_key = settings.openai_api_key
        self.model = settings.openai_model
        self.temperature = settings.openai_temperature
        self.timeout = settings.openai_timeout
        self._client = None

    @property
    def client(self) -> AsyncOpenAI:
        if not self.api_key:
            raise MissingCredentialError(
                "OPENAI_API_KEY is not configured. "
                "Set it in the environment or in a .env file."
            )
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    @staticmethod
    def build_prompt(
        source_text: str,
        source_lang: str,
        target_lang: str,
        comment: Optional[str] = None,
    ) -> str:
        prompt = (
            f"Translate the following text for an iOS app from {source_lang} "
            f"to the language with code '{target_lang}'. "
            f'The text to translate is: "{source_text}".'
        )
        if comment:
            prompt += f' A helpful comment for context is: "{comment}".'
        placeholders = ", ".join(f"'{p}'" for p in PLACEHOLDER_EXAMPLES)
        prompt += (
            " Your response should ONLY contain the translated string, with no additional "
            "explanation, commentary, or quotation marks. "
            f"Preserve placeholders like {placeholders} exactly as they are."
        )
        return prompt

    async def translate(
        self,
        source_text: str,
        source_lang: str,
        target_lang: str,
        comment: Optional[str] = None,
    ) -> str:
        """Translate one string into one language.

        Args:
            source_text: Text in the catalog's source language
            source_lang: Source language code (e.g. 'en')
            target_lang: Target language code (e.g. 'fr', 'zh-Hans')
            comment: Developer comment giving context, sent verbatim

        Returns:
            The translated text with surrounding whitespace removed

        Raises:
            MissingCredentialError: If no API key is configured
            TranslationError: If the response holds no usable text
            openai.OpenAIError: If the API call itself fails
        """
        client = self.client
        prompt = self.build_prompt(source_text, source_lang, target_lang, comment)

        started = time.monotonic()
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
            )
        finally:
            TRANSLATION_CALL_DURATION.observe(time.monotonic() - started)

        choices = getattr(response, "choices", None)
        if not choices:
            raise TranslationError(f"No choices in response for '{target_lang}'")
        content = choices[0].message.content
        if content is None or not content.strip():
            raise TranslationError(f"Empty translation returned for '{target_lang}'")

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.debug(
                "Translation tokens for %s: prompt=%s completion=%s",
                target_lang,
                getattr(usage, "prompt_tokens", None),
                getattr(usage, "completion_tokens", None),
            )
        return content.strip()
