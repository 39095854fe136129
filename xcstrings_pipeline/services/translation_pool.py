"""Translation Pool - Two-tier concurrency control for catalog translation

This module bounds the translate stage along two dimensions at once:

- a file gate limiting how many catalog keys (chunk files) are in flight, held
  by a file task for its whole lifetime, from reading the chunk to writing the
  translated fragment;
- an API call gate limiting how many translation calls are in flight across
  *all* files, held only around a single remote call and its pacing delay.

Because the call gate is shared rather than per file, a key with many missing
languages interleaves with other keys' calls instead of monopolising the
provider. Size it at least ``file capacity x languages per file`` so every
admitted file can run its full language quota.

Key components:
- TranslationPool pairing the two AdmissionGate instances
- Pacing delay applied after every API call while its slot is still held
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, TypeVar

from xcstrings_pipeline.config import Settings
from xcstrings_pipeline.services.admission_gate import AdmissionGate

T = TypeVar("T")

logger = logging.getLogger(__name__)


class TranslationPool:
    def __init__(
        self,
        file_concurrency: int,
        call_concurrency: int,
        pacing_delay: float = 0.0,
    ) -> None:
        if pacing_delay < 0:
            raise ValueError("pacing_delay cannot be negative")
        if call_concurrency < file_concurrency:
            logger.warning(
                "API call gate (%d) is smaller than the file gate (%d); "
                "admitted files will queue for API slots",
                call_concurrency,
                file_concurrency,
            )
        self.file_gate = AdmissionGate(file_concurrency, name="files")
        self.call_gate = AdmissionGate(call_concurrency, name="api_calls")
        self.pacing_delay = pacing_delay

    @classmethod
    def from_settings(cls, settings: Settings) -> "TranslationPool":
        return cls(
            file_concurrency=settings.max_concurrent_files,
            call_concurrency=settings.call_concurrency,
            pacing_delay=settings.pacing_delay_seconds,
        )

    async def run_file(self, awaitable: Awaitable[T]) -> T:
        """Run one file task while holding a file slot.

        The awaitable is only started once a slot is free.
        """
        async with self.file_gate:
            return await awaitable

    async def run_translation(self, awaitable: Awaitable[T]) -> T:
        """Run one API call while holding a call slot, then pace before releasing it.

        The pacing delay runs whether the call succeeded or raised, so a burst
        of failures (quota errors included) is throttled like a burst of
        successes. Exceptions from the awaitable propagate after the delay.
        """
        async with self.call_gate:
            try:
                return await awaitable
            finally:
                if self.pacing_delay > 0:
                    await asyncio.sleep(self.pacing_delay)

