#!/usr/bin/env python3
"""Run one stage of the string catalog pipeline.

Usage:
    xcstrings-pipeline sort        # 1. split Localizable.xcstrings into complete / pending keys
    xcstrings-pipeline translate   # 2. fill missing languages through the OpenAI API
    xcstrings-pipeline merge       # 3. merge all keys into output/4_final_xcstrings
    xcstrings-pipeline split       # inspect: one file per key plus a missing-language report

All options come from the environment or a .env file in the working
directory (OPENAI_API_KEY, OPENAI_MODEL, MAX_CONCURRENT_FILES,
MAX_CONCURRENT_LANGUAGES, API_DELAY_MS, ...).
"""
import argparse
import asyncio
import sys
from typing import Optional, Sequence

import structlog

from xcstrings_pipeline.config import Settings, get_settings
from xcstrings_pipeline.exceptions import PipelineError
from xcstrings_pipeline.jobs.merge_keys import merge_keys
from xcstrings_pipeline.jobs.sort_keys import sort_keys
from xcstrings_pipeline.jobs.split_catalog import split_catalog
from xcstrings_pipeline.jobs.translate_pending_keys import translate_pending_keys
from xcstrings_pipeline.logging_config import configure_logging

logger = structlog.get_logger(__name__)

STAGES = ("split", "sort", "translate", "merge")


def run_stage(stage: str, settings: Settings) -> int:
    if stage == "split":
        split_catalog(settings)
    elif stage == "sort":
        sort_keys(settings)
    elif stage == "translate":
        summary = asyncio.run(translate_pending_keys(settings))
        if not summary.ok:
            return 1
    elif stage == "merge":
        merge_keys(settings)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="xcstrings-pipeline",
        description="Sort, machine-translate and merge an Xcode string catalog.",
    )
    parser.add_argument("stage", choices=STAGES, help="Pipeline stage to run.")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings)
    with structlog.contextvars.bound_contextvars(stage=args.stage):
        try:
            return run_stage(args.stage, settings)
        except PipelineError as e:
            logger.error("Stage failed", error=str(e))
            return 1


if __name__ == "__main__":
    sys.exit(main())
