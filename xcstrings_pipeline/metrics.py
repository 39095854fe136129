from prometheus_client import Counter, Histogram

STAGE_DURATION = Histogram(
    "xcstrings_stage_duration_seconds",
    "Duration of pipeline stage runs",
    ["stage"],
)
TRANSLATION_CALLS = Counter(
    "xcstrings_translation_calls_total",
    "Translation API calls by outcome",
    ["outcome"],
)
TRANSLATION_CALL_DURATION = Histogram(
    "xcstrings_translation_call_duration_seconds",
    "Latency of a single translation API call",
)
UNITS_PROCESSED = Counter(
    "xcstrings_units_processed_total",
    "Catalog keys processed by the translate stage",
    ["outcome"],
)
