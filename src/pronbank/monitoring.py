"""Monitoring configuration for the pronunciation bank."""
from prometheus_client import Counter, start_http_server

# Word management metrics
words_added = Counter(
    "pronbank_words_added_total",
    "Total number of words added to pronunciation banks",
)

words_deleted = Counter(
    "pronbank_words_deleted_total",
    "Total number of words removed from pronunciation banks",
)

# Practice metrics
answers_recorded = Counter(
    "pronbank_answers_recorded_total",
    "Total number of practice answers saved",
    ["result"],  # correct, incorrect
)

stage_promotions = Counter(
    "pronbank_stage_promotions_total",
    "Total number of words promoted to a later stage",
    ["stage"],
)

practice_sessions_started = Counter(
    "pronbank_practice_sessions_started_total",
    "Total number of practice sessions started",
)

practice_sessions_completed = Counter(
    "pronbank_practice_sessions_completed_total",
    "Total number of practice sessions completed",
)

retention_checks = Counter(
    "pronbank_retention_checks_total",
    "Total number of graduated words drawn back in for a retention check",
)


def start_metrics_server(port: int = 8000) -> None:
    """Start the metrics server."""
    start_http_server(port)
