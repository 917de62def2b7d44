"""Prometheus metrics for review and quiz activity."""
from prometheus_client import Counter, Histogram, start_http_server

# Quiz metrics
quizzes_generated = Counter(
    "wordrecall_quizzes_generated_total",
    "Total number of quizzes generated",
    ["mode"],
)

quiz_size = Histogram(
    "wordrecall_quiz_questions",
    "Number of questions per generated quiz",
    buckets=[1, 5, 10, 20, 50],
)

# Review metrics
reviews_recorded = Counter(
    "wordrecall_reviews_recorded_total",
    "Total number of review events applied by the scheduler",
    ["status"],
)

answers_skipped = Counter(
    "wordrecall_answers_skipped_total",
    "Submitted answers ignored because their learner word does not exist",
)

# Word management metrics
words_created = Counter(
    "wordrecall_words_created_total",
    "Total number of words added to the word bank",
)

# Enrichment metrics
provider_failures = Counter(
    "wordrecall_provider_failures_total",
    "Total number of failed dictionary or image provider calls",
    ["provider"],
)

enrichment_cache_hits = Counter(
    "wordrecall_enrichment_cache_hits_total",
    "Provider lookups answered from the enrichment cache",
    ["provider"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
