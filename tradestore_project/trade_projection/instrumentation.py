from prometheus_client import Counter, Histogram

CANDIDATES_PROCESSED = Counter(
    "tradestore_candidates_processed_total",
    "Trade candidates run through validation, by outcome",
    ["outcome"],
)

CANDIDATES_REJECTED = Counter(
    "tradestore_candidates_rejected_total",
    "Rejected trade candidates, by failed rule",
    ["rule"],
)

STORAGE_FAILURES = Counter(
    "tradestore_storage_failures_total",
    "Storage calls that failed and were surfaced as retryable",
    ["operation"],
)

EXPIRY_TRANSITIONS = Counter(
    "tradestore_expiry_transitions_total",
    "Projection rows moved from ACTIVE to EXPIRED",
)

PROCESS_SECONDS = Histogram(
    "tradestore_process_seconds",
    "Wall time spent processing one trade candidate",
)
