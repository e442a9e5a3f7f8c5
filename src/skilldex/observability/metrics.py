from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

# Discovery Metrics
ASK_REQUESTS = Counter(
    "skilldex_ask_requests_total",
    "Total number of discovery queries",
    ["status"]
)

ASK_LATENCY = Histogram(
    "skilldex_ask_latency_seconds",
    "Discovery query latency in seconds",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0]
)

SEGMENT_FAILURES = Counter(
    "skilldex_segment_failures_total",
    "Total number of search segments that failed and were skipped",
    ["domain"]
)

# Invocation Metrics
RUN_ITEMS = Counter(
    "skilldex_run_items_total",
    "Total number of batch invoke items",
    ["status"]
)

RUN_LATENCY = Histogram(
    "skilldex_run_latency_seconds",
    "Batch invoke latency in seconds",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0]
)

# Sync Metrics
SYNC_SOURCES = Counter(
    "skilldex_sync_sources_total",
    "Source synchronization outcomes",
    ["outcome"]
)

SYNC_LATENCY = Histogram(
    "skilldex_sync_latency_seconds",
    "Full initialization sync latency in seconds",
)

INDEXED_DOCUMENTS = Counter(
    "skilldex_indexed_documents_total",
    "Documents written to the search index",
    ["status"]
)


def get_metrics():
    """Return latest metrics in Prometheus format."""
    return generate_latest(), CONTENT_TYPE_LATEST
