from prometheus_client import Counter, Histogram

# ---------------------------------------------------------------------------
# Custom Prometheus metrics – exported via the /metrics route exposed by
# prometheus_fastapi_instrumentator in videohost.utils.observability.
# ---------------------------------------------------------------------------

ASTRA_DB_QUERY_DURATION_SECONDS = Histogram(
    "astra_db_query_duration_seconds",
    "Latency of Astra DB Data API queries (seconds)",
    ["operation"],
)

OBJECT_STORE_UPLOAD_DURATION_SECONDS = Histogram(
    "object_store_upload_duration_seconds",
    "Latency of object store uploads (seconds)",
)

ENGAGEMENT_EVENTS_TOTAL = Counter(
    "engagement_events_total",
    "Like, dislike and view events applied to videos",
    ["action"],
)
