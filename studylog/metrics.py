"""Prometheus metrics for the study log.

All metric objects are defined here so they can be imported from any module.
"""

from prometheus_client import Counter, Histogram

# ---------------------------------------------------------------------------
# Store metrics
# ---------------------------------------------------------------------------

NOTE_WRITES = Counter(
    "studylog_note_writes_total",
    "Total note mutations",
    ["operation"],  # insert, update, delete
)

STORE_LOAD_FAILURES = Counter(
    "studylog_store_load_failures_total",
    "Persisted documents that could not be parsed and were treated as empty",
)

# ---------------------------------------------------------------------------
# Backup metrics
# ---------------------------------------------------------------------------

BACKUP_OPERATIONS = Counter(
    "studylog_backup_operations_total",
    "Export, import and wipe operations",
    ["operation", "status"],
)

# ---------------------------------------------------------------------------
# HTTP request metrics
# ---------------------------------------------------------------------------

HTTP_REQUESTS = Counter(
    "studylog_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_DURATION = Histogram(
    "studylog_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)
