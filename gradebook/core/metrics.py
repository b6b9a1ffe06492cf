"""Prometheus metric inventory.

Every metric the service exports is declared here; the modules that own
the behaviour import the metric and increment/observe it in place.

HTTP metrics are fed by MetricsMiddleware.  The grading metrics answer
the questions an on-call engineer asks about this service: how long does
a breakdown take, how many certificates are being created vs recomputed,
and is the notification queue backing up.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Grading metrics
# ---------------------------------------------------------------------------

GRADE_COMPUTE_DURATION = Histogram(
    "grade_compute_seconds",
    "Time spent computing one learner's grade breakdown for a course",
    # One query per activity, so this grows with course size.
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

CERTIFICATES_ISSUED = Counter(
    "certificates_issued_total",
    "Certificate upserts by outcome",
    ["outcome"],  # "created" or "updated"
)

COURSE_COMPLETIONS = Counter(
    "course_completions_total",
    "Enrollments that crossed from <100% to 100% progress",
)

NOTIFICATIONS_ENQUEUED = Counter(
    "notifications_enqueued_total",
    "Notification events pushed onto the queue",
    ["type"],  # "course_completed" or "certificate_issued"
)

QUEUE_DEPTH = Gauge(
    "task_queue_depth",
    "Number of tasks waiting in a queue",
    ["queue_name"],
)
