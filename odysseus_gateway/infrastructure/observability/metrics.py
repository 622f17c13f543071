"""Prometheus metrics for transfer outcomes, retries and limit warnings"""

from typing import Optional

from prometheus_client import Counter, Histogram

# Transfer metrics
transfer_outcome_counter = Counter(
    "transfer_outcome_total",
    "Finished transfer attempts",
    ["outcome", "failure_kind"],  # committed | rejected | failed | cancelled
)

transfer_retry_counter = Counter(
    "transfer_retry_total",
    "Transfer calls retried after a transient network failure",
)

limit_warning_counter = Counter(
    "limit_warning_total",
    "Approaching-limit warnings raised on valid transfers",
    ["type"],  # daily_limit_warning | monthly_limit_warning
)

transfer_execution_histogram = Histogram(
    "transfer_execution_seconds",
    "Authoritative transfer execution time including retries",
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transfer_outcome(state: str, failure_kind: Optional[str]) -> None:
    """Count a finished transfer by terminal state and failure kind"""
    transfer_outcome_counter.labels(outcome=state, failure_kind=failure_kind or "none").inc()
