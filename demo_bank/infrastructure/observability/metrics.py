"""Prometheus metrics for ledger activity, sessions and the chat proxy"""

from prometheus_client import Counter, Histogram

# Ledger metrics
ledger_operation_counter = Counter(
    "bank_ledger_operations_total",
    "Ledger operations by outcome",
    ["operation", "outcome"],  # deposit | withdraw | transfer ; success | <error kind> | replay
)

ledger_amount_histogram = Histogram(
    "bank_ledger_amount_cents",
    "Amounts moved by successful ledger operations",
    ["operation"],
    buckets=[100, 1_000, 10_000, 50_000, 100_000, 500_000, 1_000_000],
)

# Session metrics
session_event_counter = Counter(
    "bank_session_events_total",
    "Session lifecycle events",
    ["event"],  # issued | revoked | rejected | purged
)

# Chat proxy metrics
chat_upstream_failures_counter = Counter(
    "bank_chat_upstream_failures_total",
    "Failed calls to the AI chat service",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_ledger_operation(operation: str, outcome: str, amount_cents: int | None = None) -> None:
    """Record ledger metrics for monitoring volumes and failure rates"""
    ledger_operation_counter.labels(operation=operation, outcome=outcome).inc()
    if outcome == "success" and amount_cents is not None:
        ledger_amount_histogram.labels(operation=operation).observe(amount_cents)
