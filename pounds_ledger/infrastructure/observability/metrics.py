"""Prometheus metrics for funding, withdrawals, PIN checks and gateway health"""

from prometheus_client import Counter, Histogram

# Ledger metrics
funding_counter = Counter(
    "pounds_funding_total",
    "Funding attempts by outcome",
    ["outcome"],  # credited | unverified | rejected | failed
)

funded_amount_counter = Counter(
    "pounds_funded_kobo_total",
    "Total amount credited through funding, in kobo",
)

withdrawal_counter = Counter(
    "pounds_withdrawal_requests_total",
    "Withdrawal requests by outcome",
    ["outcome"],  # accepted | invalid | pin_required | pin_rejected | not_found | failed
)

pin_rejection_counter = Counter(
    "pounds_pin_rejections_total",
    "Transaction PIN mismatches",
)

stale_write_counter = Counter(
    "pounds_stale_account_writes_total",
    "Account writes retried after a concurrent update",
)

# Gateway metrics
gateway_latency_histogram = Histogram(
    "gateway_latency_seconds",
    "External gateway response time",
    ["gateway"],  # payment | bank_resolver
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

gateway_failure_counter = Counter(
    "gateway_failures_total",
    "Failed external gateway calls",
    ["gateway"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_funding(outcome: str, amount_kobo: int = 0) -> None:
    """Record a funding attempt; only credited amounts add to the funded total"""
    funding_counter.labels(outcome=outcome).inc()
    if outcome == "credited":
        funded_amount_counter.inc(amount_kobo)


def record_withdrawal(outcome: str) -> None:
    withdrawal_counter.labels(outcome=outcome).inc()
    if outcome == "pin_rejected":
        pin_rejection_counter.inc()
