"""Prometheus metrics for registration, onboarding and Stripe API health"""

from prometheus_client import Counter, Histogram

# Registration metrics
registration_counter = Counter(
    "connect_registration_total",
    "Registration attempts by outcome",
    ["outcome"],  # created | invalid | conflict | failed
)

# Onboarding metrics
onboarding_counter = Counter(
    "connect_onboarding_total",
    "Onboarding submissions by outcome",
    ["outcome"],  # hosted_link | skipped | invalid | failed
)

# Stripe API metrics
stripe_failure_counter = Counter(
    "stripe_api_failures_total",
    "Failed Stripe API calls",
    ["operation"],
)

orphaned_account_counter = Counter(
    "connect_orphaned_accounts_total",
    "Connected accounts left without a local user after compensation failed",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_registration(outcome: str) -> None:
    registration_counter.labels(outcome=outcome).inc()


def record_onboarding(outcome: str) -> None:
    onboarding_counter.labels(outcome=outcome).inc()
