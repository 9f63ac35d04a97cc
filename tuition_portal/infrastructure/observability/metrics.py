"""Prometheus metrics for checkout volume, rejections and upstream failures"""

from decimal import Decimal
from prometheus_client import Counter, Histogram

# Checkout metrics
checkout_counter = Counter(
    "tuition_checkout_total",
    "Checkout requests handled",
    ["outcome", "payment_type"],  # created | rejected
)

checkout_amount_bucket_counter = Counter(
    "tuition_checkout_amount_bucket",
    "Checkout sessions created by charged amount",
    ["bucket"],  # <$500, $500-$2500, $2500-$10000, $10000+
)

rejection_counter = Counter(
    "tuition_checkout_rejections_total",
    "Checkout requests rejected by business rules",
    ["reason"],
)

# Upstream metrics
crm_failure_counter = Counter(
    "crm_fetch_failures_total",
    "Failed HubSpot API calls",
)

checkout_failure_counter = Counter(
    "checkout_session_failures_total",
    "Failed Stripe checkout session creations",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_checkout(payment_type: str, total_amount: Decimal) -> None:
    """Record a created checkout session and bucket its amount"""
    checkout_counter.labels(outcome="created", payment_type=payment_type).inc()

    if total_amount < 500:
        bucket = "<$500"
    elif total_amount < 2500:
        bucket = "$500-$2500"
    elif total_amount < 10000:
        bucket = "$2500-$10000"
    else:
        bucket = "$10000+"

    checkout_amount_bucket_counter.labels(bucket=bucket).inc()


def record_rejection(payment_type: str, reason: str) -> None:
    checkout_counter.labels(outcome="rejected", payment_type=payment_type).inc()
    rejection_counter.labels(reason=reason).inc()
