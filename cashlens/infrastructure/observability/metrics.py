"""Prometheus metrics for monitoring classification outcomes and store health"""

from typing import Iterable

from prometheus_client import Counter, Histogram

from cashlens.domain.models import Classification, TransferPairSet

# Classification metrics
classification_counter = Counter(
    "cashlens_classified_total",
    "Transactions classified by final type",
    ["type"],  # internal | bill-payment | income | spending | unknown
)

transfer_pairs_counter = Counter(
    "cashlens_transfer_pairs_total",
    "Internal transfer pairs detected",
)

unsortable_timestamp_counter = Counter(
    "cashlens_unsortable_timestamps_total",
    "Transactions excluded from pairing due to unparseable timestamps",
)

# Spreadsheet store metrics
sheet_fetch_failures_counter = Counter(
    "sheet_fetch_failures_total",
    "Failed spreadsheet store calls",
)

sheet_fetch_latency_histogram = Histogram(
    "sheet_fetch_latency_seconds",
    "Spreadsheet store response time",
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_classification(classifications: Iterable[Classification], pairs: TransferPairSet) -> None:
    """Record per-type counts and pairing outcomes for one classification pass"""
    for classification in classifications:
        classification_counter.labels(type=classification.final_type.value).inc()

    transfer_pairs_counter.inc(len(pairs.pairs))
    unsortable_timestamp_counter.inc(len(pairs.unsortable_ids))
