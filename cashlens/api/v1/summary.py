"""POST /v1/summary - totals and breakdowns over actual transactions"""

import logging
import time
from collections import Counter
from datetime import date
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from cashlens.api.dependencies import get_request_id, get_rules
from cashlens.api.v1.schemas import (
    BreakdownSchema,
    DailyTotalSchema,
    GroupTotalSchema,
    KpiSchema,
    MetricsSchema,
    MonthlyTotalSchema,
    SummaryRequest,
    SummaryResponse,
)
from cashlens.domain.aggregator import (
    compute_kpis,
    daily_series,
    filter_transactions,
    group_by_category,
    group_by_day,
    group_by_method,
    group_by_month,
    metrics_from_actual,
    monthly_trend,
)
from cashlens.domain.classifier import classify_transactions
from cashlens.domain.exceptions import InvalidTransactionBatchError
from cashlens.domain.models import Breakdown, Transaction
from cashlens.domain.overrides import OverrideMap
from cashlens.domain.rules import RuleSet
from cashlens.infrastructure.observability.logging import log_classification
from cashlens.infrastructure.observability.metrics import record_classification

router = APIRouter()


def _breakdown_schema(breakdown: Breakdown) -> BreakdownSchema:
    return BreakdownSchema(
        spending=[GroupTotalSchema(key=g.key, amount=round(g.amount, 2)) for g in breakdown.spending],
        income=[GroupTotalSchema(key=g.key, amount=round(g.amount, 2)) for g in breakdown.income],
    )


def _days_in_period(actual: List[Transaction], start: Optional[date], end: Optional[date]) -> int:
    """Inclusive day count of the requested period, or of the data when unbounded"""
    days = [t.timestamp.date() for t in actual if t.timestamp is not None]
    first = start or (min(days) if days else None)
    last = end or (max(days) if days else None)
    if first is None or last is None or last < first:
        return 0
    return (last - first).days + 1


def build_summary(
    transactions: Any,
    overrides: Optional[OverrideMap],
    provisional: Optional[OverrideMap],
    start: Optional[date],
    end: Optional[date],
    rules: RuleSet,
    request_id: str,
    banks: Optional[List[str]] = None,
    methods: Optional[List[str]] = None,
    directions: Optional[List[str]] = None,
) -> SummaryResponse:
    """
    Classify a batch restricted to [start, end] and the optional bank,
    method and direction filters, then summarise what remains.

    The monthly trend covers the six months ending with `end`, or with the
    latest dated transaction when the period is open.

    Raises:
        InvalidTransactionBatchError: If transactions is not a list
    """
    start_time = time.time()

    batch = filter_transactions(transactions, start, end, banks, methods, directions)
    result = classify_transactions(batch, overrides, provisional, rules)
    actual = result.actual_transactions()

    metrics = metrics_from_actual(actual).rounded()
    kpis = compute_kpis(actual, _days_in_period(actual, start, end), rules)

    daily = daily_series(actual, start, end) if start is not None and end is not None else []
    dated = [t.timestamp.date() for t in actual if t.timestamp is not None]
    last_month = end or (max(dated) if dated else None)
    trend = monthly_trend(actual, last_month) if last_month is not None else []

    duration_ms = (time.time() - start_time) * 1000
    record_classification(result.classifications, result.transfer_pairs)
    log_classification(
        request_id,
        len(result.classifications),
        dict(Counter(c.final_type.value for c in result.classifications)),
        len(result.transfer_pairs.pairs),
        duration_ms,
    )

    return SummaryResponse(
        metrics=MetricsSchema(
            total_spend=metrics.total_spend,
            total_income=metrics.total_income,
            net_flow=metrics.net_flow,
            count=metrics.count,
        ),
        by_category=_breakdown_schema(group_by_category(actual)),
        by_method=_breakdown_schema(group_by_method(actual, rules)),
        by_day=_breakdown_schema(group_by_day(actual)),
        by_month=_breakdown_schema(group_by_month(actual)),
        kpis=KpiSchema(
            average_daily_spending=round(kpis.average_daily_spending, 2),
            largest_category=GroupTotalSchema(
                key=kpis.largest_category.key, amount=round(kpis.largest_category.amount, 2)
            ),
            savings_rate=round(kpis.savings_rate, 1),
            bills_amount=round(kpis.bills_amount, 2),
        ),
        daily=[
            DailyTotalSchema(day=d.day, spending=round(d.spending, 2), income=round(d.income, 2))
            for d in daily
        ],
        trend=[
            MonthlyTotalSchema(month=m.month, spending=round(m.spending, 2), income=round(m.income, 2))
            for m in trend
        ],
    )


@router.post("/summary", response_model=SummaryResponse)
def summarize(
    request_body: SummaryRequest,
    request: Request,
    rules: RuleSet = Depends(get_rules),
):
    """
    Summarise a batch excluding internal transfers.

    Returns metrics (spend, income, net flow, count), breakdowns by category,
    payment method, day and month, and headline KPIs.
    """
    request_id = get_request_id(request)

    try:
        return build_summary(
            request_body.transactions,
            request_body.overrides,
            request_body.provisional_overrides,
            request_body.start,
            request_body.end,
            rules,
            request_id,
            banks=request_body.banks,
            methods=request_body.methods,
            directions=request_body.directions,
        )
    except InvalidTransactionBatchError as e:
        logging.warning(f"Invalid transaction batch: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))
