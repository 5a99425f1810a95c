"""Aggregation over actual transactions - totals, grouped breakdowns and dashboard KPIs"""

from collections import defaultdict
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from cashlens.domain.classifier import classify_transactions, is_bill_payment, payment_method
from cashlens.domain.models import (
    Breakdown,
    DailyTotal,
    DashboardKpis,
    DerivedMetrics,
    Direction,
    GroupTotal,
    MonthlyTotal,
    Transaction,
    coerce_transactions,
)
from cashlens.domain.overrides import OverrideMap
from cashlens.domain.rules import DEFAULT_RULES, RuleSet, normalize
from cashlens.utils.date_utils import day_key, generate_date_range, month_key

UNCATEGORIZED = "Uncategorized"
UNDATED = "Undated"
NO_DATA = "No data"


def compute_actual(
    transactions: Any,
    overrides: Optional[OverrideMap] = None,
    provisional: Optional[OverrideMap] = None,
    rules: RuleSet = DEFAULT_RULES,
) -> List[Transaction]:
    """Transactions whose final type is not internal, in input order"""
    return classify_transactions(transactions, overrides, provisional, rules).actual_transactions()


def metrics_from_actual(actual: Iterable[Transaction]) -> DerivedMetrics:
    """Spend/income/net/count over an already filtered transaction list"""
    total_spend = 0.0
    total_income = 0.0
    count = 0
    for txn in actual:
        count += 1
        if txn.direction is Direction.DEBIT:
            total_spend += txn.amount
        elif txn.direction is Direction.CREDIT:
            total_income += txn.amount

    return DerivedMetrics(
        total_spend=total_spend,
        total_income=total_income,
        net_flow=total_income - total_spend,
        count=count,
    )


def compute_metrics(
    transactions: Any,
    overrides: Optional[OverrideMap] = None,
    provisional: Optional[OverrideMap] = None,
    rules: RuleSet = DEFAULT_RULES,
) -> DerivedMetrics:
    """
    Compute derived metrics excluding internal transfers.

    - total_spend: sum of Debit amounts
    - total_income: sum of Credit amounts
    - net_flow: total_income - total_spend
    - count: number of actual transactions (any direction)
    """
    return metrics_from_actual(compute_actual(transactions, overrides, provisional, rules))


def category_label(category: str) -> str:
    """Display name for a category, with a sentinel for missing values"""
    text = (category or "").strip()
    if not text or text in ("undefined", "null"):
        return UNCATEGORIZED
    return text


def _by_amount(totals: Dict[str, float]) -> List[GroupTotal]:
    ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    return [GroupTotal(key=key, amount=amount) for key, amount in ordered]


def _by_key(totals: Dict[str, float]) -> List[GroupTotal]:
    return [GroupTotal(key=key, amount=totals[key]) for key in sorted(totals)]


def _breakdown(
    actual: Iterable[Transaction],
    key_fn: Callable[[Transaction], str],
    order: Callable[[Dict[str, float]], List[GroupTotal]],
) -> Breakdown:
    spending: Dict[str, float] = defaultdict(float)
    income: Dict[str, float] = defaultdict(float)

    for txn in actual:
        if txn.direction is Direction.DEBIT:
            spending[key_fn(txn)] += txn.amount
        elif txn.direction is Direction.CREDIT:
            income[key_fn(txn)] += txn.amount

    return Breakdown(spending=order(spending), income=order(income))


def group_by_category(actual: Iterable[Transaction]) -> Breakdown:
    """Totals per category, largest first"""
    return _breakdown(actual, lambda t: category_label(t.category), _by_amount)


def group_by_method(actual: Iterable[Transaction], rules: RuleSet = DEFAULT_RULES) -> Breakdown:
    """Totals per payment method label, largest first"""
    return _breakdown(actual, lambda t: payment_method(t, rules), _by_amount)


def group_by_day(actual: Iterable[Transaction]) -> Breakdown:
    """Totals per calendar day (YYYY-MM-DD), chronological"""
    return _breakdown(actual, lambda t: day_key(t.timestamp) if t.timestamp else UNDATED, _by_key)


def group_by_month(actual: Iterable[Transaction]) -> Breakdown:
    """Totals per calendar month (YYYY-MM), chronological"""
    return _breakdown(actual, lambda t: month_key(t.timestamp) if t.timestamp else UNDATED, _by_key)


def daily_series(actual: Iterable[Transaction], start: date, end: date) -> List[DailyTotal]:
    """Zero-filled spending/income for every day from start to end (inclusive)"""
    days = {day.isoformat(): DailyTotal(day=day.isoformat(), spending=0.0, income=0.0)
            for day in generate_date_range(start, end)}

    for txn in actual:
        if txn.timestamp is None:
            continue
        bucket = days.get(day_key(txn.timestamp))
        if bucket is None:
            continue
        if txn.direction is Direction.DEBIT:
            bucket.spending += txn.amount
        elif txn.direction is Direction.CREDIT:
            bucket.income += txn.amount

    return list(days.values())


def _month_start(day: date, offset: int) -> date:
    index = day.year * 12 + day.month - 1 + offset
    return date(index // 12, index % 12 + 1, 1)


def monthly_trend(actual: Iterable[Transaction], last_month: date, months: int = 6) -> List[MonthlyTotal]:
    """Zero-filled spending/income for the `months` calendar months ending with last_month"""
    buckets = {}
    for offset in range(-(months - 1), 1):
        key = _month_start(last_month, offset).strftime("%Y-%m")
        buckets[key] = MonthlyTotal(month=key, spending=0.0, income=0.0)

    for txn in actual:
        if txn.timestamp is None:
            continue
        bucket = buckets.get(month_key(txn.timestamp))
        if bucket is None:
            continue
        if txn.direction is Direction.DEBIT:
            bucket.spending += txn.amount
        elif txn.direction is Direction.CREDIT:
            bucket.income += txn.amount

    return list(buckets.values())


def _match_set(values: Optional[Iterable[str]]) -> Optional[Set[str]]:
    if not values:
        return None
    return {normalize(v) for v in values if isinstance(v, str)}


def filter_transactions(
    transactions: Any,
    start: Optional[date] = None,
    end: Optional[date] = None,
    banks: Optional[Iterable[str]] = None,
    methods: Optional[Iterable[str]] = None,
    directions: Optional[Iterable[Any]] = None,
) -> List[Transaction]:
    """
    Restrict a batch before classification.

    Dates are an inclusive range; undated transactions are dropped once any
    bound is given. Banks and methods match the raw record values ignoring
    case, directions accept "Debit"/"Credit". An empty or missing list
    selects everything.
    """
    batch = coerce_transactions(transactions)

    bank_set = _match_set(banks)
    method_set = _match_set(methods)
    direction_set = ({Direction.parse(d) for d in directions} - {None}) if directions else None

    selected = []
    for txn in batch:
        if start is not None or end is not None:
            if txn.timestamp is None:
                continue
            day = txn.timestamp.date()
            if start is not None and day < start:
                continue
            if end is not None and day > end:
                continue
        if bank_set is not None and normalize(txn.bank) not in bank_set:
            continue
        if method_set is not None and normalize(txn.method) not in method_set:
            continue
        if direction_set is not None and txn.direction not in direction_set:
            continue
        selected.append(txn)
    return selected


def compute_kpis(
    actual: List[Transaction],
    days_elapsed: int,
    rules: RuleSet = DEFAULT_RULES,
) -> DashboardKpis:
    """
    Headline indicators over a period of actual transactions.

    - average_daily_spending: spend / days_elapsed (0 when no days)
    - largest_category: biggest spending category
    - savings_rate: (income - spend) / income as a percentage (0 without income)
    - bills_amount: debits matching a bill-payment keyword
    """
    metrics = metrics_from_actual(actual)

    average_daily = metrics.total_spend / days_elapsed if days_elapsed > 0 else 0.0

    categories = group_by_category(actual).spending
    largest = categories[0] if categories else GroupTotal(key=NO_DATA, amount=0.0)

    if metrics.total_income > 0:
        savings_rate = (metrics.total_income - metrics.total_spend) / metrics.total_income * 100
    else:
        savings_rate = 0.0

    bills = sum(
        (t.amount for t in actual if t.direction is Direction.DEBIT and is_bill_payment(t, rules)),
        0.0,
    )

    return DashboardKpis(
        average_daily_spending=average_daily,
        largest_category=largest,
        savings_rate=savings_rate,
        bills_amount=bills,
    )
