"""Domain models - pure Python dataclasses representing business entities"""

import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from cashlens.domain.exceptions import InvalidTransactionBatchError
from cashlens.utils.date_utils import parse_timestamp


class Direction(str, Enum):
    """Side of the account a transaction hits"""

    DEBIT = "Debit"
    CREDIT = "Credit"

    @classmethod
    def parse(cls, value: Any) -> Optional["Direction"]:
        if isinstance(value, Direction):
            return value
        if isinstance(value, str):
            text = value.strip().lower()
            if text == "debit":
                return cls.DEBIT
            if text == "credit":
                return cls.CREDIT
        return None


class TransactionType(str, Enum):
    """Semantic type assigned to every transaction"""

    INTERNAL = "internal"
    BILL_PAYMENT = "bill-payment"
    INCOME = "income"
    SPENDING = "spending"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> Optional["TransactionType"]:
        if isinstance(value, TransactionType):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None


# Spreadsheet column name -> Transaction field
RECORD_FIELD_ALIASES: Dict[str, str] = {
    "Transaction_ID": "transaction_id",
    "Timestamp": "timestamp",
    "Bank": "bank",
    "Amount": "amount",
    "Debit_Credit": "direction",
    "Recipient_Merchant": "merchant",
    "Transaction_Method": "method",
    "Raw_Message": "raw_message",
    "Category": "category",
    "id": "transaction_id",
    "merchant_name": "merchant",
    "rawMessage": "raw_message",
    "manualType": "manual_type",
    "manualMethod": "manual_method",
}

_AMOUNT_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _amount(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _AMOUNT_PATTERN.search(value.replace(",", ""))
        if match is None:
            return 0.0
        number = float(match.group())
    else:
        return 0.0
    # NaN and infinities carry no usable magnitude
    if number != number or number in (float("inf"), float("-inf")):
        return 0.0
    return abs(number)


def _manual_type(value: Any) -> str:
    """Custom tags arrive either as {"type": ...} or as the bare type"""
    if isinstance(value, Mapping):
        return _text(value.get("type"))
    return _text(value)


def _manual_method(value: Any) -> str:
    if isinstance(value, Mapping):
        return _text(value.get("method")).strip()
    return ""


@dataclass(frozen=True)
class Transaction:
    """Bank transaction record from the spreadsheet store"""

    transaction_id: str = ""
    timestamp: Optional[datetime] = None
    bank: str = ""
    amount: float = 0.0
    direction: Optional[Direction] = None
    merchant: str = ""
    method: str = ""
    raw_message: str = ""
    category: str = ""
    manual_type: str = ""
    manual_method: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Transaction":
        """
        Build a Transaction from a raw row.

        Accepts snake_case field names or the spreadsheet column names.
        Missing or malformed fields fall back to their defaults so a bad row
        never fails the batch.
        """
        values: Dict[str, Any] = {}
        for key, value in record.items():
            name = RECORD_FIELD_ALIASES.get(key, key)
            values.setdefault(name, value)

        manual = values.get("manual_type")
        custom_tags = record.get("CustomTags")
        if not manual:
            manual = custom_tags

        method_override = (
            _text(values.get("manual_method")).strip() or _manual_method(manual) or _manual_method(custom_tags)
        )

        return cls(
            transaction_id=_text(values.get("transaction_id")).strip(),
            timestamp=parse_timestamp(values.get("timestamp")),
            bank=_text(values.get("bank")),
            amount=_amount(values.get("amount")),
            direction=Direction.parse(values.get("direction")),
            merchant=_text(values.get("merchant")),
            method=_text(values.get("method")),
            raw_message=_text(values.get("raw_message")),
            category=_text(values.get("category")),
            manual_type=_manual_type(manual),
            manual_method=method_override,
        )


def coerce_transactions(transactions: Any) -> Tuple[Transaction, ...]:
    """
    Normalize an input batch to a tuple of Transactions.

    Raises:
        InvalidTransactionBatchError: If the batch is not a list or tuple
    """
    if not isinstance(transactions, (list, tuple)):
        raise InvalidTransactionBatchError(
            f"Expected a list of transactions, got {type(transactions).__name__}"
        )

    coerced = []
    for item in transactions:
        if isinstance(item, Transaction):
            coerced.append(item)
        elif isinstance(item, Mapping):
            coerced.append(Transaction.from_record(item))
        else:
            coerced.append(Transaction())
    return tuple(coerced)


@dataclass(frozen=True)
class TransferPairSet:
    """Transactions detected as either side of an internal transfer"""

    ids: FrozenSet[str] = frozenset()
    pairs: Tuple[Tuple[str, str], ...] = ()
    unsortable_ids: Tuple[str, ...] = ()
    # Paired records without an id can only be recognised by identity
    anonymous: Tuple[Transaction, ...] = ()

    def __contains__(self, transaction: object) -> bool:
        if isinstance(transaction, Transaction):
            if transaction.transaction_id:
                return transaction.transaction_id in self.ids
            return any(member is transaction for member in self.anonymous)
        return transaction in self.ids

    def __len__(self) -> int:
        return len(self.ids) + len(self.anonymous)


@dataclass(frozen=True)
class Classification:
    """Automatic and final (override-resolved) type of one transaction"""

    transaction: Transaction
    automatic_type: TransactionType
    final_type: TransactionType


@dataclass
class ClassificationResult:
    """Output of a classification pass, in input order"""

    classifications: List[Classification]
    transfer_pairs: TransferPairSet

    @property
    def types(self) -> Dict[str, TransactionType]:
        """Transaction id -> final type (last occurrence wins for duplicate ids)"""
        return {c.transaction.transaction_id: c.final_type for c in self.classifications}

    def actual_transactions(self) -> List[Transaction]:
        return [
            c.transaction
            for c in self.classifications
            if c.final_type is not TransactionType.INTERNAL
        ]


@dataclass(frozen=True)
class TransactionTags:
    """Display tags for a transaction"""

    type: TransactionType
    method: str
    bank: str


@dataclass
class DerivedMetrics:
    """Totals over actual (non-internal) transactions"""

    total_spend: float
    total_income: float
    net_flow: float
    count: int

    def rounded(self) -> "DerivedMetrics":
        """Copy with currency fields rounded for display"""
        return replace(
            self,
            total_spend=round(self.total_spend, 2),
            total_income=round(self.total_income, 2),
            net_flow=round(self.net_flow, 2),
        )


@dataclass(frozen=True)
class GroupTotal:
    """Summed amount for one grouping key"""

    key: str
    amount: float


@dataclass
class Breakdown:
    """Grouped totals, Debit and Credit summed independently"""

    spending: List[GroupTotal] = field(default_factory=list)
    income: List[GroupTotal] = field(default_factory=list)


@dataclass
class DailyTotal:
    """Spending and income for one calendar day"""

    day: str
    spending: float
    income: float


@dataclass
class MonthlyTotal:
    """Spending and income for one calendar month (YYYY-MM)"""

    month: str
    spending: float
    income: float


@dataclass
class DashboardKpis:
    """Headline indicators shown above the dashboard charts"""

    average_daily_spending: float
    largest_category: GroupTotal
    savings_rate: float
    bills_amount: float

