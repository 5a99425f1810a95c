"""Unit tests for record parsing at the input boundary"""

from datetime import datetime, timezone

import pytest

from cashlens.domain.exceptions import InvalidTransactionBatchError
from cashlens.domain.models import (
    Direction,
    Transaction,
    TransactionType,
    TransferPairSet,
    coerce_transactions,
)


def test_from_sheet_row():
    row = {
        "Transaction_ID": "TXN-1",
        "Timestamp": "2024-08-14T09:30:00.123Z",
        "Bank": "HDFC Bank",
        "Amount": 500,
        "Debit_Credit": "Debit",
        "Recipient_Merchant": "Netflix",
        "Transaction_Method": "UPI",
        "Raw_Message": "Rs 500 debited",
        "Category": "Entertainment",
        "CustomTags": {"type": "spending"},
    }

    txn = Transaction.from_record(row)

    assert txn == Transaction(
        transaction_id="TXN-1",
        timestamp=datetime(2024, 8, 14, 9, 30, 0, 123000, tzinfo=timezone.utc),
        bank="HDFC Bank",
        amount=500.0,
        direction=Direction.DEBIT,
        merchant="Netflix",
        method="UPI",
        raw_message="Rs 500 debited",
        category="Entertainment",
        manual_type="spending",
    )


def test_from_snake_case_record():
    txn = Transaction.from_record(
        {"transaction_id": "T", "timestamp": 1723627800000, "amount": "-1,250.75", "direction": "credit"}
    )

    assert txn.timestamp == datetime(2024, 8, 14, 9, 30, tzinfo=timezone.utc)
    assert txn.amount == 1250.75
    assert txn.direction is Direction.CREDIT


def test_missing_fields_take_defaults():
    txn = Transaction.from_record({"Amount": None, "Debit_Credit": None, "Recipient_Merchant": None})

    assert txn == Transaction()


@pytest.mark.parametrize("amount", ["abc", "", float("nan"), True, [1, 2]])
def test_unusable_amount_is_zero(amount):
    assert Transaction.from_record({"Amount": amount}).amount == 0.0


def test_amount_stored_as_magnitude():
    assert Transaction.from_record({"Amount": -42.5}).amount == 42.5


def test_coerce_mixed_batch():
    existing = Transaction(transaction_id="keep")

    batch = coerce_transactions([existing, {"Transaction_ID": "row"}, "junk"])

    assert batch[0] is existing
    assert batch[1].transaction_id == "row"
    assert batch[2] == Transaction()


@pytest.mark.parametrize("batch", [None, {}, "abc", 5])
def test_coerce_rejects_non_list(batch):
    with pytest.raises(InvalidTransactionBatchError):
        coerce_transactions(batch)


def test_invalid_batch_error_is_type_error():
    with pytest.raises(TypeError):
        coerce_transactions(None)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Debit", Direction.DEBIT),
        (" credit ", Direction.CREDIT),
        (Direction.CREDIT, Direction.CREDIT),
        ("DR", None),
        (None, None),
    ],
)
def test_direction_parse(value, expected):
    assert Direction.parse(value) is expected


def test_transaction_type_parse():
    assert TransactionType.parse("Bill-Payment") is TransactionType.BILL_PAYMENT
    assert TransactionType.parse("gift") is None


def test_pair_set_membership_by_id():
    pairs = TransferPairSet(ids=frozenset({"A"}))

    assert Transaction(transaction_id="A") in pairs
    assert "A" in pairs
    assert Transaction(transaction_id="B") not in pairs
    assert Transaction() not in pairs


@pytest.mark.parametrize("raw, expected", [("Rs. 1,200.50", 1200.5), ("₹ 99", 99.0), ("(500)", 500.0)])
def test_currency_strings(raw, expected):
    assert Transaction.from_record({"Amount": raw}).amount == expected


def test_custom_tags_method_kept_on_record():
    txn = Transaction.from_record(
        {"Transaction_ID": "T", "Transaction_Method": "UPI", "CustomTags": {"type": "spending", "method": " Cash "}}
    )

    assert txn.manual_type == "spending"
    assert txn.manual_method == "Cash"
    assert txn.method == "UPI"


def test_bare_custom_tag_has_no_method():
    txn = Transaction.from_record({"Transaction_ID": "T", "CustomTags": "income"})

    assert txn.manual_type == "income"
    assert txn.manual_method == ""
