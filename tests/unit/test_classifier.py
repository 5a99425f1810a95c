"""Unit tests for transaction type assignment"""

from datetime import timedelta

import pytest

from cashlens.config import Settings
from cashlens.domain.classifier import (
    classify_transaction,
    classify_transactions,
    has_explicit_transfer_pattern,
    is_bill_payment,
    payment_method,
    transaction_tags,
)
from cashlens.domain.exceptions import InvalidTransactionBatchError
from cashlens.domain.models import Direction, Transaction, TransactionType
from cashlens.domain.rules import RuleSet


def test_plain_debit_is_spending(base_time):
    netflix = Transaction(transaction_id="N1", timestamp=base_time, amount=500, direction=Direction.DEBIT, merchant="Netflix")

    assert classify_transaction(netflix, [netflix]) is TransactionType.SPENDING


def test_utility_debit_is_bill_payment(base_time):
    power = Transaction(
        transaction_id="E1",
        timestamp=base_time,
        amount=1200,
        direction=Direction.DEBIT,
        merchant="Electricity Board",
        raw_message="Your electricity bill of Rs 1200 has been paid",
    )

    assert classify_transaction(power, [power]) is TransactionType.BILL_PAYMENT


def test_bill_keyword_in_raw_message_only(base_time):
    txn = Transaction(
        transaction_id="R1", timestamp=base_time, amount=299, direction=Direction.DEBIT,
        merchant="Paytm", raw_message="Recharge successful",
    )

    assert is_bill_payment(txn) is True
    assert classify_transaction(txn, [txn]) is TransactionType.BILL_PAYMENT


def test_card_payment_credit_is_internal(base_time):
    """Incoming card payment text marks a credit as a transfer even without a pair"""
    credit = Transaction(
        transaction_id="CC1", timestamp=base_time, amount=15000, direction=Direction.CREDIT,
        merchant="CC Payment to XX1150",
    )

    assert classify_transaction(credit, [credit]) is TransactionType.INTERNAL


def test_card_payment_debit_is_not_internal(base_time):
    """The same text on a debit is a real expense and falls through to bill-payment"""
    debit = Transaction(
        transaction_id="CC2", timestamp=base_time, amount=15000, direction=Direction.DEBIT,
        merchant="CC Payment to XX1150",
    )

    assert classify_transaction(debit, [debit]) is TransactionType.BILL_PAYMENT


@pytest.mark.parametrize(
    "direction, expected",
    [
        (Direction.DEBIT, TransactionType.BILL_PAYMENT),
        (Direction.CREDIT, TransactionType.INTERNAL),
    ],
)
def test_direction_asymmetry_for_credit_card_payment(base_time, direction, expected):
    txn = Transaction(
        transaction_id="X", timestamp=base_time, amount=100, direction=direction, merchant="Credit Card Payment",
    )

    assert classify_transaction(txn, [txn]) is expected


def test_paired_debit_and_credit_are_internal(base_time):
    debit = Transaction(transaction_id="A", timestamp=base_time, bank="HDFC Bank", amount=500, direction=Direction.DEBIT)
    credit = Transaction(
        transaction_id="B", timestamp=base_time + timedelta(minutes=1), bank="HDFC Bank", amount=500,
        direction=Direction.CREDIT,
    )
    batch = [debit, credit]

    assert classify_transaction(debit, batch) is TransactionType.INTERNAL
    assert classify_transaction(credit, batch) is TransactionType.INTERNAL


def test_unpaired_own_bank_transactions_fall_back_to_direction(base_time):
    debit = Transaction(transaction_id="A", timestamp=base_time, bank="HDFC Bank", amount=500, direction=Direction.DEBIT)
    credit = Transaction(
        transaction_id="B", timestamp=base_time + timedelta(minutes=11), bank="HDFC Bank", amount=500,
        direction=Direction.CREDIT,
    )

    result = classify_transactions([debit, credit])

    assert result.types == {"A": TransactionType.SPENDING, "B": TransactionType.INCOME}


def test_missing_direction_is_unknown(base_time):
    txn = Transaction(transaction_id="U", timestamp=base_time, amount=10, merchant="Somewhere")

    assert classify_transaction(txn, [txn]) is TransactionType.UNKNOWN


def test_every_record_gets_exactly_one_type():
    """Malformed rows degrade instead of failing the batch"""
    batch = [
        {},
        {"Transaction_ID": "bad-amount", "Amount": "abc", "Debit_Credit": "Debit"},
        {"Transaction_ID": "bad-direction", "Amount": 10, "Debit_Credit": "sideways"},
        {"Transaction_ID": "bad-time", "Timestamp": "yesterday-ish", "Amount": 10, "Debit_Credit": "Credit"},
        42,
        None,
    ]

    result = classify_transactions(batch)

    assert len(result.classifications) == len(batch)
    assert all(isinstance(c.final_type, TransactionType) for c in result.classifications)
    assert [c.final_type for c in result.classifications] == [
        TransactionType.UNKNOWN,
        TransactionType.SPENDING,
        TransactionType.UNKNOWN,
        TransactionType.INCOME,
        TransactionType.UNKNOWN,
        TransactionType.UNKNOWN,
    ]
    assert result.transfer_pairs.unsortable_ids == ("", "bad-amount", "bad-direction", "bad-time", "", "")


@pytest.mark.parametrize("batch", [None, {"Transaction_ID": "A"}, "transactions", 7])
def test_non_list_batch_is_rejected(batch):
    with pytest.raises(InvalidTransactionBatchError):
        classify_transactions(batch)


def test_explicit_pattern_generic_debit_merchant(base_time):
    with_phrase = Transaction(
        timestamp=base_time, amount=1, direction=Direction.CREDIT, merchant="DEBIT",
        raw_message="Rs 1 transfer from A/c XX99",
    )
    without_phrase = Transaction(
        timestamp=base_time, amount=1, direction=Direction.CREDIT, merchant="debit", raw_message="Refund processed",
    )

    assert has_explicit_transfer_pattern(with_phrase) is True
    assert has_explicit_transfer_pattern(without_phrase) is False


@pytest.mark.parametrize(
    "fields",
    [
        {"method": "Credit Card"},
        {"raw_message": "Payment received on card ending with 4421"},
        {"merchant": "Auto Transfer - Savings"},
        {"category": "Investment Transfer"},
    ],
)
def test_explicit_pattern_signals(base_time, fields):
    txn = Transaction(timestamp=base_time, amount=1, direction=Direction.CREDIT, **fields)

    assert has_explicit_transfer_pattern(txn) is True


def test_salary_credit_has_no_explicit_pattern(base_time):
    salary = Transaction(
        timestamp=base_time, amount=85000, direction=Direction.CREDIT, merchant="ACME Payroll",
        method="NEFT", category="Salary",
    )

    assert has_explicit_transfer_pattern(salary) is False
    assert classify_transaction(salary, [salary]) is TransactionType.INCOME


def test_custom_bill_keywords(base_time):
    rules = RuleSet(bill_payment_keywords=("netflix",))
    netflix = Transaction(transaction_id="N1", timestamp=base_time, amount=500, direction=Direction.DEBIT, merchant="Netflix")

    assert classify_transaction(netflix, [netflix], rules) is TransactionType.BILL_PAYMENT


def test_overrides_applied_in_batch(base_time):
    netflix = Transaction(transaction_id="N1", timestamp=base_time, amount=500, direction=Direction.DEBIT, merchant="Netflix")

    result = classify_transactions([netflix], overrides={"N1": {"type": "internal"}})

    only = result.classifications[0]
    assert only.automatic_type is TransactionType.SPENDING
    assert only.final_type is TransactionType.INTERNAL
    assert result.actual_transactions() == []


@pytest.mark.parametrize(
    "method, label",
    [("upi", "UPI"), ("Credit Card", "Card"), ("neft", "NEFT"), ("wallet", "WALLET"), ("", "Other")],
)
def test_payment_method_labels(method, label):
    assert payment_method(Transaction(method=method)) == label


def test_transaction_tags_merge_method_override(base_time):
    txn = Transaction(
        transaction_id="T1", timestamp=base_time, bank="HSBC", amount=20, direction=Direction.DEBIT, method="upi",
    )
    result = classify_transactions([txn])

    automatic = transaction_tags(result.classifications[0])
    custom = transaction_tags(result.classifications[0], overrides={"T1": {"method": "Cash"}})

    assert automatic.method == "UPI"
    assert automatic.type is TransactionType.SPENDING
    assert automatic.bank == "HSBC"
    assert custom.method == "Cash"


@pytest.mark.parametrize(
    "overrides, provisional, expected",
    [
        (None, None, "Cash"),
        ({"T1": {"method": "Card"}}, None, "Card"),
        (None, {"T1": {"method": "Wallet"}}, "Cash"),
        ({"T1": {"method": "  "}}, None, "Cash"),
    ],
)
def test_method_stored_on_record_between_overrides_and_provisional(base_time, overrides, provisional, expected):
    txn = Transaction(
        transaction_id="T1", timestamp=base_time, amount=20, direction=Direction.DEBIT, method="upi",
        manual_method="Cash",
    )
    classification = classify_transactions([txn]).classifications[0]

    assert transaction_tags(classification, overrides, provisional).method == expected


def test_provisional_method_used_when_nothing_else_set(base_time):
    txn = Transaction(transaction_id="T1", timestamp=base_time, amount=20, direction=Direction.DEBIT, method="upi")
    classification = classify_transactions([txn]).classifications[0]

    assert transaction_tags(classification, provisional={"T1": "spending"}).method == "UPI"
    assert transaction_tags(classification, provisional={"T1": {"method": "Wallet"}}).method == "Wallet"


def test_method_labels_from_settings():
    rules = RuleSet.from_settings(Settings(method_labels={"UPI": "Unified Payments"}))

    assert payment_method(Transaction(method="upi"), rules) == "Unified Payments"
    assert payment_method(Transaction(method="neft"), rules) == "NEFT"
