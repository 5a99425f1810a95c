"""Transaction classification - internal / bill-payment / income / spending / unknown"""

from typing import Any, Optional, Sequence

from cashlens.domain.matcher import find_transfer_pairs
from cashlens.domain.models import (
    Classification,
    ClassificationResult,
    Direction,
    Transaction,
    TransactionTags,
    TransactionType,
    TransferPairSet,
    coerce_transactions,
)
from cashlens.domain.overrides import OverrideMap, override_entry, resolve_final_type
from cashlens.domain.rules import (
    CREDIT_CARD_METHOD,
    DEFAULT_RULES,
    GENERIC_DEBIT_MERCHANT,
    RuleSet,
    contains_any,
    normalize,
)


def has_explicit_transfer_pattern(transaction: Transaction, rules: RuleSet = DEFAULT_RULES) -> bool:
    """
    Detect transfers that have no visible counterpart in the batch.

    Matches credit card payments, auto/scheduled transfers and generic
    "debit" merchants whose message names the transfer explicitly.
    """
    merchant = normalize(transaction.merchant)

    if merchant == GENERIC_DEBIT_MERCHANT and contains_any(
        transaction.raw_message, rules.explicit_transfer_phrases
    ):
        return True

    if normalize(transaction.method) == CREDIT_CARD_METHOD:
        return True

    if contains_any(transaction.raw_message, rules.credit_card_indicators):
        return True

    if contains_any(merchant, rules.transfer_merchant_patterns):
        return True

    return contains_any(transaction.category, rules.transfer_categories)


def is_internal_transfer(
    transaction: Transaction, pairs: TransferPairSet, rules: RuleSet = DEFAULT_RULES
) -> bool:
    """
    Decide whether a transaction is money moving between own accounts.

    Debits count only when paired: a card bill or loan payment that merely
    looks like a transfer is real spending. Credits count when paired or
    when they match an explicit transfer pattern.
    """
    in_pair = transaction in pairs

    if transaction.direction is Direction.CREDIT:
        return in_pair or has_explicit_transfer_pattern(transaction, rules)

    return in_pair


def is_bill_payment(transaction: Transaction, rules: RuleSet = DEFAULT_RULES) -> bool:
    return contains_any(transaction.merchant, rules.bill_payment_keywords) or contains_any(
        transaction.raw_message, rules.bill_payment_keywords
    )


def classify_transaction(
    transaction: Transaction,
    all_transactions: Sequence[Transaction],
    rules: RuleSet = DEFAULT_RULES,
    pairs: Optional[TransferPairSet] = None,
) -> TransactionType:
    """
    Assign exactly one automatic type to a transaction.

    Rule order (first match wins): internal, bill-payment, income (credit),
    spending (debit), unknown (no usable direction).

    Args:
        transaction: Transaction to classify
        all_transactions: Batch the transaction belongs to (pairing context)
        rules: Pattern lists to apply
        pairs: Pre-computed transfer pairs for the batch, if available
    """
    if pairs is None:
        pairs = find_transfer_pairs(coerce_transactions(all_transactions), rules)

    if is_internal_transfer(transaction, pairs, rules):
        return TransactionType.INTERNAL

    if is_bill_payment(transaction, rules):
        return TransactionType.BILL_PAYMENT

    if transaction.direction is Direction.CREDIT:
        return TransactionType.INCOME

    if transaction.direction is Direction.DEBIT:
        return TransactionType.SPENDING

    return TransactionType.UNKNOWN


def classify_transactions(
    transactions: Any,
    overrides: Optional[OverrideMap] = None,
    provisional: Optional[OverrideMap] = None,
    rules: RuleSet = DEFAULT_RULES,
) -> ClassificationResult:
    """
    Classify a whole batch in one pass.

    Transfer pairs are computed once for the batch; every input record gets
    an automatic type and a final type with manual overrides applied.

    Raises:
        InvalidTransactionBatchError: If transactions is not a list or tuple
    """
    batch = coerce_transactions(transactions)
    pairs = find_transfer_pairs(batch, rules)

    classifications = []
    for txn in batch:
        automatic = classify_transaction(txn, batch, rules, pairs=pairs)
        final = resolve_final_type(txn, automatic, overrides, provisional)
        classifications.append(Classification(transaction=txn, automatic_type=automatic, final_type=final))

    return ClassificationResult(classifications=classifications, transfer_pairs=pairs)


def payment_method(transaction: Transaction, rules: RuleSet = DEFAULT_RULES) -> str:
    """Display label for the payment channel"""
    method = normalize(transaction.method)
    if method in rules.method_labels:
        return rules.method_labels[method]
    return method.upper() or "Other"


def transaction_tags(
    classification: Classification,
    overrides: Optional[OverrideMap] = None,
    provisional: Optional[OverrideMap] = None,
    rules: RuleSet = DEFAULT_RULES,
) -> TransactionTags:
    """
    Automatic tags with any manual method override merged over them.

    The method follows the same precedence as the type: confirmed
    overrides, then the tag carried on the record, then provisional.
    """
    txn = classification.transaction

    candidates = (
        override_entry(overrides, txn.transaction_id).get("method"),
        txn.manual_method,
        override_entry(provisional, txn.transaction_id).get("method"),
    )
    for custom_method in candidates:
        if isinstance(custom_method, str) and custom_method.strip():
            method = custom_method.strip()
            break
    else:
        method = payment_method(txn, rules)

    return TransactionTags(type=classification.final_type, method=method, bank=txn.bank)
