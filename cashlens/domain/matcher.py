"""Internal transfer detection - pairs debits and credits moving between own accounts"""

import logging
from typing import List, Sequence, Set

from cashlens.domain.models import Transaction, TransferPairSet
from cashlens.domain.rules import DEFAULT_RULES, RuleSet, contains_any, normalize

logger = logging.getLogger(__name__)


def is_potential_pair(a: Transaction, b: Transaction, rules: RuleSet = DEFAULT_RULES) -> bool:
    """
    Check whether two transactions could be the two sides of one transfer.

    Requires opposite directions and exactly equal amounts, plus at least one
    supporting signal:
    - identical non-empty transaction ids
    - both banks in the user's own bank list
    - both raw messages mention a transfer indicator
    - either merchant looks like a generic transfer counterparty
    """
    if a.direction is None or b.direction is None or a.direction == b.direction:
        return False

    if abs(a.amount) != abs(b.amount):
        return False

    if a.transaction_id and a.transaction_id == b.transaction_id:
        return True

    bank_a = normalize(a.bank)
    bank_b = normalize(b.bank)
    if bank_a and bank_b and bank_a in rules.own_banks and bank_b in rules.own_banks:
        return True

    if contains_any(a.raw_message, rules.transfer_indicators) and contains_any(
        b.raw_message, rules.transfer_indicators
    ):
        return True

    return contains_any(a.merchant, rules.transfer_merchants) or contains_any(
        b.merchant, rules.transfer_merchants
    )


def find_transfer_pairs(
    transactions: Sequence[Transaction], rules: RuleSet = DEFAULT_RULES
) -> TransferPairSet:
    """
    Find transactions that form internal transfer pairs.

    Algorithm:
    - Stable sort by timestamp; records without a usable timestamp are left out
    - For each unpaired transaction, scan forward while the candidate lies
      within the transfer window (inclusive)
    - First candidate passing is_potential_pair wins; both sides are marked

    Greedy first-match: with three or more interchangeable candidates in one
    window the earliest compatible candidate is taken.
    """
    unsortable: List[str] = []
    dated: List[Transaction] = []
    for txn in transactions:
        if txn.timestamp is None:
            logger.warning(
                "Transaction excluded from transfer pairing: unparseable timestamp",
                extra={"transaction_id": txn.transaction_id},
            )
            unsortable.append(txn.transaction_id)
        else:
            dated.append(txn)

    ordered = sorted(dated, key=lambda t: t.timestamp)

    paired_ids: Set[str] = set()
    anonymous: List[Transaction] = []
    pairs = []

    def is_paired(txn: Transaction) -> bool:
        if txn.transaction_id:
            return txn.transaction_id in paired_ids
        return any(member is txn for member in anonymous)

    def mark(txn: Transaction) -> None:
        if txn.transaction_id:
            paired_ids.add(txn.transaction_id)
        else:
            anonymous.append(txn)

    for i, txn in enumerate(ordered):
        if is_paired(txn):
            continue

        for candidate in ordered[i + 1:]:
            # Beyond the window: later candidates are further still
            if candidate.timestamp - txn.timestamp > rules.transfer_window:
                break

            if is_paired(candidate):
                continue

            if is_potential_pair(txn, candidate, rules):
                mark(txn)
                mark(candidate)
                pairs.append((txn.transaction_id, candidate.transaction_id))
                break

    logger.debug(
        "Transfer pairing complete",
        extra={"pairs": len(pairs), "unsortable": len(unsortable)},
    )

    return TransferPairSet(
        ids=frozenset(paired_ids),
        pairs=tuple(pairs),
        unsortable_ids=tuple(unsortable),
        anonymous=tuple(anonymous),
    )
