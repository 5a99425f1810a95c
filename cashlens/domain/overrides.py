"""Manual tag overrides layered over automatic classification"""

import logging
from typing import Any, Mapping, Optional

from cashlens.domain.models import Transaction, TransactionType

logger = logging.getLogger(__name__)

# transaction id -> {"type": "...", "method": "..."} or a bare type string
OverrideMap = Mapping[str, Any]


def override_entry(overrides: Optional[OverrideMap], transaction_id: str) -> Mapping[str, Any]:
    """Custom tags recorded for a transaction, as a mapping"""
    if not overrides or not transaction_id:
        return {}
    try:
        entry = overrides.get(transaction_id)
    except AttributeError:
        return {}
    if isinstance(entry, Mapping):
        return entry
    if isinstance(entry, str):
        return {"type": entry}
    return {}


def _override_type(raw: Any, transaction_id: str, source: str) -> Optional[TransactionType]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    parsed = TransactionType.parse(raw)
    if parsed is None:
        logger.warning(
            "Ignoring unrecognised override type",
            extra={"transaction_id": transaction_id, "override_type": str(raw), "source": source},
        )
    return parsed


def resolve_final_type(
    transaction: Transaction,
    automatic_type: TransactionType,
    overrides: Optional[OverrideMap] = None,
    provisional: Optional[OverrideMap] = None,
) -> TransactionType:
    """
    Resolve the type shown to the user.

    Precedence:
    1. overrides[transaction_id]["type"] (confirmed manual tags)
    2. transaction.manual_type (custom tag carried on the record)
    3. provisional[transaction_id]["type"] (locally cached, not yet confirmed)
    4. automatic_type

    Empty or unrecognised override values are skipped, so an unavailable or
    partial override source always degrades to automatic classification.
    """
    transaction_id = transaction.transaction_id

    candidates = (
        (override_entry(overrides, transaction_id).get("type"), "overrides"),
        (transaction.manual_type, "record"),
        (override_entry(provisional, transaction_id).get("type"), "provisional"),
    )
    for raw, source in candidates:
        resolved = _override_type(raw, transaction_id, source)
        if resolved is not None:
            return resolved

    return automatic_type
