"""POST /v1/classify - per-transaction type assignment"""

import logging
import time
from collections import Counter

from fastapi import APIRouter, Depends, HTTPException, Request

from cashlens.api.dependencies import get_request_id, get_rules
from cashlens.api.v1.schemas import ClassificationItem, ClassifyRequest, ClassifyResponse
from cashlens.domain.classifier import classify_transactions, transaction_tags
from cashlens.domain.exceptions import InvalidTransactionBatchError
from cashlens.domain.rules import RuleSet
from cashlens.infrastructure.observability.logging import log_classification
from cashlens.infrastructure.observability.metrics import record_classification

router = APIRouter()


@router.post("/classify", response_model=ClassifyResponse)
def classify(
    request_body: ClassifyRequest,
    request: Request,
    rules: RuleSet = Depends(get_rules),
):
    """
    Classify a batch of transactions.

    Flow:
    1. Detect internal transfer pairs across the batch
    2. Assign each transaction an automatic type
    3. Apply manual overrides (confirmed, then record tags, then provisional)
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        result = classify_transactions(
            request_body.transactions,
            request_body.overrides,
            request_body.provisional_overrides,
            rules,
        )
    except InvalidTransactionBatchError as e:
        logging.warning(f"Invalid transaction batch: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    items = []
    for classification in result.classifications:
        tags = transaction_tags(
            classification, request_body.overrides, request_body.provisional_overrides, rules
        )
        items.append(
            ClassificationItem(
                transaction_id=classification.transaction.transaction_id,
                automatic_type=classification.automatic_type.value,
                type=tags.type.value,
                method=tags.method,
                bank=tags.bank,
            )
        )

    duration_ms = (time.time() - start_time) * 1000
    record_classification(result.classifications, result.transfer_pairs)
    log_classification(
        request_id,
        len(items),
        dict(Counter(item.type for item in items)),
        len(result.transfer_pairs.pairs),
        duration_ms,
    )

    return ClassifyResponse(
        classifications=items,
        transfer_pair_ids=sorted(result.transfer_pairs.ids),
        unsortable_ids=list(result.transfer_pairs.unsortable_ids),
    )
