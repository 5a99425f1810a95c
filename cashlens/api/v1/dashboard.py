"""GET /v1/dashboard - summary over the user's stored transactions"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from cashlens.api.dependencies import get_request_id, get_rules, get_sheet_client
from cashlens.api.v1.schemas import SummaryResponse
from cashlens.api.v1.summary import build_summary
from cashlens.domain.exceptions import SheetAPIError
from cashlens.domain.rules import RuleSet
from cashlens.infrastructure.clients.sheet import SheetClient

router = APIRouter()


@router.get("/dashboard", response_model=SummaryResponse)
async def get_dashboard(
    request: Request,
    start: Optional[date] = Query(None, description="First day of the period (inclusive)"),
    end: Optional[date] = Query(None, description="Last day of the period (inclusive)"),
    bank: Optional[List[str]] = Query(None, description="Only these banks (repeatable)"),
    method: Optional[List[str]] = Query(None, description="Only these payment methods (repeatable)"),
    direction: Optional[List[str]] = Query(None, description="Debit and/or Credit (repeatable)"),
    rules: RuleSet = Depends(get_rules),
    sheet_client: SheetClient = Depends(get_sheet_client),
):
    """
    Fetch transactions from the spreadsheet store and summarise them.

    Manual tags stored alongside each row are honoured as overrides.
    """
    request_id = get_request_id(request)

    try:
        transactions = await sheet_client.get_transactions()
    except SheetAPIError as e:
        logging.error(f"Sheet API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Transaction store unavailable")

    try:
        return build_summary(
            transactions, None, None, start, end, rules, request_id,
            banks=bank, methods=method, directions=direction,
        )
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
