"""Spreadsheet store HTTP client for fetching transactions and writing tags"""

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from cashlens.config import settings
from cashlens.domain.exceptions import SheetAPIError
from cashlens.domain.models import Transaction
from cashlens.infrastructure.observability.metrics import (
    sheet_fetch_failures_counter,
    sheet_fetch_latency_histogram,
)

logger = logging.getLogger(__name__)

RESPONSE_TOO_LARGE = "Argument too large"


class SheetClient:
    """Client for the spreadsheet-backed transaction store"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        batch_size: int | None = None,
        max_batches: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.sheet_api_base
        self.api_key = api_key if api_key is not None else settings.sheet_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.batch_size = batch_size or settings.sheet_batch_size
        self.max_batches = max_batches or settings.sheet_max_batches
        self.transport = transport

    async def _request(self, client: httpx.AsyncClient, action: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Call one store action.

        Raises:
            SheetAPIError: On missing key, timeout, HTTP errors or a backend error payload
        """
        if not self.api_key:
            raise SheetAPIError("API key not configured")

        query: Dict[str, Any] = {"action": action, "apiKey": self.api_key}
        for key, value in (params or {}).items():
            if value is not None and value != "":
                query[key] = value

        try:
            with sheet_fetch_latency_histogram.time():
                response = await client.get(self.base_url, params=query)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            sheet_fetch_failures_counter.inc()
            raise SheetAPIError(f"Sheet API timeout after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            sheet_fetch_failures_counter.inc()
            raise SheetAPIError(f"Sheet API error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            sheet_fetch_failures_counter.inc()
            raise SheetAPIError(f"Sheet API unreachable: {e}") from e
        except ValueError as e:
            sheet_fetch_failures_counter.inc()
            raise SheetAPIError(f"Invalid response from sheet API: {e}") from e

        if isinstance(data, dict) and data.get("error"):
            sheet_fetch_failures_counter.inc()
            error = str(data["error"])
            if "Unauthorized" in error:
                raise SheetAPIError("Invalid API key - please check your credentials")
            raise SheetAPIError(f"Backend error: {error}")

        return data

    async def get_transactions(self, filters: Optional[Mapping[str, Any]] = None) -> List[Transaction]:
        """
        Fetch the full transaction set.

        Falls back to batched loading when the store reports the response
        is too large.

        Raises:
            SheetAPIError: When the store cannot be read
        """
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True, transport=self.transport) as client:
            try:
                data = await self._request(client, "getTransactions", filters)
            except SheetAPIError as e:
                if RESPONSE_TOO_LARGE not in str(e):
                    raise
                logger.info("Response too large, switching to batched loading")
                records = await self._get_transactions_batched(client, filters)
            else:
                records = self._records(data)

        return [Transaction.from_record(record) for record in records]

    async def _get_transactions_batched(
        self, client: httpx.AsyncClient, filters: Optional[Mapping[str, Any]]
    ) -> List[Mapping[str, Any]]:
        """Page through the store; a failing batch ends loading with what was read"""
        records: List[Mapping[str, Any]] = []
        batch_number = 0
        has_more = True

        while has_more:
            if batch_number >= self.max_batches:
                logger.warning(
                    "Reached maximum batch limit, stopping",
                    extra={"max_batches": self.max_batches, "loaded": len(records)},
                )
                break

            params = dict(filters or {})
            params.update({"batchSize": self.batch_size, "batchNumber": batch_number})
            try:
                data = await self._request(client, "getTransactions", params)
            except SheetAPIError as e:
                logger.error(
                    f"Error loading batch {batch_number}: {e}",
                    extra={"loaded": len(records)},
                )
                break

            if isinstance(data, dict) and "transactions" in data:
                records.extend(self._records(data))
                has_more = bool(data.get("hasMore"))
            else:
                # Backend without batching support answered with everything
                records.extend(self._records(data))
                has_more = False

            batch_number += 1

        logger.info("Finished batched loading", extra={"loaded": len(records), "batches": batch_number})
        return records

    @staticmethod
    def _records(data: Any) -> List[Mapping[str, Any]]:
        if isinstance(data, dict):
            data = data.get("transactions", [])
        if not isinstance(data, list):
            raise SheetAPIError(f"Invalid transaction data from sheet: {type(data).__name__}")
        return [record for record in data if isinstance(record, Mapping)]

    async def set_transaction_tag(self, transaction_id: str, tag_type: str, tag_value: str) -> Any:
        """
        Persist a manual tag (e.g. tag_type="type", tag_value="internal").

        Raises:
            ValueError: If any argument is empty
            SheetAPIError: When the store rejects the write
        """
        if not transaction_id or not tag_type or not tag_value:
            raise ValueError("Transaction ID, tag type, and tag value are required")

        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True, transport=self.transport) as client:
            return await self._request(
                client,
                "setTransactionTag",
                {"transactionId": transaction_id, "tagType": tag_type, "tagValue": tag_value},
            )
