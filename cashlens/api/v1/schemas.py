"""Pydantic schemas for API request/response validation"""

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ClassifyRequest(BaseModel):
    """Request body for POST /v1/classify"""

    # Items stay loosely typed: a malformed row degrades to "unknown" instead of failing the batch
    transactions: List[Any] = Field(..., description="Transaction records (snake_case or sheet column names)")
    overrides: Dict[str, Any] = Field(default_factory=dict, description="Confirmed manual tags by transaction id")
    provisional_overrides: Dict[str, Any] = Field(
        default_factory=dict, description="Locally cached tags awaiting confirmation"
    )


class SummaryRequest(ClassifyRequest):
    """Request body for POST /v1/summary"""

    start: Optional[date] = None
    end: Optional[date] = None
    banks: List[str] = Field(default_factory=list, description="Only these banks (empty = all)")
    methods: List[str] = Field(default_factory=list, description="Only these payment methods (empty = all)")
    directions: List[str] = Field(default_factory=list, description="Debit and/or Credit (empty = both)")


class ClassificationItem(BaseModel):
    """Classification of one input transaction"""

    transaction_id: str
    automatic_type: str
    type: str
    method: str
    bank: str


class ClassifyResponse(BaseModel):
    """Response for POST /v1/classify"""

    classifications: List[ClassificationItem]
    transfer_pair_ids: List[str]
    unsortable_ids: List[str]


class MetricsSchema(BaseModel):
    """Derived totals over actual transactions"""

    total_spend: float
    total_income: float
    net_flow: float
    count: int


class GroupTotalSchema(BaseModel):
    key: str
    amount: float


class BreakdownSchema(BaseModel):
    spending: List[GroupTotalSchema]
    income: List[GroupTotalSchema]


class KpiSchema(BaseModel):
    """Headline dashboard indicators"""

    average_daily_spending: float
    largest_category: GroupTotalSchema
    savings_rate: float
    bills_amount: float


class DailyTotalSchema(BaseModel):
    day: str
    spending: float
    income: float


class MonthlyTotalSchema(BaseModel):
    month: str
    spending: float
    income: float


class SummaryResponse(BaseModel):
    """Response for POST /v1/summary and GET /v1/dashboard"""

    metrics: MetricsSchema
    by_category: BreakdownSchema
    by_method: BreakdownSchema
    by_day: BreakdownSchema
    by_month: BreakdownSchema
    kpis: KpiSchema
    # Zero-filled; daily only when both period bounds are given
    daily: List[DailyTotalSchema] = Field(default_factory=list)
    trend: List[MonthlyTotalSchema] = Field(default_factory=list)
