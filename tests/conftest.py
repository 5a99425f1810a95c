"""Pytest fixtures for testing"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from cashlens.api.main import create_app
from cashlens.domain.models import Direction, Transaction


@pytest.fixture
def base_time() -> datetime:
    """Fixed reference instant so windowing tests are deterministic"""
    return datetime(2024, 8, 14, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    app = create_app()
    return TestClient(app)


@pytest.fixture
def sample_transactions(base_time: datetime) -> list[Transaction]:
    """A month of activity: salary, spending, a bill and one own-account transfer"""
    return [
        Transaction(
            transaction_id="salary",
            timestamp=base_time,
            bank="HDFC Bank",
            amount=85000.0,
            direction=Direction.CREDIT,
            merchant="ACME Payroll",
            method="NEFT",
            category="Salary",
        ),
        Transaction(
            transaction_id="groceries",
            timestamp=base_time + timedelta(days=1),
            bank="HDFC Bank",
            amount=2350.5,
            direction=Direction.DEBIT,
            merchant="Fresh Mart",
            method="UPI",
            category="Food & Dining",
        ),
        Transaction(
            transaction_id="power",
            timestamp=base_time + timedelta(days=2),
            bank="HDFC Bank",
            amount=1800.0,
            direction=Direction.DEBIT,
            merchant="Electricity Board",
            method="UPI",
            category="Bills & Utilities",
        ),
        Transaction(
            transaction_id="move_out",
            timestamp=base_time + timedelta(days=3),
            bank="HDFC Bank",
            amount=20000.0,
            direction=Direction.DEBIT,
            merchant="Self",
            method="IMPS",
        ),
        Transaction(
            transaction_id="move_in",
            timestamp=base_time + timedelta(days=3, minutes=2),
            bank="ICICI Bank",
            amount=20000.0,
            direction=Direction.CREDIT,
            merchant="Self",
            method="IMPS",
        ),
    ]
