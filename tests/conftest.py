"""Pytest configuration and fixtures."""

from datetime import datetime
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.models.transaction import TransactionRecord

CSV_HEADER = (
    "ProfileName,TransactionDate,TransactionAmount,TransactionNarrative,"
    "TransactionDescription,TransactionID,TransactionType,WalletReference"
)


@pytest.fixture
async def client():
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def make_record():
    """Factory for transaction records with sensible defaults."""

    def _make(**overrides) -> TransactionRecord:
        values = {
            "profile_name": "Card Campaign",
            "transaction_date": datetime(2014, 1, 11, 22, 27, 44),
            "transaction_amount": Decimal("100.50"),
            "transaction_narrative": "Payment for services",
            "transaction_description": "DEDUCT",
            "transaction_id": "TXN001",
            "transaction_type": 1,
            "wallet_reference": "W1",
        }
        values.update(overrides)
        return TransactionRecord(**values)

    return _make


@pytest.fixture
def csv_content():
    """Build CSV file content from rows of column values."""

    def _build(*rows: str) -> bytes:
        return ("\n".join([CSV_HEADER, *rows]) + "\n").encode("utf-8")

    return _build
