"""Domain models."""

from .transaction import (
    ReconciliationResult,
    TransactionRecord,
    UnmatchedReason,
    UnmatchedTransaction,
)

__all__ = [
    "TransactionRecord",
    "UnmatchedReason",
    "UnmatchedTransaction",
    "ReconciliationResult",
]
