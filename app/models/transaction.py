"""Transaction records and reconciliation results."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class TransactionRecord:
    """A single financial transaction from one source file."""

    profile_name: str | None = None
    transaction_date: datetime | None = None
    transaction_amount: Decimal | None = None
    transaction_narrative: str | None = None
    transaction_description: str | None = None
    transaction_id: str | None = None
    transaction_type: int | None = None
    wallet_reference: str | None = None

    @property
    def has_id(self) -> bool:
        """True when the record carries a non-blank transaction ID."""
        return bool(self.transaction_id and self.transaction_id.strip())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "profileName": self.profile_name,
            "transactionDate": (
                self.transaction_date.isoformat() if self.transaction_date else None
            ),
            "transactionAmount": (
                str(self.transaction_amount) if self.transaction_amount is not None else None
            ),
            "transactionNarrative": self.transaction_narrative,
            "transactionDescription": self.transaction_description,
            "transactionId": self.transaction_id,
            "transactionType": self.transaction_type,
            "walletReference": self.wallet_reference,
        }


class UnmatchedReason(str, Enum):
    """Why a record could not be reconciled."""

    MISSING_IN_OTHER_FILE = "MISSING_IN_OTHER_FILE"
    DETAILS_MISMATCH = "DETAILS_MISMATCH"
    NOT_IDENTICAL = "NOT_IDENTICAL"


def coalesce_id(
    file1: TransactionRecord | None, file2: TransactionRecord | None
) -> str | None:
    """Pick the first non-blank transaction ID from either record."""
    for record in (file1, file2):
        if record is not None and record.has_id:
            return record.transaction_id
    return None


@dataclass(frozen=True)
class UnmatchedTransaction:
    """A record (or pair of records) that did not reconcile."""

    transaction_id: str | None
    file1: TransactionRecord | None
    file2: TransactionRecord | None
    reason: UnmatchedReason

    @classmethod
    def of(
        cls,
        file1: TransactionRecord | None,
        file2: TransactionRecord | None,
        reason: UnmatchedReason,
    ) -> "UnmatchedTransaction":
        return cls(
            transaction_id=coalesce_id(file1, file2),
            file1=file1,
            file2=file2,
            reason=reason,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "transactionId": self.transaction_id,
            "file1": self.file1.to_dict() if self.file1 else None,
            "file2": self.file2.to_dict() if self.file2 else None,
            "reason": self.reason.value,
        }


@dataclass(frozen=True)
class ReconciliationResult:
    """Summary of reconciling two transaction sources."""

    matched_count: int
    unmatched: tuple[UnmatchedTransaction, ...] = field(default_factory=tuple)

    @property
    def unmatched_count(self) -> int:
        return len(self.unmatched)

    def count_by_reason(self) -> dict[UnmatchedReason, int]:
        """Number of unmatched outcomes per reason."""
        counts = {reason: 0 for reason in UnmatchedReason}
        for item in self.unmatched:
            counts[item.reason] += 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "matchedCount": self.matched_count,
            "unmatchedCount": self.unmatched_count,
            "unmatched": [item.to_dict() for item in self.unmatched],
        }
