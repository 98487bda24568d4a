"""Greedy LIFO pairing and classification within one grouping key."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from app.config import ReconciliationSettings
from app.models.transaction import TransactionRecord, UnmatchedReason, UnmatchedTransaction

from .normalizer import TextNormalizer

logger = logging.getLogger(__name__)


@dataclass
class KeyMatch:
    """Outcome of matching the two record lists of a single key."""

    identical_count: int = 0
    unmatched: list[UnmatchedTransaction] = field(default_factory=list)


def amounts_equal(a: Decimal | None, b: Decimal | None) -> bool:
    """Numeric equality, so that 10.0 and 10.00 compare equal."""
    if a is None or b is None:
        return a is b
    return a == b


class GreedyPairMatcher:
    """Pairs records of one key from the tail of each list.

    Each pair is classified, in order of precedence:
    1. identical: every field equal (amount by value) -> counted only
    2. DETAILS_MISMATCH: same amount, narrative or wallet reference differ
       after normalization
    3. NOT_IDENTICAL: anything else

    Records left over once either side runs out are reported individually as
    MISSING_IN_OTHER_FILE. There is no search for a closest candidate; ties
    are resolved by list position alone.
    """

    def __init__(
        self,
        normalizer: TextNormalizer,
        compare_wallet_reference: bool = True,
        consider_transaction_type: bool = True,
    ):
        self.normalizer = normalizer
        self.compare_wallet_reference = compare_wallet_reference
        self.consider_transaction_type = consider_transaction_type

    @classmethod
    def from_settings(cls, config: ReconciliationSettings) -> "GreedyPairMatcher":
        return cls(
            TextNormalizer.from_settings(config),
            compare_wallet_reference=config.compare_wallet_reference,
            consider_transaction_type=config.consider_transaction_type,
        )

    def match(
        self,
        file1: Sequence[TransactionRecord],
        file2: Sequence[TransactionRecord],
    ) -> KeyMatch:
        """Pair and classify two record lists sharing a grouping key.

        Inputs are not modified; both are walked from the end.
        """
        result = KeyMatch()
        i = len(file1)
        j = len(file2)

        while i > 0 and j > 0:
            i -= 1
            j -= 1
            r1 = file1[i]
            r2 = file2[j]

            reason = self.classify(r1, r2)
            if reason is None:
                result.identical_count += 1
            else:
                result.unmatched.append(UnmatchedTransaction.of(r1, r2, reason))

        for r1 in file1[:i]:
            result.unmatched.append(
                UnmatchedTransaction.of(r1, None, UnmatchedReason.MISSING_IN_OTHER_FILE)
            )
        for r2 in file2[:j]:
            result.unmatched.append(
                UnmatchedTransaction.of(None, r2, UnmatchedReason.MISSING_IN_OTHER_FILE)
            )

        return result

    def classify(self, r1: TransactionRecord, r2: TransactionRecord) -> UnmatchedReason | None:
        """Classify a pair. None means the records are identical."""
        if self.are_identical(r1, r2):
            return None
        if amounts_equal(r1.transaction_amount, r2.transaction_amount) and self._details_differ(
            r1, r2
        ):
            return UnmatchedReason.DETAILS_MISMATCH
        return UnmatchedReason.NOT_IDENTICAL

    def are_identical(self, a: TransactionRecord, b: TransactionRecord) -> bool:
        """Field-by-field equality; amounts compared by numeric value."""
        return (
            a.profile_name == b.profile_name
            and a.transaction_date == b.transaction_date
            and amounts_equal(a.transaction_amount, b.transaction_amount)
            and a.transaction_narrative == b.transaction_narrative
            and a.transaction_description == b.transaction_description
            and a.transaction_id == b.transaction_id
            and (
                not self.consider_transaction_type or a.transaction_type == b.transaction_type
            )
            and (not self.compare_wallet_reference or a.wallet_reference == b.wallet_reference)
        )

    def _details_differ(self, a: TransactionRecord, b: TransactionRecord) -> bool:
        normalize = self.normalizer.normalize
        if normalize(a.transaction_narrative) != normalize(b.transaction_narrative):
            return True
        if self.compare_wallet_reference:
            return normalize(a.wallet_reference) != normalize(b.wallet_reference)
        return False
