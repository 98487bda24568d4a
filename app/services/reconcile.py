"""Reconciliation engine - groups two record sources and matches them key by key."""

import asyncio
import logging
import time
from collections.abc import Sequence

from app.config import ReconciliationSettings, settings
from app.models.transaction import (
    ReconciliationResult,
    TransactionRecord,
    UnmatchedReason,
    UnmatchedTransaction,
)
from app.services.matching import GreedyPairMatcher, GroupingKeyDeriver, RecordGrouper, TextNormalizer

logger = logging.getLogger(__name__)

Grouped = dict[str, list[TransactionRecord]]


class ReconciliationEngine:
    """Reconciles two transaction sources.

    Flow:
    1. Group each source by grouping key (both sources concurrently)
    2. Walk the union of keys
    3. Greedily pair the two lists of each key and classify every pair
    4. Sum identical pairs and collect everything else as unmatched

    The engine holds no state between runs, so a failed run can simply be
    repeated from scratch.
    """

    def __init__(self, config: ReconciliationSettings | None = None):
        """Initialize engine.

        Args:
            config: Grouping, normalization and identity options. Both sources
                are always keyed with the same options.
        """
        self.config = config or settings
        normalizer = TextNormalizer.from_settings(self.config)
        self.grouper = RecordGrouper(
            GroupingKeyDeriver(normalizer, self.config.date_window_seconds)
        )
        self.matcher = GreedyPairMatcher(
            normalizer,
            compare_wallet_reference=self.config.compare_wallet_reference,
            consider_transaction_type=self.config.consider_transaction_type,
        )

    async def reconcile(
        self,
        file1: Sequence[TransactionRecord],
        file2: Sequence[TransactionRecord],
    ) -> ReconciliationResult:
        """Reconcile two record sources.

        Args:
            file1: Records of the first source
            file2: Records of the second source

        Returns:
            ReconciliationResult with matched count and unmatched details

        Raises:
            MalformedRecordError: If a record cannot be keyed
        """
        grouped1, grouped2 = await asyncio.gather(
            asyncio.to_thread(self.grouper.group, file1),
            asyncio.to_thread(self.grouper.group, file2),
        )
        return self.match_grouped(grouped1, grouped2)

    def reconcile_sync(
        self,
        file1: Sequence[TransactionRecord],
        file2: Sequence[TransactionRecord],
    ) -> ReconciliationResult:
        """Blocking variant of reconcile for callers without an event loop."""
        return self.match_grouped(self.grouper.group(file1), self.grouper.group(file2))

    def match_grouped(self, grouped1: Grouped, grouped2: Grouped) -> ReconciliationResult:
        """Match two already grouped sources."""
        start_time = time.perf_counter()
        logger.info(f"Starting reconciliation of {len(grouped1)} and {len(grouped2)} keys")

        matched_count = 0
        unmatched: list[UnmatchedTransaction] = []

        for key in self._key_union(grouped1, grouped2):
            list1 = grouped1.get(key, [])
            list2 = grouped2.get(key, [])
            logger.debug(
                f"Processing key '{key}': {len(list1)} records in file1, "
                f"{len(list2)} records in file2"
            )

            key_match = self.matcher.match(list1, list2)
            matched_count += key_match.identical_count
            unmatched.extend(key_match.unmatched)

        result = ReconciliationResult(matched_count=matched_count, unmatched=tuple(unmatched))

        duration_ms = (time.perf_counter() - start_time) * 1000
        by_reason = result.count_by_reason()
        logger.info(
            f"Reconciliation completed in {duration_ms:.1f}ms. Results: "
            f"{result.matched_count} matched, {result.unmatched_count} unmatched "
            f"(details mismatch: {by_reason[UnmatchedReason.DETAILS_MISMATCH]}, "
            f"not identical: {by_reason[UnmatchedReason.NOT_IDENTICAL]}, "
            f"missing: {by_reason[UnmatchedReason.MISSING_IN_OTHER_FILE]})"
        )
        return result

    @staticmethod
    def _key_union(grouped1: Grouped, grouped2: Grouped) -> list[str]:
        """Keys of file1 in first-seen order, then keys only present in file2."""
        keys = list(grouped1)
        keys.extend(key for key in grouped2 if key not in grouped1)
        return keys
