"""Partition a record sequence by grouping key."""

import logging
from collections.abc import Iterable

from app.models.transaction import TransactionRecord

from .keys import GroupingKeyDeriver

logger = logging.getLogger(__name__)


class RecordGrouper:
    """Buckets records by grouping key to limit pairwise comparisons."""

    def __init__(self, deriver: GroupingKeyDeriver):
        self.deriver = deriver

    def group(self, records: Iterable[TransactionRecord]) -> dict[str, list[TransactionRecord]]:
        """Map each key to its records, in input order.

        The returned dict is built fresh on every call and owned by the caller.
        """
        grouped: dict[str, list[TransactionRecord]] = {}
        count = 0
        for record in records:
            key = self.deriver.derive(record)
            grouped.setdefault(key, []).append(record)
            count += 1

        logger.debug(f"Grouped {count} records into {len(grouped)} keys")
        return grouped
