"""Transaction matching engine."""

from .grouping import RecordGrouper
from .keys import GroupingKeyDeriver, canonical_amount
from .normalizer import TextNormalizer
from .pairing import GreedyPairMatcher, KeyMatch, amounts_equal

__all__ = [
    "TextNormalizer",
    "GroupingKeyDeriver",
    "RecordGrouper",
    "GreedyPairMatcher",
    "KeyMatch",
    "amounts_equal",
    "canonical_amount",
]
