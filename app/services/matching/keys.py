"""Grouping key derivation for transaction records."""

import math
from datetime import datetime
from decimal import Decimal

from app.errors import MalformedRecordError
from app.models.transaction import TransactionRecord

from .normalizer import TextNormalizer

ID_PREFIX = "ID:"
COMPOSITE_PREFIX = "K"
DELIMITER = "|"
NULL = "null"


def canonical_amount(amount: Decimal) -> str:
    """Plain decimal text with trailing fractional zeros stripped.

    ``100.50`` -> ``100.5``, ``1E+2`` -> ``100``, ``-0.00`` -> ``0``.
    """
    if amount.is_zero():
        return "0"
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


class GroupingKeyDeriver:
    """Computes the grouping key of a record.

    A non-blank transaction ID always wins (``ID:<id>``). Otherwise the key
    is ``K|<amount>|<dateBucket>|<normalizedProfile>|<type>``; the two key
    families can never collide.
    """

    def __init__(self, normalizer: TextNormalizer, date_window_seconds: int = 300):
        self.normalizer = normalizer
        self.date_window_seconds = max(1, int(date_window_seconds))

    def derive(self, record: TransactionRecord) -> str:
        """Return the grouping key for a record."""
        if record.has_id:
            return f"{ID_PREFIX}{record.transaction_id}"

        amount = self._amount_component(record)
        bucket = self._bucket_component(record)
        profile = self.normalizer.normalize(record.profile_name)
        type_ = self._type_component(record)

        return DELIMITER.join(
            (COMPOSITE_PREFIX, amount, bucket, NULL if profile is None else profile, type_)
        )

    def date_bucket(self, value: datetime) -> int:
        """Bucket index of a timestamp for the configured window.

        Naive datetimes are read in the system local timezone.
        """
        epoch_seconds = math.floor(value.timestamp())
        return epoch_seconds // self.date_window_seconds

    def _amount_component(self, record: TransactionRecord) -> str:
        amount = record.transaction_amount
        if amount is None:
            return NULL
        if not isinstance(amount, Decimal) or not amount.is_finite():
            raise MalformedRecordError(
                f"Record {record!r} has an invalid transaction amount: {amount!r}"
            )
        return canonical_amount(amount)

    def _bucket_component(self, record: TransactionRecord) -> str:
        value = record.transaction_date
        if value is None:
            return NULL
        if not isinstance(value, datetime):
            raise MalformedRecordError(
                f"Record {record!r} has an invalid transaction date: {value!r}"
            )
        try:
            return str(self.date_bucket(value))
        except (OverflowError, OSError, ValueError) as e:
            raise MalformedRecordError(
                f"Record {record!r} has a transaction date outside the supported range: {e}"
            ) from e

    def _type_component(self, record: TransactionRecord) -> str:
        type_ = record.transaction_type
        if type_ is None:
            return NULL
        # bool is an int subclass but never a valid type code
        if not isinstance(type_, int) or isinstance(type_, bool):
            raise MalformedRecordError(
                f"Record {record!r} has an invalid transaction type: {type_!r}"
            )
        return str(type_)
