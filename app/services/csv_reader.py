"""CSV parsing for transaction exports.

Expected header (exact column names):
ProfileName, TransactionDate, TransactionAmount, TransactionNarrative,
TransactionDescription, TransactionID, TransactionType, WalletReference

``TransactionDate`` uses ``YYYY-MM-DD HH:MM:SS``. Blank cells become None.
"""

import csv
import io
import logging
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation

from app.errors import CsvProcessingError
from app.models.transaction import TransactionRecord

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

COLUMNS = {
    "ProfileName": "profile_name",
    "TransactionDate": "transaction_date",
    "TransactionAmount": "transaction_amount",
    "TransactionNarrative": "transaction_narrative",
    "TransactionDescription": "transaction_description",
    "TransactionID": "transaction_id",
    "TransactionType": "transaction_type",
    "WalletReference": "wallet_reference",
}

_TRAILING_COMMA = re.compile(r",$")


def _blank_to_none(value: str | None) -> str | None:
    if value is None or value.strip() == "":
        return None
    return value


def parse_date(value: str | None) -> datetime | None:
    """Parse a ``YYYY-MM-DD HH:MM:SS`` timestamp."""
    value = _blank_to_none(value)
    if value is None:
        return None
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT)
    except ValueError as e:
        raise ValueError(
            f"Invalid date-time format: '{value}' expected yyyy-MM-dd HH:mm:ss"
        ) from e


def parse_amount(value: str | None) -> Decimal | None:
    value = _blank_to_none(value)
    if value is None:
        return None
    try:
        amount = Decimal(value.strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: '{value}'") from e
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: '{value}'")
    return amount


def parse_type(value: str | None) -> int | None:
    value = _blank_to_none(value)
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError as e:
        raise ValueError(f"Invalid transaction type: '{value}'") from e


def row_to_record(row: dict[str, str | None]) -> TransactionRecord:
    """Build a TransactionRecord from a CSV row keyed by header name."""
    return TransactionRecord(
        profile_name=_blank_to_none(row.get("ProfileName")),
        transaction_date=parse_date(row.get("TransactionDate")),
        transaction_amount=parse_amount(row.get("TransactionAmount")),
        transaction_narrative=_blank_to_none(row.get("TransactionNarrative")),
        transaction_description=_blank_to_none(row.get("TransactionDescription")),
        transaction_id=_blank_to_none(row.get("TransactionID")),
        transaction_type=parse_type(row.get("TransactionType")),
        wallet_reference=_blank_to_none(row.get("WalletReference")),
    )


def parse_transactions(content: bytes | str, source: str = "<csv>") -> list[TransactionRecord]:
    """Parse CSV content into transaction records.

    Args:
        content: Raw file content (UTF-8 bytes or text)
        source: Name used in log and error messages

    Returns:
        Records in file order

    Raises:
        CsvProcessingError: If the content cannot be decoded or a row is invalid
    """
    if isinstance(content, bytes):
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CsvProcessingError(f"Failed to parse/group CSV: {source}: {e}") from e
    else:
        text = content

    # Some exports end every line with a dangling separator
    cleaned = "\n".join(_TRAILING_COMMA.sub("", line) for line in text.splitlines())

    reader = csv.DictReader(io.StringIO(cleaned), skipinitialspace=True)
    if reader.fieldnames is None:
        raise CsvProcessingError(f"Failed to parse/group CSV: {source}: missing header row")

    missing = [column for column in COLUMNS if column not in reader.fieldnames]
    if missing:
        raise CsvProcessingError(
            f"Failed to parse/group CSV: {source}: missing columns {', '.join(missing)}"
        )

    records = []
    try:
        for row in reader:
            records.append(row_to_record(row))
    except (ValueError, csv.Error) as e:
        logger.error(f"Failed to parse CSV file {source} at line {reader.line_num}: {e}")
        raise CsvProcessingError(
            f"Failed to parse/group CSV: {source} (line {reader.line_num}): {e}"
        ) from e

    logger.info(f"Parsed {len(records)} records from {source}")
    return records
