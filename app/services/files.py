"""CSV file reconciliation - validation, parsing and matching of two uploads."""

import asyncio
import logging
from dataclasses import dataclass

from app.config import ApiSettings, RetrySettings, api_settings
from app.errors import FileTooLargeError, InvalidFileError
from app.models.transaction import ReconciliationResult
from app.services.csv_reader import parse_transactions
from app.services.reconcile import ReconciliationEngine
from app.services.retry import run_with_retry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedFile:
    """An uploaded CSV file."""

    filename: str | None
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def is_empty(self) -> bool:
        return not self.content


class CsvReconciliationService:
    """Reconciles two CSV uploads.

    Both files are validated before any work starts. Parsing and matching run
    as one operation that is retried wholesale on retryable failures.
    """

    def __init__(
        self,
        engine: ReconciliationEngine | None = None,
        retry: RetrySettings | None = None,
        api: ApiSettings | None = None,
    ):
        self.engine = engine or ReconciliationEngine()
        self.retry = retry
        self.api = api or api_settings

    async def reconcile_files(
        self,
        file1: UploadedFile | None,
        file2: UploadedFile | None,
    ) -> ReconciliationResult:
        """Validate, parse and reconcile two CSV files.

        Raises:
            InvalidFileError: If either file is missing or empty
            FileTooLargeError: If either file exceeds the upload limit
            CsvProcessingError: If a file cannot be parsed
            RetryExhaustedError: If retryable failures persist
        """
        self._validate("file1", file1)
        self._validate("file2", file2)

        logger.info(
            f"Starting reconciliation between files: {file1.filename} and {file2.filename}"
        )
        return await run_with_retry(
            "reconcile_files",
            self._reconcile,
            file1,
            file2,
            retry=self.retry,
        )

    async def _reconcile(self, file1: UploadedFile, file2: UploadedFile) -> ReconciliationResult:
        records1, records2 = await asyncio.gather(
            asyncio.to_thread(parse_transactions, file1.content, file1.filename or "file1"),
            asyncio.to_thread(parse_transactions, file2.content, file2.filename or "file2"),
        )
        return await self.engine.reconcile(records1, records2)

    def _validate(self, name: str, file: UploadedFile | None) -> None:
        if file is None or file.is_empty:
            logger.error(f"{name} is null or empty")
            raise InvalidFileError(f"{name} is required and must not be empty")
        if file.size > self.api.max_upload_bytes:
            logger.error(f"{name} exceeds upload limit: {file.size} bytes")
            raise FileTooLargeError(file.filename, file.size, self.api.max_upload_bytes)
