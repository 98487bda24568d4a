"""API version to reconciliation strategy resolution."""

import logging
from collections.abc import Iterable
from typing import Protocol

from app.errors import UnsupportedApiVersionError
from app.models.transaction import ReconciliationResult
from app.services.files import CsvReconciliationService, UploadedFile

logger = logging.getLogger(__name__)


class ReconciliationStrategy(Protocol):
    """A versioned way of reconciling two uploads."""

    @property
    def version(self) -> str: ...

    async def reconcile(
        self, file1: UploadedFile | None, file2: UploadedFile | None
    ) -> ReconciliationResult: ...


class ReconciliationStrategyV1:
    """Version 1: grouping + greedy LIFO matching of two CSV files."""

    version = "1"

    def __init__(self, csv_service: CsvReconciliationService | None = None):
        self.csv_service = csv_service or CsvReconciliationService()

    async def reconcile(
        self, file1: UploadedFile | None, file2: UploadedFile | None
    ) -> ReconciliationResult:
        return await self.csv_service.reconcile_files(file1, file2)


class ReconciliationStrategyResolver:
    """Picks the strategy for a requested API version."""

    def __init__(
        self,
        strategies: Iterable[ReconciliationStrategy],
        supported_versions: Iterable[str] = (),
    ):
        self.strategies = {strategy.version: strategy for strategy in strategies}
        self.supported_versions = list(supported_versions)

    def resolve(self, version: str | None, default_version: str) -> ReconciliationStrategy:
        """Return the strategy for ``version``, or for ``default_version`` when blank.

        Raises:
            UnsupportedApiVersionError: If the version is not allowed or no
                strategy can serve it
        """
        requested = default_version if version is None or not version.strip() else version.strip()

        if self.supported_versions and requested not in self.supported_versions:
            logger.warning(f"Rejected unsupported API version '{requested}'")
            raise UnsupportedApiVersionError(requested, ", ".join(self.supported_versions))

        strategy = self.strategies.get(requested)
        if strategy is None:
            strategy = self.strategies.get(default_version)
            if strategy is None:
                raise UnsupportedApiVersionError(requested, ", ".join(self.strategies))
            logger.info(
                f"No strategy for API version '{requested}', using default '{default_version}'"
            )
        return strategy
