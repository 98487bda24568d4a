"""Services for reconciliation."""

from .csv_reader import parse_transactions
from .files import CsvReconciliationService, UploadedFile
from .reconcile import ReconciliationEngine
from .retry import run_with_retry
from .versioning import ReconciliationStrategyResolver, ReconciliationStrategyV1

__all__ = [
    "parse_transactions",
    "ReconciliationEngine",
    "CsvReconciliationService",
    "UploadedFile",
    "run_with_retry",
    "ReconciliationStrategyResolver",
    "ReconciliationStrategyV1",
]
