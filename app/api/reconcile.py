"""Reconciliation API endpoints."""

from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, File, Request, UploadFile
from pydantic import BaseModel, ConfigDict, Field

from app.config import api_settings
from app.services.files import CsvReconciliationService, UploadedFile
from app.services.versioning import ReconciliationStrategyResolver, ReconciliationStrategyV1

router = APIRouter(prefix="/api/reconciliation", tags=["reconciliation"])


class TransactionRecordResponse(BaseModel):
    """A transaction record as read from one of the files."""

    model_config = ConfigDict(populate_by_name=True)

    profile_name: str | None = Field(None, alias="profileName")
    transaction_date: str | None = Field(None, alias="transactionDate")
    transaction_amount: str | None = Field(None, alias="transactionAmount")
    transaction_narrative: str | None = Field(None, alias="transactionNarrative")
    transaction_description: str | None = Field(None, alias="transactionDescription")
    transaction_id: str | None = Field(None, alias="transactionId")
    transaction_type: int | None = Field(None, alias="transactionType")
    wallet_reference: str | None = Field(None, alias="walletReference")


class UnmatchedTransactionResponse(BaseModel):
    """A transaction that could not be matched, with the reason."""

    model_config = ConfigDict(populate_by_name=True)

    transaction_id: str | None = Field(None, alias="transactionId")
    file1: TransactionRecordResponse | None = None
    file2: TransactionRecordResponse | None = None
    reason: str


class ReconciliationResponse(BaseModel):
    """Summary of a reconciliation run."""

    model_config = ConfigDict(populate_by_name=True)

    matched_count: int = Field(alias="matchedCount", ge=0)
    unmatched_count: int = Field(alias="unmatchedCount", ge=0)
    unmatched: list[UnmatchedTransactionResponse]


@lru_cache
def get_strategy_resolver() -> ReconciliationStrategyResolver:
    """Strategy resolver shared by all requests."""
    return ReconciliationStrategyResolver(
        [ReconciliationStrategyV1(CsvReconciliationService())],
        supported_versions=api_settings.supported_versions,
    )


async def _read_upload(upload: UploadFile | None) -> UploadedFile | None:
    if upload is None:
        return None
    return UploadedFile(filename=upload.filename, content=await upload.read())


@router.post("", response_model=ReconciliationResponse)
async def reconcile_files(
    request: Request,
    resolver: Annotated[ReconciliationStrategyResolver, Depends(get_strategy_resolver)],
    file1: UploadFile | None = File(None, description="First CSV file of transactions"),
    file2: UploadFile | None = File(None, description="Second CSV file to reconcile against file1"),
):
    """Reconcile two CSV files of transactions.

    The API version is read from the configured version header and falls
    back to the default version when absent.
    """
    api_version = request.headers.get(api_settings.version_header)
    strategy = resolver.resolve(api_version, api_settings.default_version)

    result = await strategy.reconcile(await _read_upload(file1), await _read_upload(file2))
    return ReconciliationResponse.model_validate(result.to_dict())
