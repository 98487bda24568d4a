"""Configuration from environment variables."""

from pydantic_settings import BaseSettings


class ReconciliationSettings(BaseSettings):
    # Grouping
    date_window_seconds: int = 300  # 5 minutes

    # Text normalization
    normalize_case: bool = True
    collapse_whitespace: bool = True
    strip_punctuation: bool = False

    # Identity checks
    compare_wallet_reference: bool = True
    consider_transaction_type: bool = True

    class Config:
        env_prefix = "RECONCILIATION_"
        case_sensitive = False
        frozen = True


class RetrySettings(BaseSettings):
    enabled: bool = True
    max_attempts: int = 3
    initial_interval: float = 1.0  # seconds
    multiplier: float = 2.0
    max_interval: float = 10.0  # seconds

    class Config:
        env_prefix = "RECONCILIATION_RETRY_"
        case_sensitive = False


class ApiSettings(BaseSettings):
    version_header: str = "X-API-Version"
    default_version: str = "1"
    supported_versions: list[str] = ["1"]

    # Upload limit per file
    max_upload_bytes: int = 10 * 1024 * 1024

    log_level: str = "INFO"

    class Config:
        env_prefix = "API_"
        case_sensitive = False


settings = ReconciliationSettings()
retry_settings = RetrySettings()
api_settings = ApiSettings()
