"""Error kinds and exceptions raised by the reconciliation service."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class ErrorInfo:
    """Metadata attached to an error kind."""

    code: str
    title: str
    url_fragment: str
    description: str
    retryable: bool


class ErrorKind(Enum):
    """Tagged error kinds with their metadata."""

    UNSUPPORTED_API_VERSION = ErrorInfo(
        "UNSUPPORTED_API_VERSION",
        "Unsupported API Version",
        "unsupported-api-version",
        "The requested API version is not supported by this service",
        retryable=False,
    )
    CSV_PROCESSING_ERROR = ErrorInfo(
        "CSV_PROCESSING_ERROR",
        "CSV Processing Error",
        "csv-processing-error",
        "An error occurred while processing the CSV file",
        retryable=True,
    )
    MALFORMED_RECORD = ErrorInfo(
        "MALFORMED_RECORD",
        "Malformed Record",
        "malformed-record",
        "A transaction record is missing or has an invalid value for a field needed to group it",
        retryable=False,
    )
    INVALID_FILE = ErrorInfo(
        "INVALID_FILE",
        "Invalid File",
        "invalid-file",
        "The uploaded file is invalid, empty, or in the wrong format",
        retryable=False,
    )
    FILE_TOO_LARGE = ErrorInfo(
        "FILE_TOO_LARGE",
        "File Too Large",
        "file-too-large",
        "The uploaded file exceeds the maximum allowed size",
        retryable=False,
    )
    RETRY_EXHAUSTED = ErrorInfo(
        "RETRY_EXHAUSTED",
        "Retry Attempts Exhausted",
        "retry-exhausted",
        "All retry attempts have been exhausted for the requested operation",
        retryable=False,
    )
    INTERNAL_SERVER_ERROR = ErrorInfo(
        "INTERNAL_SERVER_ERROR",
        "Internal Server Error",
        "internal-server-error",
        "An unexpected error occurred on the server",
        retryable=True,
    )

    @property
    def code(self) -> str:
        return self.value.code

    @property
    def title(self) -> str:
        return self.value.title

    @property
    def url_fragment(self) -> str:
        return self.value.url_fragment

    @property
    def description(self) -> str:
        return self.value.description

    @property
    def retryable(self) -> bool:
        return self.value.retryable

    @classmethod
    def from_code(cls, code: str | None) -> "ErrorKind":
        """Look up a kind by its code, defaulting to INTERNAL_SERVER_ERROR."""
        for kind in cls:
            if kind.code == code:
                return kind
        return cls.INTERNAL_SERVER_ERROR


class ReconciliationError(Exception):
    """Base class for all reconciliation failures."""

    kind: ErrorKind = ErrorKind.INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def code(self) -> str:
        return self.kind.code

    def extra_properties(self) -> dict:
        """Kind-specific properties for error responses."""
        return {}


class InvalidFileError(ReconciliationError):
    """A required input file is missing or empty."""

    kind = ErrorKind.INVALID_FILE


class FileTooLargeError(ReconciliationError):
    """An input file exceeds the configured upload limit."""

    kind = ErrorKind.FILE_TOO_LARGE

    def __init__(self, filename: str | None, size: int, limit: int):
        super().__init__(f"File '{filename}' is {size} bytes, limit is {limit} bytes")
        self.filename = filename
        self.size = size
        self.limit = limit

    def extra_properties(self) -> dict:
        return {"size": self.size, "maxSize": self.limit}


class CsvProcessingError(ReconciliationError):
    """A CSV source could not be decoded or parsed."""

    kind = ErrorKind.CSV_PROCESSING_ERROR


class MalformedRecordError(ReconciliationError):
    """A record cannot be keyed."""

    kind = ErrorKind.MALFORMED_RECORD


class UnsupportedApiVersionError(ReconciliationError):
    """The requested API version has no strategy."""

    kind = ErrorKind.UNSUPPORTED_API_VERSION

    def __init__(self, requested_version: str | None, supported_versions: str):
        super().__init__(
            f"API version '{requested_version}' is not supported. "
            f"Supported versions: {supported_versions}"
        )
        self.requested_version = requested_version
        self.supported_versions = supported_versions

    def extra_properties(self) -> dict:
        return {
            "requestedVersion": self.requested_version,
            "supportedVersions": self.supported_versions,
        }


class RetryExhaustedError(ReconciliationError):
    """An operation kept failing until the retry budget ran out."""

    kind = ErrorKind.RETRY_EXHAUSTED

    def __init__(self, operation: str, max_attempts: int, original_error: str):
        super().__init__(
            f"Operation '{operation}' failed after {max_attempts} retry attempts. "
            f"Original error: {original_error}"
        )
        self.operation = operation
        self.max_attempts = max_attempts
        self.original_error = original_error

    def extra_properties(self) -> dict:
        return {
            "operation": self.operation,
            "maxAttempts": self.max_attempts,
            "originalError": self.original_error,
            "retryAdvice": (
                "Please check your input files and try again. "
                "If the problem persists, contact support."
            ),
        }


def error_kind_of(exc: BaseException) -> ErrorKind:
    """Return the error kind for any exception."""
    if isinstance(exc, ReconciliationError):
        return exc.kind
    return ErrorKind.INTERNAL_SERVER_ERROR


def is_retryable(exc: BaseException) -> bool:
    """Whether re-running the failed operation could succeed."""
    return error_kind_of(exc).retryable
