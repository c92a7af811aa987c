"""Error hierarchy for SmartMark classification.

Every error raised by this package derives from SmartMarkError so callers can
layer their own recovery policy (retry / fallback / ignore / fail) on top of
typed errors. See smartmark.recovery for the ready-made policies.

Propagation rules:
    - Provider layer raises ConfigurationError, NetworkError and APIError
    - ResponseValidator raises ValidationError for schema-invalid content
    - Item store failures surface as BookmarkError (or the store's own error)
    - The orchestrator never swallows any of these
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

__all__ = [
    "APIError",
    "BookmarkError",
    "ConfigurationError",
    "ErrorSeverity",
    "NetworkError",
    "OperationTimeoutError",
    "SmartMarkError",
    "ValidationError",
    "get_error_severity",
]


class SmartMarkError(Exception):
    """Base class for all SmartMark errors.

    Attributes:
        message: Human-readable error message
        code: Stable machine-readable error code
        details: Optional structured context for logs
        timestamp: UTC ISO 8601 time the error was created
    """

    default_code = "SMARTMARK_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a plain dict for logging or transmission."""
        return {
            "name": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "timestamp": self.timestamp,
        }


class ConfigurationError(SmartMarkError):
    """Provider configuration is missing or unusable (API key, endpoint, name)."""

    default_code = "CONFIG_ERROR"

    def __init__(self, message: str, config_key: str | None = None):
        super().__init__(message, details={"config_key": config_key})
        self.config_key = config_key


class NetworkError(SmartMarkError):
    """Transport-level failure such as connection refused or timeout."""

    default_code = "NETWORK_ERROR"

    def __init__(self, message: str, url: str | None = None, method: str | None = None):
        super().__init__(message, details={"url": url, "method": method})
        self.url = url
        self.method = method


class APIError(SmartMarkError):
    """Non-success HTTP status or structurally invalid success body."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        code = f"API_{(provider or 'unknown').upper()}_ERROR"
        merged = {"provider": provider, "status_code": status_code}
        if details:
            merged.update(details)
        super().__init__(message, code=code, details=merged)
        self.provider = provider
        self.status_code = status_code

    @property
    def is_transient(self) -> bool:
        """True for rate limiting and server-side failures."""
        return self.status_code is not None and (
            self.status_code == 429 or self.status_code >= 500
        )


class ValidationError(SmartMarkError):
    """Well-formed transport response whose content violates the schema."""

    default_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        super().__init__(message, details={"field": field, "value": value})
        self.field = field
        self.value = value


class BookmarkError(SmartMarkError):
    """Item store operation failed (create, move, lookup)."""

    default_code = "BOOKMARK_ERROR"

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        folder_path: str | None = None,
    ):
        super().__init__(
            message, details={"operation": operation, "folder_path": folder_path}
        )
        self.operation = operation
        self.folder_path = folder_path


class OperationTimeoutError(SmartMarkError):
    """An awaited operation did not finish before its caller-chosen deadline."""

    default_code = "TIMEOUT_ERROR"

    def __init__(self, message: str, operation: str | None = None, timeout: float | None = None):
        super().__init__(message, details={"operation": operation, "timeout": timeout})
        self.operation = operation
        self.timeout = timeout


class ErrorSeverity(str, Enum):
    """Severity levels used when reporting errors to the user."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


_SEVERITY_MAP: dict[type[SmartMarkError], ErrorSeverity] = {
    ValidationError: ErrorSeverity.LOW,
    BookmarkError: ErrorSeverity.MEDIUM,
    OperationTimeoutError: ErrorSeverity.MEDIUM,
    ConfigurationError: ErrorSeverity.HIGH,
    APIError: ErrorSeverity.HIGH,
    NetworkError: ErrorSeverity.HIGH,
}


def get_error_severity(error: BaseException) -> ErrorSeverity:
    """Map an error to its severity (MEDIUM for anything unrecognized)."""
    return _SEVERITY_MAP.get(type(error), ErrorSeverity.MEDIUM)
