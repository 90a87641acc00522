"""
Centralized error handling and classification for Kilroy.

Every failure the application surfaces is a KilroyError carrying a category,
a severity, a machine-readable code and a user-facing message. Foreign
exceptions are classified into the same shape by ErrorHandler.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .logging_config import get_logger, log_error, log_security_event

logger = get_logger(__name__)


class ErrorCategory(Enum):
    """Error categories for classification and handling."""

    VALIDATION = "validation"
    IMAGE_PROCESSING = "image_processing"
    UPLOAD = "upload"
    STORAGE = "storage"
    DATABASE = "database"
    NETWORK = "network"
    LOCATION = "location"
    VERIFICATION = "verification"
    SYSTEM = "system"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorInfo:
    """Structured error information."""

    category: ErrorCategory
    severity: ErrorSeverity
    code: str
    message: str
    user_message: str
    details: dict[str, Any]
    timestamp: datetime
    recoverable: bool = True
    retry_suggested: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert error info to dictionary."""
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "user_message": self.user_message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "recoverable": self.recoverable,
            "retry_suggested": self.retry_suggested,
        }


class KilroyError(Exception):
    """Base exception class for Kilroy."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
        retry_suggested: bool = False,
        original_exception: Exception | None = None,
    ):
        super().__init__(message)
        self.category = category
        self.severity = severity
        self.code = code or f"{category.value}_error"
        self.user_message = user_message or self._generate_user_message()
        self.details = details or {}
        self.recoverable = recoverable
        self.retry_suggested = retry_suggested
        self.original_exception = original_exception
        self.timestamp = datetime.now()

        self._log_error()

    def _generate_user_message(self) -> str:
        user_messages = {
            ErrorCategory.VALIDATION: "Please check your input and try again.",
            ErrorCategory.IMAGE_PROCESSING: "Could not process that image.",
            ErrorCategory.UPLOAD: "Failed to create. Please try again.",
            ErrorCategory.STORAGE: "Could not save your photo. Please try again.",
            ErrorCategory.DATABASE: "Could not load what's here. Please try again.",
            ErrorCategory.NETWORK: "Network error. Check your connection.",
            ErrorCategory.LOCATION: "Kilroy only works when you're somewhere.",
            ErrorCategory.VERIFICATION: "Verification did not complete.",
            ErrorCategory.SYSTEM: "Something went wrong on our side.",
            ErrorCategory.UNKNOWN: "Something unexpected happened.",
        }
        return user_messages.get(self.category, "Something went wrong.")

    def _log_error(self) -> None:
        error_context = {
            "category": self.category.value,
            "severity": self.severity.value,
            "code": self.code,
            "recoverable": self.recoverable,
            "retry_suggested": self.retry_suggested,
            **self.details,
        }

        if self.original_exception:
            error_context["original_exception"] = str(self.original_exception)

        log_error(self, error_context)

        if self.category is ErrorCategory.VERIFICATION:
            log_security_event(self.category.value, code=self.code)

    def get_error_info(self) -> ErrorInfo:
        """Get structured error information."""
        return ErrorInfo(
            category=self.category,
            severity=self.severity,
            code=self.code,
            message=str(self),
            user_message=self.user_message,
            details=self.details,
            timestamp=self.timestamp,
            recoverable=self.recoverable,
            retry_suggested=self.retry_suggested,
        )


class ValidationError(KilroyError):
    """Input rejected before any state was touched."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            code=code or "validation_failed",
            user_message=user_message,
            details=details,
            recoverable=True,
            retry_suggested=False,
            original_exception=original_exception,
        )


class ImageProcessingError(KilroyError):
    """Image decode, render or encode failures."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
        retry_suggested: bool = True,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.IMAGE_PROCESSING,
            severity=ErrorSeverity.MEDIUM,
            code=code or "image_processing_failed",
            user_message=user_message,
            details=details,
            recoverable=recoverable,
            retry_suggested=retry_suggested,
            original_exception=original_exception,
        )


class UploadError(KilroyError):
    """A kilroy could not be created."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
        retry_suggested: bool = True,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.UPLOAD,
            severity=ErrorSeverity.MEDIUM,
            code=code or "upload_failed",
            user_message=user_message,
            details=details,
            recoverable=recoverable,
            retry_suggested=retry_suggested,
            original_exception=original_exception,
        )


class StorageError(KilroyError):
    """Blob store failures."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
        retry_suggested: bool = True,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.STORAGE,
            severity=ErrorSeverity.HIGH,
            code=code or "storage_error",
            user_message=user_message,
            details=details,
            recoverable=recoverable,
            retry_suggested=retry_suggested,
            original_exception=original_exception,
        )


class DatabaseError(KilroyError):
    """Document store failures."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
        retry_suggested: bool = True,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.DATABASE,
            severity=ErrorSeverity.HIGH,
            code=code or "database_error",
            user_message=user_message,
            details=details,
            recoverable=recoverable,
            retry_suggested=retry_suggested,
            original_exception=original_exception,
        )


class NetworkError(KilroyError):
    """Network-related errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.MEDIUM,
            code=code or "network_error",
            user_message=user_message,
            details=details,
            recoverable=True,
            retry_suggested=True,
            original_exception=original_exception,
        )


class LocationDeniedError(KilroyError):
    """The position provider refused, timed out or is unsupported."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.LOCATION,
            severity=ErrorSeverity.MEDIUM,
            code=code or "location_denied",
            user_message=user_message,
            details=details,
            recoverable=True,
            retry_suggested=True,
            original_exception=original_exception,
        )


class VerificationError(KilroyError):
    """The identity verification challenge failed or errored."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.VERIFICATION,
            severity=ErrorSeverity.MEDIUM,
            code=code or "verification_failed",
            user_message=user_message,
            details=details,
            recoverable=True,
            retry_suggested=True,
            original_exception=original_exception,
        )


class ErrorHandler:
    """Centralized error handler for the application."""

    def __init__(self) -> None:
        self.error_counts: dict[str, int] = {}
        self.logger = get_logger(__name__)

    def handle_error(
        self,
        error: Exception | KilroyError,
        context: dict[str, Any] | None = None,
    ) -> ErrorInfo:
        """
        Handle and classify errors.

        Args:
            error: Exception to handle
            context: Additional context information

        Returns:
            ErrorInfo: Structured error information
        """
        context = context or {}

        if isinstance(error, KilroyError):
            error_info = error.get_error_info()
            self._track_error(error_info.code)
            return error_info

        classified_error = self._classify_error(error, context)
        error_info = classified_error.get_error_info()
        self._track_error(error_info.code)

        return error_info

    def _classify_error(self, error: Exception, context: dict[str, Any]) -> KilroyError:
        """Classify a foreign exception into the matching KilroyError."""
        error_type = type(error).__name__
        error_message = str(error)
        lowered = error_message.lower()
        details = {"original_type": error_type, **context}

        if any(keyword in lowered for keyword in ["image", "jpeg", "pillow", "decode", "heic"]):
            return ImageProcessingError(message=error_message, details=details, original_exception=error)

        if any(keyword in lowered for keyword in ["storage", "gcs", "bucket", "blob", "upload"]):
            return StorageError(message=error_message, details=details, original_exception=error)

        if any(keyword in lowered for keyword in ["database", "duckdb", "sql", "query"]):
            return DatabaseError(message=error_message, details=details, original_exception=error)

        if any(keyword in lowered for keyword in ["network", "connection", "timeout", "unreachable"]):
            return NetworkError(message=error_message, details=details, original_exception=error)

        if any(keyword in lowered for keyword in ["permission", "denied", "geolocation", "location"]):
            return LocationDeniedError(message=error_message, details=details, original_exception=error)

        if any(keyword in lowered for keyword in ["validation", "invalid", "required", "missing"]):
            return ValidationError(message=error_message, details=details, original_exception=error)

        if error_type in ["SystemError", "MemoryError", "OSError"]:
            return KilroyError(
                message=error_message,
                category=ErrorCategory.SYSTEM,
                severity=ErrorSeverity.CRITICAL,
                details=details,
                recoverable=False,
                original_exception=error,
            )

        return KilroyError(
            message=error_message,
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.MEDIUM,
            details=details,
            original_exception=error,
        )

    def _track_error(self, error_code: str) -> None:
        self.error_counts[error_code] = self.error_counts.get(error_code, 0) + 1

        if self.error_counts[error_code] % 10 == 0:
            self.logger.warning("frequent_error_detected", error_code=error_code, count=self.error_counts[error_code])

    def get_error_statistics(self) -> dict[str, int]:
        """Get error occurrence statistics."""
        return self.error_counts.copy()

    def reset_statistics(self) -> None:
        """Reset error statistics."""
        self.error_counts.clear()


error_handler = ErrorHandler()


def handle_error(error: Exception | KilroyError, context: dict[str, Any] | None = None) -> ErrorInfo:
    """Classify an error with the global handler."""
    return error_handler.handle_error(error, context)
