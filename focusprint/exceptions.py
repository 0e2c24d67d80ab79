"""
FocuSprint Exception Hierarchy

Structured errors for the bulk operation subsystem, plus utilities for
consistent error handling and for turning errors into safe API payloads.
"""

import logging
import re
import traceback
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


# Base Exception
class FocuSprintError(Exception):
    """
    Base exception for all FocuSprint errors.

    Provides structured error information including:
    - Unique request ID for tracing
    - Error code for categorization
    - Detailed context information
    - Timestamp for debugging
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.request_id = request_id or str(uuid.uuid4())
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.traceback = traceback.format_exc()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/API responses"""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
            "request_id": self.request_id,
            "timestamp": self.timestamp,
        }

    def __str__(self):
        return f"{self.error_code}: {self.message} (request_id={self.request_id})"


# Configuration Errors
class ConfigurationError(FocuSprintError):
    """Raised when configuration is invalid or missing"""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when configuration file or environment values are invalid"""

    def __init__(self, reason: str, config_path: Optional[str] = None, **kwargs):
        details = {"reason": reason}
        if config_path:
            details["config_path"] = config_path

        super().__init__(f"Invalid configuration: {reason}", details=details, **kwargs)


# Validation Errors
class ValidationError(FocuSprintError):
    """Base class for validation errors"""

    pass


class TargetLimitError(ValidationError):
    """Raised when a submission has zero targets or more than allowed"""

    def __init__(self, count: int, max_targets: int, **kwargs):
        if count == 0:
            message = "At least one target ID is required"
        else:
            message = (
                f"Cannot process more than {max_targets} targets in a single operation"
            )

        super().__init__(
            message,
            error_code="TARGET_LIMIT",
            details={"target_count": count, "max_targets": max_targets},
            **kwargs,
        )


class BulkValidationError(ValidationError):
    """Raised when one or more targets fail validation"""

    def __init__(self, validation_results: List[Any], **kwargs):
        self.validation_results = validation_results
        failed = [v for v in validation_results if not v.can_proceed]
        errors = sorted({e for v in failed for e in v.errors})

        super().__init__(
            "Bulk operation validation failed",
            error_code="BULK_VALIDATION_FAILED",
            details={"failed_targets": len(failed), "errors": errors},
            **kwargs,
        )


class InvalidParameterError(ValidationError):
    """Raised when an enum-valued field or parameter has an unknown value"""

    def __init__(self, field: str, value: Any, allowed: List[str], **kwargs):
        super().__init__(
            f"Invalid {field}. Must be one of: {', '.join(allowed)}",
            error_code="INVALID_PARAMETER",
            details={"field": field, "value": str(value)},
            **kwargs,
        )


# Bulk Operation Errors
class BulkOperationError(FocuSprintError):
    """Base class for bulk operation errors"""

    pass


class OperationNotFoundError(BulkOperationError):
    """Raised when a bulk operation is not found"""

    def __init__(self, operation_id: str, **kwargs):
        super().__init__(
            f"Bulk operation '{operation_id}' not found",
            details={"operation_id": operation_id},
            **kwargs,
        )


class ConcurrencyLimitError(BulkOperationError):
    """Raised when too many operations are already running"""

    def __init__(self, limit: int, **kwargs):
        super().__init__(
            f"Maximum concurrent operations reached ({limit})",
            error_code="CONCURRENCY_LIMIT",
            details={"max_concurrent_operations": limit},
            **kwargs,
        )


class UnsupportedOperationError(BulkOperationError):
    """Raised when no target handler exists for an operation type"""

    def __init__(self, operation_type: str, **kwargs):
        super().__init__(
            f"Unsupported operation type: {operation_type}",
            error_code="UNSUPPORTED_OPERATION",
            details={"operation_type": operation_type},
            **kwargs,
        )


# Error Handling Utilities
class ErrorHandler:
    """Utility class for consistent error handling"""

    @staticmethod
    @contextmanager
    def error_context(
        logger: logging.Logger,
        operation: str,
        request_id: Optional[str] = None,
        raise_on_error: bool = False,
    ):
        """
        Context manager for error handling.

        Provides consistent error handling and logging for code blocks.

        Args:
            logger: Logger instance
            operation: Description of the operation
            request_id: Optional request ID for tracing
            raise_on_error: Whether to re-raise exceptions

        Usage:
            with ErrorHandler.error_context(logger, "audit bulk operation"):
                # operation code that may raise exceptions
        """
        request_id = request_id or str(uuid.uuid4())
        logger.debug(f"Starting {operation} (request_id={request_id})")

        try:
            yield request_id
            logger.debug(f"Completed {operation} (request_id={request_id})")

        except FocuSprintError as e:
            e.request_id = request_id
            logger.error(f"{operation} failed: {e}")
            if raise_on_error:
                raise

        except Exception as e:
            focusprint_error = FocuSprintError(
                message=f"{operation} failed: {str(e)}",
                details={
                    "operation": operation,
                    "original_error": str(e),
                    "original_type": type(e).__name__,
                },
                request_id=request_id,
            )
            logger.error(f"{focusprint_error}")
            if raise_on_error:
                raise focusprint_error


class ErrorSanitizer:
    """Sanitize error messages for user consumption"""

    # Patterns to redact sensitive information
    SENSITIVE_PATTERNS = [
        (r'password\s*[=:]\s*["\']?[\w\-\.@#$%^&*!]+["\']?', "password=***"),
        (r'token\s*[=:]\s*["\']?[\w\-\.]+["\']?', "token=***"),
        (r"https?://[^:/\s]+:[^@\s]+@", "https://***:***@"),
        (r"Authorization:\s*[\w]+\s+[\w\-\.=]+", "Authorization: ***"),
        (r"Bearer\s+[\w\-\.=]+", "Bearer ***"),
        (r'api[_-]?key\s*[=:]\s*["\']?[\w\-\.]+["\']?', "api_key=***"),
        (r'secret\s*[=:]\s*["\']?[\w\-\.]+["\']?', "secret=***"),
    ]

    @classmethod
    def sanitize_message(cls, message: str) -> str:
        """Remove sensitive information from error messages"""
        sanitized = message
        for pattern, replacement in cls.SENSITIVE_PATTERNS:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        return sanitized

    @classmethod
    def sanitize_error(cls, error: FocuSprintError) -> Dict[str, Any]:
        """Create sanitized error dict for API responses"""
        return {
            "error": error.error_code,
            "message": cls.sanitize_message(error.message),
            "request_id": error.request_id,
        }

    @classmethod
    def get_user_friendly_message(cls, error: FocuSprintError) -> str:
        """Get user-friendly error message"""
        friendly_messages = {
            "TARGET_LIMIT": cls.sanitize_message(error.message),
            "BULK_VALIDATION_FAILED": "One or more targets failed validation. Review the validation results.",
            "CONCURRENCY_LIMIT": "Too many bulk operations are running. Try again once one finishes.",
            "UNSUPPORTED_OPERATION": "This operation type is not supported yet.",
            "OperationNotFoundError": "The specified bulk operation was not found.",
            "InvalidConfigError": "The configuration file is invalid or corrupted.",
        }

        return friendly_messages.get(
            error.error_code,
            f"An error occurred: {cls.sanitize_message(error.message)}",
        )
