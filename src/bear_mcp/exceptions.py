"""Custom exceptions for the Bear MCP server.

Provides a structured exception hierarchy with error codes and
machine-readable error information for better error handling.
"""
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class ErrorCode(Enum):
    """Error codes for machine-readable error identification."""

    # Storage errors (4xxx)
    STORE_NOT_FOUND = 4001
    STORE_OPEN_FAILED = 4002
    QUERY_FAILED = 4003

    # Action errors (5xxx)
    ACTION_DISPATCH_FAILED = 5001

    # Validation errors (7xxx)
    VALIDATION_FAILED = 7001


class BearError(Exception):
    """Base exception for all Bear MCP errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "code_name": self.code.name,
            "message": self.message,
            "details": self.details
        }

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"[{self.code.name}] {self.message} ({detail_str})"
        return f"[{self.code.name}] {self.message}"


class StorageError(BearError):
    """Raised for errors on the read-only database path."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        path: Optional[str] = None,
        code: ErrorCode = ErrorCode.QUERY_FAILED,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if path:
            # Don't expose full paths in error messages
            details["path_hint"] = path.split("/")[-1] if "/" in path else path
        if original_error:
            details["original_error"] = str(original_error)[:200]

        super().__init__(message, code=code, details=details)
        self.operation = operation
        self.path = path
        self.original_error = original_error


class StoreNotFoundError(StorageError):
    """Raised when none of the candidate database paths exists."""

    def __init__(self, message: Optional[str] = None, searched: int = 0):
        super().__init__(
            message or (
                "Bear database not found. Make sure Bear is installed "
                "and has been opened at least once."
            ),
            operation="locate",
            code=ErrorCode.STORE_NOT_FOUND,
        )
        self.details["candidates_checked"] = searched


class StoreOpenError(StorageError):
    """Raised when the database exists but cannot be opened read-only."""

    def __init__(
        self,
        message: str = "Failed to open Bear database",
        path: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message,
            operation="open",
            path=path,
            code=ErrorCode.STORE_OPEN_FAILED,
            original_error=original_error,
        )


class QueryError(StorageError):
    """Raised when a read query against the database fails."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message,
            operation=operation,
            code=ErrorCode.QUERY_FAILED,
            original_error=original_error,
        )


class ActionError(BearError):
    """Raised when a callback URL could not be handed to the host app.

    Attributes:
        action: The x-callback-url action (e.g. "create", "add-text")
        params: The parameters that were being sent
        original_error: The underlying exception
    """

    def __init__(
        self,
        action: str,
        params: Optional[Mapping[str, str]] = None,
        original_error: Optional[Exception] = None,
        message: Optional[str] = None
    ):
        details: Dict[str, Any] = {"action": action}
        if params:
            details["params"] = sorted(params)
        if original_error:
            details["original_error"] = str(original_error)[:200]

        super().__init__(
            message or f"Failed to call Bear action: {action}",
            code=ErrorCode.ACTION_DISPATCH_FAILED,
            details=details,
        )
        self.action = action
        self.params = dict(params or {})
        self.original_error = original_error


class ValidationError(BearError):
    """Raised for invalid tool input."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        code: ErrorCode = ErrorCode.VALIDATION_FAILED
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)[:100]

        super().__init__(message, code=code, details=details)
        self.field = field
        self.value = value
