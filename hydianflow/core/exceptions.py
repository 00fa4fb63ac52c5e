"""
Custom Exception Hierarchy

Every failure of the webhook pipeline maps to one of these, and the
exception handler in ``hydianflow.core.middleware`` renders it as
``{"error": {"code": ..., "message": ...}}``.
"""
from typing import Any
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes returned in the ``error.code`` field"""

    INTERNAL_ERROR = "internal_error"
    VALIDATION_ERROR = "validation"

    # Request shape
    BAD_REQUEST = "bad_request"
    BAD_BODY = "bad_body"
    BAD_SIGNATURE_HEADER = "bad_signature_header"

    # Authentication
    BAD_SIGNATURE = "bad_signature"

    # Payload decoding
    PUSH_PARSE = "push_parse"
    PR_PARSE = "pr_parse"

    # Storage
    DB_ERROR = "db_error"


class AppException(Exception):
    """Base exception for all application errors"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the error envelope returned to the client"""
        return {
            "error": {
                "code": self.error_code.value,
                "message": self.message,
            }
        }


class ValidationException(AppException):
    """Raised when a request or payload fails validation (400)"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        field: str | None = None,
        details: dict[str, Any] | None = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=400,
            details=details
        )
        if field:
            self.details["field"] = field


class AuthenticationError(AppException):
    """Raised when a delivery signature cannot be verified (401)"""

    def __init__(self, message: str = "signature mismatch"):
        super().__init__(
            message=message,
            error_code=ErrorCode.BAD_SIGNATURE,
            status_code=401,
        )


class PersistenceError(AppException):
    """Raised when the database rejects or cannot run a statement (500)"""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None
    ):
        super().__init__(
            message=message,
            error_code=ErrorCode.DB_ERROR,
            status_code=500,
            details=details
        )
        if operation:
            self.details["operation"] = operation
