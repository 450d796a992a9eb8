"""Error Hierarchy — typed, categorized exceptions for every feature-dev failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Every error names the FeatureDevOperation that raised it
    - reason() is the class name; reason_desc() falls back to the message
    - to_response() produces the REST envelope; no upstream internals leaked

Design Decisions:
    - Single hierarchy with FeatureDevError base: FastAPI global handler catches all
      (ADR: uniform error shape)
    - ApiError.of() picks client/server subclass from the upstream status code
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    QUOTA = "quota"
    VALIDATION = "validation"
    EXTERNAL_API = "external_api"
    PARSE = "parse"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    conversation_id: str | None = None
    request_id: str | None = None
    upstream_error_code: str | None = None
    debug_info: dict[str, Any] | None = None


class FeatureDevError(Exception):
    """Base exception for all feature-dev errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        operation: str,
        desc: str | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.operation = operation
        self.desc = desc
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def reason(self) -> str:
        """Short failure reason for telemetry."""
        return type(self).__name__

    def reason_desc(self) -> str:
        """Human-readable failure description for telemetry."""
        return self.desc or self.message

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "operation": self.operation,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "conversation_id": self.context.conversation_id,
                    "request_id": self.context.request_id,
                },
            }
        }


# ─── Quota Errors ───────────────────────────────────────────────

class MonthlyConversationLimitError(FeatureDevError):
    """Monthly conversation (or code generation) quota reached."""
    def __init__(
        self, message: str, operation: str, desc: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "MONTHLY_CONVERSATION_LIMIT", ErrorCategory.QUOTA,
            operation, desc, ErrorSeverity.WARNING, context, 429,
        )


class CodeIterationLimitError(FeatureDevError):
    """Iteration limit for a single code generation reached."""
    def __init__(
        self, operation: str, desc: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            "Code generation iteration limit reached for this conversation.",
            "CODE_ITERATION_LIMIT", ErrorCategory.QUOTA,
            operation, desc, ErrorSeverity.WARNING, context, 429,
        )


# ─── Invalid Input Errors ───────────────────────────────────────

class ContentLengthError(FeatureDevError):
    """Uploaded project exceeds the accepted content length."""
    def __init__(
        self, operation: str, desc: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            "The project is too large to upload. Select a smaller folder.",
            "CONTENT_LENGTH_EXCEEDED", ErrorCategory.VALIDATION,
            operation, desc, ErrorSeverity.ERROR, context, 400,
        )


class ZipFileCorruptedError(FeatureDevError):
    """Uploaded archive could not be read by the backend."""
    def __init__(
        self, operation: str, desc: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            "The uploaded archive is corrupted. Upload the project again.",
            "ZIP_FILE_CORRUPTED", ErrorCategory.VALIDATION,
            operation, desc, ErrorSeverity.ERROR, context, 400,
        )


# ─── Upstream Errors ────────────────────────────────────────────

class ApiError(FeatureDevError):
    """Remote API rejected the call with a status code."""
    def __init__(
        self,
        status_code: int,
        message: str,
        operation: str,
        desc: str | None = None,
        context: ErrorContext | None = None,
        http_status: int = 502,
    ):
        super().__init__(
            message, "API_ERROR", ErrorCategory.EXTERNAL_API,
            operation, desc, ErrorSeverity.ERROR, context, http_status,
        )
        self.status_code = status_code

    @staticmethod
    def of(
        status_code: int,
        message: str,
        operation: str,
        desc: str | None = None,
        context: ErrorContext | None = None,
    ) -> "ApiError":
        """Build the client or server variant for an upstream status code."""
        if 400 <= status_code < 500:
            return ClientApiError(status_code, message, operation, desc, context)
        return ServerApiError(status_code, message, operation, desc, context)


class ClientApiError(ApiError):
    """Remote API returned a 4xx status."""
    def __init__(
        self, status_code: int, message: str, operation: str,
        desc: str | None = None, context: ErrorContext | None = None,
    ):
        super().__init__(
            status_code, message, operation, desc, context,
            http_status=status_code,
        )


class ServerApiError(ApiError):
    """Remote API returned a 5xx (or unexpected) status."""
    def __init__(
        self, status_code: int, message: str, operation: str,
        desc: str | None = None, context: ErrorContext | None = None,
    ):
        super().__init__(status_code, message, operation, desc, context)
        self.severity = ErrorSeverity.CRITICAL


class ServiceError(FeatureDevError):
    """Remote call failed outside the API error family (transport, decoding)."""
    def __init__(
        self, message: str, operation: str, desc: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "SERVICE_ERROR", ErrorCategory.EXTERNAL_API,
            operation, desc, ErrorSeverity.CRITICAL, context, 502,
        )


class ExportParseError(FeatureDevError):
    """Exported result archive could not be deserialized."""
    def __init__(
        self, operation: str, desc: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            "Failed to parse the generated code results.",
            "EXPORT_PARSE_ERROR", ErrorCategory.PARSE,
            operation, desc, ErrorSeverity.ERROR, context, 502,
        )
