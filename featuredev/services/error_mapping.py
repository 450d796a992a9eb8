"""Error Mapping — classify remote-call failures into the feature-dev error taxonomy.

Invariants:
    - One pure function per operation; each returns exactly one FeatureDevError
    - Runtime-family errors match on type + message substring, else ApiError.of(status)
    - Anything outside the runtime family becomes ServiceError

Design Decisions:
    - Pure functions (no logging, no raising): the service logs and raises `from exc`
    - Substring matching on str(exc): server messages are the only signal that
      separates monthly limits from iteration limits
"""

from featuredev.core.domain_types import FeatureDevOperation
from featuredev.core.errors import (
    ApiError,
    CodeIterationLimitError,
    ContentLengthError,
    ErrorContext,
    FeatureDevError,
    MonthlyConversationLimitError,
    ServiceError,
    ZipFileCorruptedError,
)
from featuredev.infrastructure.remote_errors import (
    RemoteValidationError,
    RuntimeServiceError,
    ServiceQuotaExceededError,
    StreamingServiceError,
    ThrottlingError,
)

MONTHLY_LIMIT_MARKER = "reached for this month."
START_CODEGEN_MONTHLY_LIMIT_MARKER = "StartTaskAssistCodeGeneration reached for this month."
ITERATION_LIMIT_MARKER = "limit for number of iterations on a code generation"
INVALID_CONTENT_LENGTH_MARKER = "Invalid contentLength"
REPO_SIZE_MARKER = "repo size is exceeding the limits"
ZIP_CORRUPTED_MARKER = "zipped file is corrupted"


def _contains(exc: Exception, marker: str) -> bool:
    return marker in str(exc)


def _context(exc: Exception) -> ErrorContext:
    """Carry upstream request id and error code onto the domain error."""
    return ErrorContext(
        request_id=getattr(exc, "request_id", None),
        upstream_error_code=getattr(exc, "error_code", None),
    )


def _fallback(
    exc: Exception, operation: FeatureDevOperation, default_message: str,
) -> FeatureDevError:
    """Generic API error for the runtime family, service error otherwise."""
    if isinstance(exc, RuntimeServiceError):
        return ApiError.of(
            exc.status_code, exc.error_message, str(operation),
            context=_context(exc),
        )
    return ServiceError(
        str(exc) or default_message, str(operation), context=_context(exc),
    )


def map_create_conversation_error(exc: Exception) -> FeatureDevError:
    op = FeatureDevOperation.CREATE_CONVERSATION
    # Backend raises ServiceQuota; the API front-end raises Throttling with a monthly message
    if isinstance(exc, ServiceQuotaExceededError) or (
        isinstance(exc, ThrottlingError) and _contains(exc, MONTHLY_LIMIT_MARKER)
    ):
        return MonthlyConversationLimitError(
            exc.error_message, str(op), context=_context(exc),
        )
    return _fallback(exc, op, "CreateTaskAssistConversation failed")


def map_create_upload_url_error(exc: Exception) -> FeatureDevError:
    op = FeatureDevOperation.CREATE_UPLOAD_URL
    if isinstance(exc, RemoteValidationError) and _contains(
        exc, INVALID_CONTENT_LENGTH_MARKER,
    ):
        return ContentLengthError(str(op), context=_context(exc))
    return _fallback(exc, op, "CreateUploadUrl failed")


def map_start_code_generation_error(exc: Exception) -> FeatureDevError:
    op = FeatureDevOperation.START_CODE_GENERATION
    if isinstance(exc, ThrottlingError) and _contains(
        exc, START_CODEGEN_MONTHLY_LIMIT_MARKER,
    ):
        return MonthlyConversationLimitError(
            exc.error_message, str(op), context=_context(exc),
        )
    if isinstance(exc, ServiceQuotaExceededError) or (
        isinstance(exc, ThrottlingError) and _contains(exc, ITERATION_LIMIT_MARKER)
    ):
        return CodeIterationLimitError(str(op), context=_context(exc))
    if isinstance(exc, RemoteValidationError) and _contains(exc, REPO_SIZE_MARKER):
        return ContentLengthError(str(op), context=_context(exc))
    if isinstance(exc, RemoteValidationError) and _contains(exc, ZIP_CORRUPTED_MARKER):
        return ZipFileCorruptedError(str(op), context=_context(exc))
    return _fallback(exc, op, "StartTaskAssistCodeGeneration failed")


def map_get_code_generation_error(exc: Exception) -> FeatureDevError:
    return _fallback(
        exc, FeatureDevOperation.GET_CODE_GENERATION,
        "GetTaskAssistCodeGeneration failed",
    )


def map_export_archive_error(exc: Exception) -> FeatureDevError:
    """Export failures are always service errors; streaming errors keep the server message."""
    op = FeatureDevOperation.EXPORT_ARCHIVE_RESULT
    if isinstance(exc, StreamingServiceError):
        return ServiceError(exc.error_message, str(op), context=_context(exc))
    return ServiceError(
        str(exc) or "ExportTaskAssistArchive failed", str(op),
        context=_context(exc),
    )
