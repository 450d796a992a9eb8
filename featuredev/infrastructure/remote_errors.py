"""Remote Error Family — exceptions raised by the feature-dev HTTP client.

Invariants:
    - Every non-2xx runtime response becomes a RuntimeServiceError (or subclass)
    - Every non-2xx streaming response becomes a StreamingServiceError
    - error_message is the server message; str(exc) adds service, status, request id
    - Unknown error types fall back to the family base class

Design Decisions:
    - Two separate families (runtime vs streaming): callers classify by family first
    - Subclass chosen from the "__type" shape (namespace#Name:uri) of the JSON 1.0 protocol
"""


class _RemoteServiceError(Exception):
    """Shared shape of remote service failures."""

    service_name = "RemoteService"

    def __init__(
        self,
        error_message: str,
        status_code: int,
        error_code: str | None = None,
        request_id: str | None = None,
    ):
        self.error_message = error_message
        self.status_code = status_code
        self.error_code = error_code
        self.request_id = request_id
        super().__init__(
            f"{error_message} (Service: {self.service_name}, "
            f"Status Code: {status_code}, Request ID: {request_id})"
        )


class RuntimeServiceError(_RemoteServiceError):
    """Runtime API returned an error response."""
    service_name = "CodeWhispererRuntime"


class ThrottlingError(RuntimeServiceError):
    """Request rate or monthly usage throttled."""


class ServiceQuotaExceededError(RuntimeServiceError):
    """Account quota exceeded."""


class RemoteValidationError(RuntimeServiceError):
    """Request input rejected by the server."""


class AccessDeniedError(RuntimeServiceError):
    """Caller lacks permission."""


class RemoteResourceNotFoundError(RuntimeServiceError):
    """Referenced conversation or generation does not exist."""


class ConflictError(RuntimeServiceError):
    """Request conflicts with server state."""


class InternalServerError(RuntimeServiceError):
    """Server-side failure."""


class StreamingServiceError(_RemoteServiceError):
    """Streaming API returned an error response."""
    service_name = "CodeWhispererStreaming"


RUNTIME_ERROR_TYPES: dict[str, type[RuntimeServiceError]] = {
    "ThrottlingException": ThrottlingError,
    "ServiceQuotaExceededException": ServiceQuotaExceededError,
    "ValidationException": RemoteValidationError,
    "AccessDeniedException": AccessDeniedError,
    "ResourceNotFoundException": RemoteResourceNotFoundError,
    "ConflictException": ConflictError,
    "InternalServerException": InternalServerError,
}


def parse_error_type(raw: str | None) -> str | None:
    """Strip namespace and URI from a wire error type.

    "com.amazon.aws.codewhisperer#ThrottlingException:http://..." → "ThrottlingException"
    """
    if not raw:
        return None
    name = raw.rsplit("#", 1)[-1]
    name = name.split(":", 1)[0]
    return name.strip() or None


def build_runtime_error(
    error_type: str | None,
    error_message: str,
    status_code: int,
    request_id: str | None,
) -> RuntimeServiceError:
    """Instantiate the runtime exception subclass matching error_type."""
    cls = RUNTIME_ERROR_TYPES.get(error_type or "", RuntimeServiceError)
    return cls(error_message, status_code, error_type, request_id)
