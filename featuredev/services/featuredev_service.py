"""Feature-Dev Service — forwards code-generation calls to the remote backend.

Invariants:
    - Functional operations re-raise every remote failure as exactly one FeatureDevError
    - Every functional operation emits exactly one TelemetryRecord (success or failure)
    - Failure records name the upstream failure (wire error type), not the mapped error
    - Telemetry emitters (send_*) never raise: failures are logged and swallowed
    - No local validation: all input validation is server-side
    - asyncio.CancelledError (BaseException) is never caught

Design Decisions:
    - Client injected via FeatureDevClient protocol: fakes in tests, httpx in production
    - Classification delegated to pure functions (services/error_mapping.py)
    - Sink failures swallowed: observability is best-effort, functional paths fail fast
"""

import logging
import time
from collections.abc import Callable
from contextlib import contextmanager
from dataclasses import dataclass

from pydantic import ValidationError

from featuredev.core.client_protocols import FeatureDevClient
from featuredev.core.domain_types import (
    EMPTY_CURRENT_CODE_GENERATION_ID,
    FEATURE_NAME,
    OPERATION_METRIC_NAMES,
    FeatureDevOperation,
    TelemetryResult,
)
from featuredev.core.errors import ErrorContext, ExportParseError, FeatureDevError
from featuredev.infrastructure.remote_errors import (
    RuntimeServiceError,
    StreamingServiceError,
)
from featuredev.infrastructure.telemetry import TelemetryRecord, TelemetrySink
from featuredev.schemas.featuredev import (
    CodeGenerationStreamResult,
    CreateUploadUrlResponse,
    ExportResultArchive,
    GetCodeGenerationResponse,
    StartCodeGenerationResponse,
)
from featuredev.services.error_mapping import (
    map_create_conversation_error,
    map_create_upload_url_error,
    map_export_archive_error,
    map_get_code_generation_error,
    map_start_code_generation_error,
)

logger = logging.getLogger(__name__)


@dataclass
class _Invocation:
    """Mutable state of one functional call, flushed into a TelemetryRecord."""
    operation: FeatureDevOperation
    conversation_id: str | None = None
    result: TelemetryResult = TelemetryResult.FAILED
    reason: str | None = None
    reason_desc: str | None = None

    def record_cause(self, e: Exception) -> None:
        """Describe the exception that failed the call, before any mapping.

        Remote errors report their wire error type (e.g. ThrottlingException).
        Only domain errors carry a description.
        """
        if isinstance(e, FeatureDevError):
            self.reason = e.reason()
            self.reason_desc = e.reason_desc()
        else:
            self.reason = getattr(e, "error_code", None) or type(e).__name__

    def record_failure(self, e: Exception) -> None:
        self.result = TelemetryResult.FAILED
        if self.reason is None:
            self.record_cause(e)


class FeatureDevService:
    """Adapter over the remote feature-dev backend."""

    def __init__(
        self,
        proxy_client: FeatureDevClient,
        telemetry: TelemetrySink,
        credential_start_url: str | None = None,
    ):
        self.proxy_client = proxy_client
        self.telemetry = telemetry
        self.credential_start_url = credential_start_url

    # ─── Functional operations ──────────────────────────────────

    def create_conversation(self) -> str:
        """Create a conversation and return its server-assigned id."""
        with self._invocation(FeatureDevOperation.CREATE_CONVERSATION) as invocation:
            try:
                logger.debug("Executing createTaskAssistConversation")
                response = self.proxy_client.create_task_assist_conversation()
            except Exception as e:
                raise self._failed(
                    invocation, e, map_create_conversation_error,
                    "Failed to start conversation",
                ) from e
            invocation.conversation_id = response.conversation_id
            logger.debug(
                f"{FEATURE_NAME}: Created conversation",
                extra={
                    "conversation_id": response.conversation_id,
                    "request_id": response.response_metadata.request_id,
                },
            )
            return response.conversation_id

    def create_upload_url(
        self,
        conversation_id: str,
        content_checksum_sha256: str,
        content_length: int,
        upload_id: str,
    ) -> CreateUploadUrlResponse:
        with self._invocation(
            FeatureDevOperation.CREATE_UPLOAD_URL, conversation_id,
        ) as invocation:
            try:
                logger.debug(
                    f"Executing createUploadUrl with conversationId {conversation_id}",
                )
                response = self.proxy_client.create_task_assist_upload_url(
                    conversation_id, content_checksum_sha256,
                    content_length, upload_id,
                )
            except Exception as e:
                raise self._failed(
                    invocation, e, map_create_upload_url_error,
                    "Failed to generate presigned url",
                ) from e
            logger.debug(
                f"{FEATURE_NAME}: Created upload url for uploadId {upload_id}",
                extra={
                    "conversation_id": conversation_id,
                    "request_id": response.response_metadata.request_id,
                },
            )
            return response

    def start_task_assist_code_generation(
        self,
        conversation_id: str,
        upload_id: str,
        message: str,
        code_generation_id: str | None = None,
        current_code_generation_id: str | None = None,
    ) -> StartCodeGenerationResponse:
        with self._invocation(
            FeatureDevOperation.START_CODE_GENERATION, conversation_id,
        ) as invocation:
            try:
                logger.debug(
                    f"Executing startTaskAssistCodeGeneration with conversationId: "
                    f"{conversation_id}, uploadId: {upload_id}",
                )
                response = self.proxy_client.start_task_assist_code_generation(
                    conversation_id,
                    upload_id,
                    message,
                    code_generation_id,
                    current_code_generation_id or EMPTY_CURRENT_CODE_GENERATION_ID,
                )
            except Exception as e:
                raise self._failed(
                    invocation, e, map_start_code_generation_error,
                    "Failed to execute startTaskAssistCodeGeneration",
                ) from e
            logger.debug(
                f"{FEATURE_NAME}: Started code generation",
                extra={
                    "conversation_id": conversation_id,
                    "request_id": response.response_metadata.request_id,
                },
            )
            return response

    def get_task_assist_code_generation(
        self, conversation_id: str, code_generation_id: str,
    ) -> GetCodeGenerationResponse:
        with self._invocation(
            FeatureDevOperation.GET_CODE_GENERATION, conversation_id,
        ) as invocation:
            try:
                logger.debug(
                    f"Executing GetTaskAssistCodeGeneration with conversationId: "
                    f"{conversation_id}, codeGenerationId: {code_generation_id}",
                )
                response = self.proxy_client.get_task_assist_code_generation(
                    conversation_id, code_generation_id,
                )
            except Exception as e:
                raise self._failed(
                    invocation, e, map_get_code_generation_error,
                    "Failed to execute GetTaskAssistCodeGeneration",
                ) from e
            logger.debug(
                f"{FEATURE_NAME}: Received code generation status "
                f"{response.code_generation_status.status}",
                extra={
                    "conversation_id": conversation_id,
                    "request_id": response.response_metadata.request_id,
                },
            )
            return response

    async def export_task_assist_archive_result(
        self, conversation_id: str,
    ) -> CodeGenerationStreamResult:
        """Download the result archive and decode the generated code.

        The stream arrives as byte chunks; only the concatenation is valid JSON.
        """
        operation = FeatureDevOperation.EXPORT_ARCHIVE_RESULT
        with self._invocation(operation, conversation_id) as invocation:
            try:
                chunks = await self.proxy_client.export_task_assist_result_archive(
                    conversation_id,
                )
                logger.debug(
                    f"{FEATURE_NAME}: Received export task assist result archive response",
                )
            except Exception as e:
                raise self._failed(
                    invocation, e, map_export_archive_error,
                    "Failed to export archive result",
                ) from e

            try:
                archive = ExportResultArchive.model_validate_json(b"".join(chunks))
            except (ValidationError, ValueError, TypeError) as e:
                logger.error(
                    "Failed to parse downloaded code results", exc_info=True,
                    extra={"conversation_id": conversation_id},
                )
                raise ExportParseError(
                    str(operation),
                    context=ErrorContext(conversation_id=conversation_id),
                ) from e
            return archive.code_generation_result

    # ─── Telemetry emitters (best-effort) ───────────────────────

    def send_feature_dev_event(self, conversation_id: str) -> None:
        try:
            response = self.proxy_client.send_feature_dev_telemetry_event(
                conversation_id,
            )
            logger.debug(
                f"{FEATURE_NAME}: successfully sent feature dev telemetry",
                extra={
                    "conversation_id": conversation_id,
                    "request_id": response.response_metadata.request_id,
                },
            )
        except Exception as e:
            logger.warning(
                f"{FEATURE_NAME}: failed to send feature dev telemetry: {e}",
                exc_info=True,
            )

    def send_feature_dev_metric_data(self, operation_name: str, result: str) -> None:
        try:
            response = self.proxy_client.send_feature_dev_metric_data(
                operation_name, result,
            )
            logger.debug(
                f"{FEATURE_NAME}: successfully sent feature dev metric data: "
                f"OperationName: {operation_name} Result: {result}",
                extra={"request_id": response.response_metadata.request_id},
            )
        except Exception as e:
            logger.warning(
                f"{FEATURE_NAME}: failed to send feature dev metric data: {e}",
                exc_info=True,
            )

    def send_feature_dev_code_generation_event(
        self,
        conversation_id: str,
        lines_of_code_generated: int,
        characters_of_code_generated: int,
    ) -> None:
        try:
            response = self.proxy_client.send_feature_dev_code_generation_event(
                conversation_id, lines_of_code_generated,
                characters_of_code_generated,
            )
            logger.debug(
                f"{FEATURE_NAME}: successfully sent feature dev code generation telemetry",
                extra={
                    "conversation_id": conversation_id,
                    "request_id": response.response_metadata.request_id,
                },
            )
        except Exception as e:
            logger.warning(
                f"{FEATURE_NAME}: failed to send feature dev code generation telemetry: {e}",
                exc_info=True,
            )

    def send_feature_dev_code_acceptance_event(
        self,
        conversation_id: str,
        lines_of_code_accepted: int,
        characters_of_code_accepted: int,
    ) -> None:
        try:
            response = self.proxy_client.send_feature_dev_code_acceptance_event(
                conversation_id, lines_of_code_accepted,
                characters_of_code_accepted,
            )
            logger.debug(
                f"{FEATURE_NAME}: successfully sent feature dev code acceptance telemetry",
                extra={
                    "conversation_id": conversation_id,
                    "request_id": response.response_metadata.request_id,
                },
            )
        except Exception as e:
            logger.warning(
                f"{FEATURE_NAME}: failed to send feature dev code acceptance telemetry: {e}",
                exc_info=True,
            )

    # ─── Internals ──────────────────────────────────────────────

    @contextmanager
    def _invocation(
        self, operation: FeatureDevOperation, conversation_id: str | None = None,
    ):
        """Time one functional call and emit its record on exit.

        Result stays Failed unless the body completes; cancellation leaves no reason.
        """
        invocation = _Invocation(operation, conversation_id)
        start = time.monotonic()
        try:
            yield invocation
            invocation.result = TelemetryResult.SUCCEEDED
        except Exception as e:
            invocation.record_failure(e)
            raise
        finally:
            self._emit(invocation, (time.monotonic() - start) * 1000)

    def _emit(self, invocation: _Invocation, duration_ms: float) -> None:
        record = TelemetryRecord(
            name=OPERATION_METRIC_NAMES[invocation.operation],
            operation=invocation.operation.value,
            result=invocation.result.value,
            duration_ms=duration_ms,
            conversation_id=invocation.conversation_id,
            reason=invocation.reason,
            reason_desc=invocation.reason_desc,
            credential_start_url=self.credential_start_url,
        )
        try:
            self.telemetry.record(record)
        except Exception as e:
            logger.warning(
                f"Failed to record {record.name} telemetry: {e}", exc_info=True,
            )

    def _failed(
        self,
        invocation: _Invocation,
        e: Exception,
        mapper: Callable[[Exception], FeatureDevError],
        message: str,
    ) -> FeatureDevError:
        """Record the upstream cause, log it, and return the mapped domain error."""
        invocation.record_cause(e)
        logger.warning(f"{FEATURE_NAME}: {message}: {e}", exc_info=True)
        if isinstance(e, (RuntimeServiceError, StreamingServiceError)):
            logger.warning(
                f"{message} for request: {e.request_id}",
                extra={"request_id": e.request_id, "error_code": e.error_code},
            )
        return mapper(e)
