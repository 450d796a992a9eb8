"""Feature-Dev HTTP Client — JSON 1.0 RPC transport over httpx with retry and error decoding.

Invariants:
    - Every call is POST / with X-Amz-Target "<service>.<Operation>" and a bearer token
    - Transient errors (5xx, connection): max_retries retries with exponential backoff
    - Client errors (4xx): immediate failure, no retry
    - Runtime failures raise RuntimeServiceError subclasses; export raises StreamingServiceError
    - Connection failures after the last retry propagate as the raw httpx exception

Design Decisions:
    - httpx.Client for request/response calls, httpx.AsyncClient only for the streamed
      archive export (the one suspendable operation)
    - ±25% jitter on backoff: prevents thundering herd on shared throttles
    - transport injectable: tests drive the client with httpx.MockTransport
"""

import asyncio
import json
import logging
import platform
import random
import time
from typing import TypeVar

import httpx
from pydantic import BaseModel

from featuredev.config import Settings
from featuredev.infrastructure.remote_errors import (
    RuntimeServiceError,
    StreamingServiceError,
    build_runtime_error,
    parse_error_type,
)
from featuredev.schemas.featuredev import (
    CreateConversationResponse,
    CreateUploadUrlResponse,
    GetCodeGenerationResponse,
    SendTelemetryEventResponse,
    StartCodeGenerationResponse,
)

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)

RUNTIME_SERVICE = "AmazonCodeWhispererService"
STREAMING_SERVICE = "AmazonCodeWhispererStreamingService"
CONTENT_TYPE = "application/x-amz-json-1.0"
REQUEST_ID_HEADER = "x-amzn-RequestId"
ERROR_TYPE_HEADER = "x-amzn-ErrorType"


class FeatureDevHttpClient:
    """Remote feature-dev backend client (runtime + streaming endpoints)."""

    def __init__(
        self,
        endpoint: str,
        streaming_endpoint: str,
        bearer_token: str,
        *,
        timeout_seconds: float = 60,
        max_retries: int = 3,
        base_delay_ms: int = 500,
        max_delay_ms: int = 20_000,
        opt_out: bool = False,
        client_id: str = "featuredev-proxy",
        product_name: str = "FeatureDev",
        transport: httpx.BaseTransport | None = None,
        async_transport: httpx.AsyncBaseTransport | None = None,
    ):
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        headers = {
            "Authorization": f"Bearer {bearer_token}",
            "Content-Type": CONTENT_TYPE,
        }
        self._client = httpx.Client(
            base_url=endpoint, headers=headers,
            timeout=timeout_seconds, transport=transport,
        )
        self._async_client = httpx.AsyncClient(
            base_url=streaming_endpoint, headers=headers,
            timeout=timeout_seconds, transport=async_transport,
        )
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self.opt_out = opt_out
        self.client_id = client_id
        self.product_name = product_name

    @classmethod
    def from_settings(cls, settings: Settings) -> "FeatureDevHttpClient":
        return cls(
            settings.featuredev_endpoint,
            settings.featuredev_streaming_endpoint,
            settings.featuredev_bearer_token,
            timeout_seconds=settings.featuredev_timeout_seconds,
            max_retries=settings.featuredev_max_retries,
            base_delay_ms=settings.featuredev_base_delay_ms,
            max_delay_ms=settings.featuredev_max_delay_ms,
            opt_out=settings.telemetry_opt_out,
            client_id=settings.client_id,
            product_name=settings.product_name,
        )

    # ─── Runtime operations ─────────────────────────────────────

    def create_task_assist_conversation(self) -> CreateConversationResponse:
        return self._invoke(
            "CreateTaskAssistConversation", {}, CreateConversationResponse,
        )

    def create_task_assist_upload_url(
        self,
        conversation_id: str,
        content_checksum_sha256: str,
        content_length: int,
        upload_id: str,
    ) -> CreateUploadUrlResponse:
        payload = {
            "contentChecksum": content_checksum_sha256,
            "contentChecksumType": "SHA_256",
            "contentLength": content_length,
            "uploadId": upload_id,
            "uploadIntent": "TASK_ASSIST_PLANNING",
            "uploadContext": {
                "taskAssistPlanningUploadContext": {
                    "conversationId": conversation_id,
                },
            },
        }
        return self._invoke("CreateUploadUrl", payload, CreateUploadUrlResponse)

    def start_task_assist_code_generation(
        self,
        conversation_id: str,
        upload_id: str,
        message: str,
        code_generation_id: str | None,
        current_code_generation_id: str,
    ) -> StartCodeGenerationResponse:
        payload: dict = {
            "conversationState": {
                "conversationId": conversation_id,
                "currentMessage": {"userInputMessage": {"content": message}},
                "chatTriggerType": "MANUAL",
            },
            "workspaceState": {
                "uploadId": upload_id,
                "programmingLanguage": {"languageName": "javascript"},
            },
            "currentCodeGenerationId": current_code_generation_id,
        }
        if code_generation_id is not None:
            payload["codeGenerationId"] = code_generation_id
        return self._invoke(
            "StartTaskAssistCodeGeneration", payload, StartCodeGenerationResponse,
        )

    def get_task_assist_code_generation(
        self, conversation_id: str, code_generation_id: str,
    ) -> GetCodeGenerationResponse:
        payload = {
            "conversationId": conversation_id,
            "codeGenerationId": code_generation_id,
        }
        return self._invoke(
            "GetTaskAssistCodeGeneration", payload, GetCodeGenerationResponse,
        )

    # ─── Telemetry operations ───────────────────────────────────

    def send_feature_dev_telemetry_event(
        self, conversation_id: str,
    ) -> SendTelemetryEventResponse:
        return self._send_telemetry({
            "featureDevEvent": {"conversationId": conversation_id},
        })

    def send_feature_dev_metric_data(
        self, operation_name: str, result: str,
    ) -> SendTelemetryEventResponse:
        return self._send_telemetry({
            "metricData": {
                "metricName": operation_name,
                "metricValue": 1.0,
                "timestamp": int(time.time()),
                "product": self.product_name,
                "dimensions": [{"name": "result", "value": result}],
            },
        })

    def send_feature_dev_code_generation_event(
        self,
        conversation_id: str,
        lines_of_code_generated: int,
        characters_of_code_generated: int,
    ) -> SendTelemetryEventResponse:
        return self._send_telemetry({
            "featureDevCodeGenerationEvent": {
                "conversationId": conversation_id,
                "linesOfCodeGenerated": lines_of_code_generated,
                "charactersOfCodeGenerated": characters_of_code_generated,
            },
        })

    def send_feature_dev_code_acceptance_event(
        self,
        conversation_id: str,
        lines_of_code_accepted: int,
        characters_of_code_accepted: int,
    ) -> SendTelemetryEventResponse:
        return self._send_telemetry({
            "featureDevCodeAcceptanceEvent": {
                "conversationId": conversation_id,
                "linesOfCodeAccepted": lines_of_code_accepted,
                "charactersOfCodeAccepted": characters_of_code_accepted,
            },
        })

    # ─── Streaming operation ────────────────────────────────────

    async def export_task_assist_result_archive(
        self, conversation_id: str,
    ) -> list[bytes]:
        """Stream the result archive; one list element per received chunk.

        No partial results survive a retry: chunks are collected per attempt.
        """
        content = _encode({"exportId": conversation_id, "exportIntent": "TASK_ASSIST"})
        headers = {"X-Amz-Target": f"{STREAMING_SERVICE}.ExportResultArchive"}
        for attempt in range(self.max_retries + 1):
            try:
                async with self._async_client.stream(
                    "POST", "/", content=content, headers=headers,
                ) as response:
                    if not response.is_error:
                        return [
                            chunk async for chunk in response.aiter_bytes() if chunk
                        ]
                    await response.aread()
                    error = _streaming_error(response)
            except httpx.TransportError as e:
                if attempt >= self.max_retries:
                    raise
                await asyncio.sleep(self._retry_delay(e, attempt, "ExportResultArchive"))
                continue
            if error.status_code >= 500 and attempt < self.max_retries:
                await asyncio.sleep(self._retry_delay(error, attempt, "ExportResultArchive"))
                continue
            raise error

    def close(self) -> None:
        self._client.close()

    async def aclose(self) -> None:
        self._client.close()
        await self._async_client.aclose()

    # ─── Internals ──────────────────────────────────────────────

    def _send_telemetry(self, event: dict) -> SendTelemetryEventResponse:
        payload = {
            "telemetryEvent": event,
            "optOutPreference": "OPTOUT" if self.opt_out else "OPTIN",
            "userContext": {
                "product": self.product_name,
                "clientId": self.client_id,
                "operatingSystem": platform.system(),
            },
        }
        return self._invoke("SendTelemetryEvent", payload, SendTelemetryEventResponse)

    def _invoke(
        self, operation: str, payload: dict, model: type[ResponseT],
    ) -> ResponseT:
        """POST one runtime operation and decode the response into model."""
        content = _encode(payload)
        headers = {"X-Amz-Target": f"{RUNTIME_SERVICE}.{operation}"}
        for attempt in range(self.max_retries + 1):
            try:
                response = self._client.post("/", content=content, headers=headers)
            except httpx.TransportError as e:
                if attempt >= self.max_retries:
                    raise
                time.sleep(self._retry_delay(e, attempt, operation))
                continue
            if response.is_error:
                error = _runtime_error(response)
                if response.status_code >= 500 and attempt < self.max_retries:
                    time.sleep(self._retry_delay(error, attempt, operation))
                    continue
                raise error
            self._log_success(operation, response, attempt)
            return _decode(model, response)

    def _retry_delay(self, e: Exception, attempt: int, operation: str) -> float:
        """Log the transient failure and return the backoff in seconds."""
        delay = self._backoff(attempt)
        logger.warning(
            f"Transient error on {operation}, retry after {delay}ms: {e}",
            extra={
                "attempt": attempt + 1,
                "operation": operation,
                "status_code": getattr(e, "status_code", None),
            },
        )
        return delay / 1000

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    def _log_success(self, operation: str, response: httpx.Response, attempt: int) -> None:
        logger.debug(
            f"{operation} succeeded",
            extra={
                "operation": operation,
                "attempt": attempt + 1,
                "request_id": response.headers.get(REQUEST_ID_HEADER),
            },
        )


def _encode(payload: dict) -> bytes:
    return json.dumps(payload).encode("utf-8")


def _decode(model: type[ResponseT], response: httpx.Response) -> ResponseT:
    """Validate a 2xx body and attach the request id from headers.

    Raises ValueError (JSON) or pydantic.ValidationError on malformed bodies.
    """
    body = response.json() if response.content else {}
    if not isinstance(body, dict):
        raise ValueError(f"Expected JSON object, got {type(body).__name__}")
    body["responseMetadata"] = {
        "requestId": response.headers.get(REQUEST_ID_HEADER),
    }
    return model.model_validate(body)


def _error_fields(response: httpx.Response) -> tuple[str | None, str, str | None]:
    """Extract (error type, message, request id) from a non-2xx response."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    error_type = parse_error_type(
        response.headers.get(ERROR_TYPE_HEADER) or body.get("__type"),
    )
    message = (
        body.get("message") or body.get("Message")
        or response.reason_phrase or f"HTTP {response.status_code}"
    )
    return error_type, message, response.headers.get(REQUEST_ID_HEADER)


def _runtime_error(response: httpx.Response) -> RuntimeServiceError:
    error_type, message, request_id = _error_fields(response)
    return build_runtime_error(
        error_type, message, response.status_code, request_id,
    )


def _streaming_error(response: httpx.Response) -> StreamingServiceError:
    error_type, message, request_id = _error_fields(response)
    return StreamingServiceError(
        message, response.status_code, error_type, request_id,
    )
