"""FeatureDevHttpClient Tests — wire format, error decoding, retry policy.

Invariants:
    - Requests are POST / with X-Amz-Target, JSON 1.0 content type and bearer token
    - Response bodies decode into schemas; request id comes from x-amzn-RequestId
    - Error bodies decode into the runtime/streaming exception families
    - 5xx and connection errors retry; 4xx fail immediately
"""

import json

import httpx
import pytest

from featuredev.infrastructure.featuredev_client import FeatureDevHttpClient
from featuredev.infrastructure.remote_errors import (
    InternalServerError,
    RemoteValidationError,
    RuntimeServiceError,
    StreamingServiceError,
    ThrottlingError,
)


# -- Helpers -------------------------------------------------------------------


def _client(handler, max_retries=2):
    transport = httpx.MockTransport(handler)
    return FeatureDevHttpClient(
        "https://runtime.test",
        "https://streaming.test",
        "token-123",
        max_retries=max_retries,
        base_delay_ms=0,
        transport=transport,
        async_transport=transport,
    )


def _ok(body, request_id="req-1"):
    return httpx.Response(200, json=body, headers={"x-amzn-RequestId": request_id})


def _error(status, error_type, message, request_id="req-err"):
    return httpx.Response(
        status,
        json={"__type": f"com.amazon.aws.codewhisperer#{error_type}", "message": message},
        headers={"x-amzn-RequestId": request_id},
    )


# ==============================================================================
# Wire format
# ==============================================================================


def test_create_conversation_request_shape():
    seen = []

    def handler(request):
        seen.append(request)
        return _ok({"conversationId": "conv-1"}, request_id="req-77")

    response = _client(handler).create_task_assist_conversation()

    assert response.conversation_id == "conv-1"
    assert response.response_metadata.request_id == "req-77"
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/"
    assert request.headers["X-Amz-Target"] == (
        "AmazonCodeWhispererService.CreateTaskAssistConversation"
    )
    assert request.headers["Content-Type"] == "application/x-amz-json-1.0"
    assert request.headers["Authorization"] == "Bearer token-123"


def test_upload_url_payload():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return _ok({
            "uploadId": "upload-1",
            "uploadUrl": "https://s3.test/put",
            "requestHeaders": {"x-amz-checksum-sha256": "abc"},
        })

    response = _client(handler).create_task_assist_upload_url(
        "conv-1", "abc", 2048, "upload-1",
    )

    assert response.upload_url == "https://s3.test/put"
    assert response.request_headers == {"x-amz-checksum-sha256": "abc"}
    body = seen[0]
    assert body["contentLength"] == 2048
    assert body["contentChecksumType"] == "SHA_256"
    assert body["uploadContext"]["taskAssistPlanningUploadContext"] == {
        "conversationId": "conv-1",
    }


def test_start_code_generation_omits_missing_code_generation_id():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return _ok({"conversationId": "conv-1", "codeGenerationId": "cg-1"})

    _client(handler).start_task_assist_code_generation(
        "conv-1", "upload-1", "Add tests", None, "EMPTY_CURRENT_CODE_GENERATION_ID",
    )

    body = seen[0]
    assert "codeGenerationId" not in body
    assert body["currentCodeGenerationId"] == "EMPTY_CURRENT_CODE_GENERATION_ID"
    assert body["conversationState"]["currentMessage"] == {
        "userInputMessage": {"content": "Add tests"},
    }
    assert body["workspaceState"]["uploadId"] == "upload-1"


def test_get_code_generation_ignores_unknown_fields():
    def handler(request):
        return _ok({
            "conversationId": "conv-1",
            "codeGenerationStatus": {"status": "Complete", "currentStage": "Done"},
            "codeGenerationRemainingIterationCount": 1,
            "somethingNew": {"nested": True},
        })

    response = _client(handler).get_task_assist_code_generation("conv-1", "cg-1")

    assert response.code_generation_status.status == "Complete"
    assert response.code_generation_remaining_iteration_count == 1


def test_telemetry_payload_carries_opt_in_and_user_context():
    seen = []

    def handler(request):
        seen.append((request.headers["X-Amz-Target"], json.loads(request.content)))
        return _ok({})

    _client(handler).send_feature_dev_code_acceptance_event("conv-1", 3, 42)

    target, body = seen[0]
    assert target == "AmazonCodeWhispererService.SendTelemetryEvent"
    assert body["optOutPreference"] == "OPTIN"
    assert body["userContext"]["clientId"] == "featuredev-proxy"
    assert body["telemetryEvent"]["featureDevCodeAcceptanceEvent"] == {
        "conversationId": "conv-1",
        "linesOfCodeAccepted": 3,
        "charactersOfCodeAccepted": 42,
    }


def test_metric_data_payload():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return _ok({})

    _client(handler).send_feature_dev_metric_data("CreateConversation", "Failed")

    metric = seen[0]["telemetryEvent"]["metricData"]
    assert metric["metricName"] == "CreateConversation"
    assert metric["dimensions"] == [{"name": "result", "value": "Failed"}]


def test_malformed_success_body_raises_value_error():
    def handler(request):
        return httpx.Response(200, content=b"<html>", headers={})

    with pytest.raises(ValueError):
        _client(handler).create_task_assist_conversation()


# ==============================================================================
# Error decoding
# ==============================================================================


def test_throttling_error_decoded():
    def handler(request):
        return _error(429, "ThrottlingException", "Maximum reached for this month.")

    with pytest.raises(ThrottlingError) as exc_info:
        _client(handler).create_task_assist_conversation()

    exc = exc_info.value
    assert exc.status_code == 429
    assert exc.error_code == "ThrottlingException"
    assert exc.error_message == "Maximum reached for this month."
    assert exc.request_id == "req-err"
    assert "reached for this month." in str(exc)
    assert "Status Code: 429" in str(exc)


def test_error_type_header_takes_precedence():
    def handler(request):
        return httpx.Response(
            400,
            json={"message": "Invalid contentLength"},
            headers={"x-amzn-ErrorType": "ValidationException:http://internal"},
        )

    with pytest.raises(RemoteValidationError):
        _client(handler).create_task_assist_upload_url("c", "s", 0, "u")


def test_unknown_error_type_is_family_base():
    def handler(request):
        return _error(418, "TeapotException", "short and stout")

    with pytest.raises(RuntimeServiceError) as exc_info:
        _client(handler).create_task_assist_conversation()
    assert type(exc_info.value) is RuntimeServiceError


def test_client_error_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return _error(400, "ValidationException", "bad")

    with pytest.raises(RemoteValidationError):
        _client(handler, max_retries=3).get_task_assist_code_generation("c", "g")
    assert len(calls) == 1


# ==============================================================================
# Retry policy
# ==============================================================================


def test_server_error_retried_then_succeeds():
    responses = [
        _error(500, "InternalServerException", "oops"),
        _ok({"conversationId": "conv-2"}),
    ]

    def handler(request):
        return responses.pop(0)

    response = _client(handler).create_task_assist_conversation()
    assert response.conversation_id == "conv-2"


def test_server_error_after_retries_raises():
    calls = []

    def handler(request):
        calls.append(request)
        return _error(500, "InternalServerException", "oops")

    with pytest.raises(InternalServerError):
        _client(handler, max_retries=2).create_task_assist_conversation()
    assert len(calls) == 3


def test_connection_error_after_retries_raises_httpx_error():
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(httpx.ConnectError):
        _client(handler, max_retries=1).create_task_assist_conversation()
    assert len(calls) == 2


def test_zero_retries_makes_one_attempt():
    calls = []

    def handler(request):
        calls.append(request)
        return _error(500, "InternalServerException", "oops")

    with pytest.raises(InternalServerError):
        _client(handler, max_retries=0).create_task_assist_conversation()
    assert len(calls) == 1


def test_negative_retries_rejected():
    with pytest.raises(ValueError):
        _client(lambda request: _ok({}), max_retries=-1)


def test_backoff_capped_at_max_delay():
    client = FeatureDevHttpClient(
        "https://runtime.test", "https://streaming.test", "t",
        base_delay_ms=1000, max_delay_ms=3000,
        transport=httpx.MockTransport(lambda request: _ok({})),
    )

    assert 750 <= client._backoff(0) <= 1250
    for attempt in (2, 5, 30):
        assert 2250 <= client._backoff(attempt) <= 3750


# ==============================================================================
# Streaming export
# ==============================================================================


async def test_export_returns_chunks():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, content=b'{"code_generation_result": {}}')

    client = _client(handler)
    chunks = await client.export_task_assist_result_archive("conv-1")

    assert b"".join(chunks) == b'{"code_generation_result": {}}'
    assert seen[0].url.host == "streaming.test"
    assert seen[0].headers["X-Amz-Target"] == (
        "AmazonCodeWhispererStreamingService.ExportResultArchive"
    )
    assert json.loads(seen[0].content) == {
        "exportId": "conv-1", "exportIntent": "TASK_ASSIST",
    }
    await client.aclose()


async def test_export_error_is_streaming_family():
    def handler(request):
        return _error(400, "ValidationException", "Export expired")

    with pytest.raises(StreamingServiceError) as exc_info:
        await _client(handler).export_task_assist_result_archive("conv-1")
    assert exc_info.value.error_message == "Export expired"
    assert not isinstance(exc_info.value, RuntimeServiceError)


async def test_export_server_error_retried():
    responses = [
        _error(503, "ServiceUnavailableException", "busy"),
        httpx.Response(200, content=b"{}"),
    ]

    def handler(request):
        return responses.pop(0)

    chunks = await _client(handler).export_task_assist_result_archive("conv-1")
    assert b"".join(chunks) == b"{}"
