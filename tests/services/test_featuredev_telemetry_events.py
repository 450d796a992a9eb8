"""Telemetry Emitter Tests — send_* methods are fire-and-forget.

Invariants:
    - Emitters forward their arguments to the remote client
    - Emitters never raise, whatever the remote call does
    - Emitters never produce invocation records
"""

import logging

import httpx
import pytest

from featuredev.infrastructure.remote_errors import (
    AccessDeniedError,
    InternalServerError,
)


FAILURES = [
    AccessDeniedError("Denied", 403, "AccessDeniedException", "r"),
    InternalServerError("Boom", 500, "InternalServerException", "r"),
    httpx.ConnectError("refused"),
    ValueError("bad json"),
]

EMITTERS = [
    ("send_feature_dev_telemetry_event", "send_feature_dev_event", ("conv-1",)),
    ("send_feature_dev_metric_data", "send_feature_dev_metric_data",
     ("StartTaskAssistCodeGeneration", "Succeeded")),
    ("send_feature_dev_code_generation_event", "send_feature_dev_code_generation_event",
     ("conv-1", 12, 340)),
    ("send_feature_dev_code_acceptance_event", "send_feature_dev_code_acceptance_event",
     ("conv-1", 10, 300)),
]


@pytest.mark.parametrize("client_method,service_method,args", EMITTERS)
def test_emitter_forwards_arguments(
    service, fake_client, sink, client_method, service_method, args,
):
    assert getattr(service, service_method)(*args) is None
    assert fake_client.calls == [(client_method, args)]
    assert sink.records == []


@pytest.mark.parametrize("failure", FAILURES)
@pytest.mark.parametrize("client_method,service_method,args", EMITTERS)
def test_emitter_swallows_failures(
    service, fake_client, client_method, service_method, args, failure,
):
    fake_client.responses[client_method] = failure
    assert getattr(service, service_method)(*args) is None


def test_emitter_failure_is_logged_as_warning(service, fake_client, caplog):
    fake_client.responses["send_feature_dev_telemetry_event"] = RuntimeError("down")

    with caplog.at_level(logging.WARNING):
        service.send_feature_dev_event("conv-1")

    assert any(
        "failed to send feature dev telemetry" in r.getMessage()
        for r in caplog.records
    )
