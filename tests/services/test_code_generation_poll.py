"""Code Generation Polling Tests.

Invariants:
    - Stops at the first terminal status (Complete or Failed)
    - Sleeps between polls, never after the last one
    - Exhaustion raises ServiceError; poll errors propagate unchanged
"""

import pytest

from featuredev.core.errors import ClientApiError, ServiceError
from featuredev.infrastructure.remote_errors import ThrottlingError
from featuredev.services.code_generation_poll import wait_for_code_generation

from tests.services.fake_featuredev_client import status_response


def test_returns_first_terminal_response(service, fake_client):
    fake_client.responses["get_task_assist_code_generation"] = [
        status_response("InProgress"),
        status_response("Predicting"),
        status_response("Complete"),
    ]
    sleeps = []

    result = wait_for_code_generation(
        service, "conv-1", "cg-1",
        interval_seconds=0.5, max_attempts=5, sleep=sleeps.append,
    )

    assert result.code_generation_status.status == "Complete"
    assert sleeps == [0.5, 0.5]


def test_failed_status_is_returned(service, fake_client):
    fake_client.responses["get_task_assist_code_generation"] = [
        status_response("Failed"),
    ]

    result = wait_for_code_generation(
        service, "conv-1", "cg-1", max_attempts=3, sleep=lambda s: None,
    )
    assert result.code_generation_status.status == "Failed"


def test_exhaustion_raises_service_error(service, fake_client):
    fake_client.responses["get_task_assist_code_generation"] = [
        status_response("InProgress") for _ in range(3)
    ]
    sleeps = []

    with pytest.raises(ServiceError) as exc_info:
        wait_for_code_generation(
            service, "conv-1", "cg-1",
            interval_seconds=1, max_attempts=3, sleep=sleeps.append,
        )

    assert exc_info.value.operation == "GetTaskAssistCodeGeneration"
    assert len(sleeps) == 2


def test_poll_error_propagates(service, fake_client):
    fake_client.responses["get_task_assist_code_generation"] = ThrottlingError(
        "Rate exceeded", 429, "ThrottlingException", "r",
    )

    with pytest.raises(ClientApiError):
        wait_for_code_generation(
            service, "conv-1", "cg-1", max_attempts=3, sleep=lambda s: None,
        )
