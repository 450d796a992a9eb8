"""Domain Types — verifies operation names, statuses and metric names.

Tests:
    - FeatureDevOperation values match the remote operation names
    - Every operation has an invocation metric name
    - Only Complete and Failed are terminal
"""

from featuredev.core.domain_types import (
    EMPTY_CURRENT_CODE_GENERATION_ID,
    OPERATION_METRIC_NAMES,
    TERMINAL_CODE_GENERATION_STATUSES,
    CodeGenerationStatusName,
    ConversationId,
    FeatureDevOperation,
    TelemetryResult,
)


def test_identity_types_wrap_str():
    assert ConversationId("conv-1") == "conv-1"


def test_operation_str_is_remote_name():
    assert str(FeatureDevOperation.CREATE_CONVERSATION) == "CreateConversation"
    assert str(FeatureDevOperation.EXPORT_ARCHIVE_RESULT) == (
        "ExportTaskAssistArchiveResult"
    )


def test_every_operation_has_metric_name():
    assert set(OPERATION_METRIC_NAMES) == set(FeatureDevOperation)
    assert OPERATION_METRIC_NAMES[FeatureDevOperation.CREATE_CONVERSATION] == (
        "amazonq_startConversationInvoke"
    )


def test_terminal_statuses():
    assert TERMINAL_CODE_GENERATION_STATUSES == {
        CodeGenerationStatusName.COMPLETE,
        CodeGenerationStatusName.FAILED,
    }
    assert CodeGenerationStatusName.IN_PROGRESS not in TERMINAL_CODE_GENERATION_STATUSES


def test_telemetry_results_serialize_to_value():
    assert TelemetryResult.SUCCEEDED.value == "Succeeded"
    assert TelemetryResult.FAILED.value == "Failed"


def test_empty_current_code_generation_id_sentinel():
    assert EMPTY_CURRENT_CODE_GENERATION_ID == "EMPTY_CURRENT_CODE_GENERATION_ID"
