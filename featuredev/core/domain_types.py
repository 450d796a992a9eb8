"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ConversationId, UploadId, CodeGenerationId wrap server-assigned strings
    - All operation names and telemetry outcomes encoded as Enums, no raw string matching
    - Every FeatureDevOperation that emits an invocation record has a metric name

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


FEATURE_NAME = "Amazon Q Developer Agent for software development"


# ─── Identity Types ──────────────────────────────────────────────

ConversationId = NewType("ConversationId", str)
UploadId = NewType("UploadId", str)
CodeGenerationId = NewType("CodeGenerationId", str)

# Sent when the caller has no previous code generation to iterate on
EMPTY_CURRENT_CODE_GENERATION_ID = "EMPTY_CURRENT_CODE_GENERATION_ID"


# ─── Enums ───────────────────────────────────────────────────────

class FeatureDevOperation(str, Enum):
    """Remote operations performed by the adapter."""
    CREATE_CONVERSATION = "CreateConversation"
    CREATE_UPLOAD_URL = "CreateUploadUrl"
    START_CODE_GENERATION = "StartTaskAssistCodeGeneration"
    GET_CODE_GENERATION = "GetTaskAssistCodeGeneration"
    EXPORT_ARCHIVE_RESULT = "ExportTaskAssistArchiveResult"

    def __str__(self) -> str:
        return self.value


class TelemetryResult(str, Enum):
    """Outcome recorded on every invocation record."""
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


class CodeGenerationStatusName(str, Enum):
    """Server-side states of a code generation."""
    IN_PROGRESS = "InProgress"
    PREDICTING = "Predicting"
    DEBUGGING = "Debugging"
    COMPLETE = "Complete"
    FAILED = "Failed"


TERMINAL_CODE_GENERATION_STATUSES = frozenset({
    CodeGenerationStatusName.COMPLETE,
    CodeGenerationStatusName.FAILED,
})


OPERATION_METRIC_NAMES: dict[FeatureDevOperation, str] = {
    FeatureDevOperation.CREATE_CONVERSATION: "amazonq_startConversationInvoke",
    FeatureDevOperation.CREATE_UPLOAD_URL: "amazonq_createUploadUrlInvoke",
    FeatureDevOperation.START_CODE_GENERATION: "amazonq_startCodeGenerationInvoke",
    FeatureDevOperation.GET_CODE_GENERATION: "amazonq_getCodeGenerationInvoke",
    FeatureDevOperation.EXPORT_ARCHIVE_RESULT: "amazonq_exportResultArchiveInvoke",
}
