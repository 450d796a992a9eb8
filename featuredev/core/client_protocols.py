"""Boundary Protocols — contracts between the feature-dev service and the remote client.

Invariants:
    - The service NEVER imports a concrete client; it is injected
    - Only the archive export is async; every other remote call is synchronous

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no inheritance
"""

from typing import Protocol

from featuredev.schemas.featuredev import (
    CreateConversationResponse,
    CreateUploadUrlResponse,
    GetCodeGenerationResponse,
    SendTelemetryEventResponse,
    StartCodeGenerationResponse,
)


class FeatureDevClient(Protocol):
    """Contract for the remote feature-dev backend — implemented by infrastructure."""

    def create_task_assist_conversation(self) -> CreateConversationResponse: ...

    def create_task_assist_upload_url(
        self,
        conversation_id: str,
        content_checksum_sha256: str,
        content_length: int,
        upload_id: str,
    ) -> CreateUploadUrlResponse: ...

    def start_task_assist_code_generation(
        self,
        conversation_id: str,
        upload_id: str,
        message: str,
        code_generation_id: str | None,
        current_code_generation_id: str,
    ) -> StartCodeGenerationResponse: ...

    def get_task_assist_code_generation(
        self, conversation_id: str, code_generation_id: str,
    ) -> GetCodeGenerationResponse: ...

    async def export_task_assist_result_archive(
        self, conversation_id: str,
    ) -> list[bytes]: ...

    def send_feature_dev_telemetry_event(
        self, conversation_id: str,
    ) -> SendTelemetryEventResponse: ...

    def send_feature_dev_metric_data(
        self, operation_name: str, result: str,
    ) -> SendTelemetryEventResponse: ...

    def send_feature_dev_code_generation_event(
        self,
        conversation_id: str,
        lines_of_code_generated: int,
        characters_of_code_generated: int,
    ) -> SendTelemetryEventResponse: ...

    def send_feature_dev_code_acceptance_event(
        self,
        conversation_id: str,
        lines_of_code_accepted: int,
        characters_of_code_accepted: int,
    ) -> SendTelemetryEventResponse: ...
