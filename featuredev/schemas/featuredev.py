"""Feature-Dev Schemas — Pydantic models of remote payloads and facade requests.

Invariants:
    - Remote payloads ignore unknown properties (forward-compatible with the server)
    - Remote JSON is camelCase; Python attributes are snake_case (alias_generator)
    - Result archive JSON is snake_case on the wire (no alias generator)
    - ResponseMetadata.request_id comes from the response header, not the body

Design Decisions:
    - populate_by_name=True: tests and the facade construct models with Python names
    - Facade request bodies validated with Field constraints at the API boundary
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _RemoteModel(BaseModel):
    """Base for camelCase remote payloads."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore",
    )


class ResponseMetadata(_RemoteModel):
    request_id: str | None = None


class _RemoteResponse(_RemoteModel):
    response_metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class CreateConversationResponse(_RemoteResponse):
    conversation_id: str


class CreateUploadUrlResponse(_RemoteResponse):
    upload_id: str
    upload_url: str
    kms_key_arn: str | None = None
    request_headers: dict[str, str] = Field(default_factory=dict)


class StartCodeGenerationResponse(_RemoteResponse):
    conversation_id: str
    code_generation_id: str


class CodeGenerationStatus(_RemoteModel):
    status: str
    current_stage: str | None = None


class GetCodeGenerationResponse(_RemoteResponse):
    conversation_id: str
    code_generation_status: CodeGenerationStatus
    code_generation_status_detail: str | None = None
    code_generation_remaining_iteration_count: int | None = None
    code_generation_total_iteration_count: int | None = None


class SendTelemetryEventResponse(_RemoteResponse):
    pass


# --- Result archive -----------------------------------------------------------


class ContentSpan(_RemoteModel):
    start: int | None = None
    end: int | None = None


class CodeReference(_RemoteModel):
    """License reference attached to generated code."""
    license_name: str | None = None
    repository: str | None = None
    url: str | None = None
    recommendation_content_span: ContentSpan | None = None


class CodeGenerationStreamResult(BaseModel):
    """Files produced by one code generation."""
    model_config = ConfigDict(extra="ignore")

    new_file_contents: dict[str, str] = Field(default_factory=dict)
    deleted_files: list[str] = Field(default_factory=list)
    references: list[CodeReference] = Field(default_factory=list)


class ExportResultArchive(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code_generation_result: CodeGenerationStreamResult


# --- Facade request bodies ----------------------------------------------------


class UploadUrlRequest(BaseModel):
    """Upload URL request — checksum is a base64 SHA-256 digest."""
    content_checksum_sha256: str = Field(min_length=1)
    content_length: int = Field(ge=0)
    upload_id: str = Field(min_length=1)


class StartCodeGenerationRequest(BaseModel):
    upload_id: str = Field(min_length=1)
    message: str = Field(min_length=1)
    code_generation_id: str | None = None
    current_code_generation_id: str | None = None


class ConversationCreated(BaseModel):
    conversation_id: str


class FeatureDevEventRequest(BaseModel):
    conversation_id: str = Field(min_length=1)


class MetricDataRequest(BaseModel):
    operation_name: str = Field(min_length=1)
    result: str = Field(min_length=1)


class CodeGenerationEventRequest(BaseModel):
    conversation_id: str = Field(min_length=1)
    lines_of_code_generated: int = Field(ge=0)
    characters_of_code_generated: int = Field(ge=0)


class CodeAcceptanceEventRequest(BaseModel):
    conversation_id: str = Field(min_length=1)
    lines_of_code_accepted: int = Field(ge=0)
    characters_of_code_accepted: int = Field(ge=0)
