"""Conversation Routes — HTTP facade over the feature-dev functional operations.

Invariants:
    - Routes never classify errors: FeatureDevError propagates to the global handler
    - Synchronous service calls run in sync endpoints (FastAPI threadpool)
    - Only the archive export is an async endpoint

Design Decisions:
    - Responses serialized with Python field names (response_model_by_alias=False)
"""

from fastapi import APIRouter, Depends, status

from featuredev.services.service_provider import get_featuredev_service
from featuredev.schemas.featuredev import (
    CodeGenerationStreamResult,
    ConversationCreated,
    CreateUploadUrlResponse,
    GetCodeGenerationResponse,
    StartCodeGenerationRequest,
    StartCodeGenerationResponse,
    UploadUrlRequest,
)
from featuredev.services.featuredev_service import FeatureDevService

router = APIRouter(prefix="/api/v1/conversations", tags=["conversations"])


@router.post(
    "", response_model=ConversationCreated,
    status_code=status.HTTP_201_CREATED,
)
def create_conversation(
    service: FeatureDevService = Depends(get_featuredev_service),
):
    return ConversationCreated(conversation_id=service.create_conversation())


@router.post(
    "/{conversation_id}/upload-url",
    response_model=CreateUploadUrlResponse,
    response_model_by_alias=False,
)
def create_upload_url(
    conversation_id: str,
    body: UploadUrlRequest,
    service: FeatureDevService = Depends(get_featuredev_service),
):
    return service.create_upload_url(
        conversation_id,
        body.content_checksum_sha256,
        body.content_length,
        body.upload_id,
    )


@router.post(
    "/{conversation_id}/code-generations",
    response_model=StartCodeGenerationResponse,
    response_model_by_alias=False,
    status_code=status.HTTP_202_ACCEPTED,
)
def start_code_generation(
    conversation_id: str,
    body: StartCodeGenerationRequest,
    service: FeatureDevService = Depends(get_featuredev_service),
):
    return service.start_task_assist_code_generation(
        conversation_id,
        body.upload_id,
        body.message,
        body.code_generation_id,
        body.current_code_generation_id,
    )


@router.get(
    "/{conversation_id}/code-generations/{code_generation_id}",
    response_model=GetCodeGenerationResponse,
    response_model_by_alias=False,
)
def get_code_generation(
    conversation_id: str,
    code_generation_id: str,
    service: FeatureDevService = Depends(get_featuredev_service),
):
    return service.get_task_assist_code_generation(
        conversation_id, code_generation_id,
    )


@router.get(
    "/{conversation_id}/archive",
    response_model=CodeGenerationStreamResult,
    response_model_by_alias=False,
)
async def export_archive(
    conversation_id: str,
    service: FeatureDevService = Depends(get_featuredev_service),
):
    """Download and decode the generated code for a conversation."""
    return await service.export_task_assist_archive_result(conversation_id)
