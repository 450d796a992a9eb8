"""Telemetry Event Routes — best-effort forwarding of feature-dev telemetry.

Invariants:
    - Always 202 Accepted: emitter failures are swallowed by the service
    - Request bodies validated by Pydantic before reaching the handler
"""

from fastapi import APIRouter, Depends, status

from featuredev.services.service_provider import get_featuredev_service
from featuredev.schemas.featuredev import (
    CodeAcceptanceEventRequest,
    CodeGenerationEventRequest,
    FeatureDevEventRequest,
    MetricDataRequest,
)
from featuredev.services.featuredev_service import FeatureDevService

router = APIRouter(prefix="/api/v1/telemetry", tags=["telemetry"])


@router.post("/feature-dev-event", status_code=status.HTTP_202_ACCEPTED)
def feature_dev_event(
    body: FeatureDevEventRequest,
    service: FeatureDevService = Depends(get_featuredev_service),
):
    service.send_feature_dev_event(body.conversation_id)
    return {"status": "accepted"}


@router.post("/metric-data", status_code=status.HTTP_202_ACCEPTED)
def metric_data(
    body: MetricDataRequest,
    service: FeatureDevService = Depends(get_featuredev_service),
):
    service.send_feature_dev_metric_data(body.operation_name, body.result)
    return {"status": "accepted"}


@router.post("/code-generation-event", status_code=status.HTTP_202_ACCEPTED)
def code_generation_event(
    body: CodeGenerationEventRequest,
    service: FeatureDevService = Depends(get_featuredev_service),
):
    service.send_feature_dev_code_generation_event(
        body.conversation_id,
        body.lines_of_code_generated,
        body.characters_of_code_generated,
    )
    return {"status": "accepted"}


@router.post("/code-acceptance-event", status_code=status.HTTP_202_ACCEPTED)
def code_acceptance_event(
    body: CodeAcceptanceEventRequest,
    service: FeatureDevService = Depends(get_featuredev_service),
):
    service.send_feature_dev_code_acceptance_event(
        body.conversation_id,
        body.lines_of_code_accepted,
        body.characters_of_code_accepted,
    )
    return {"status": "accepted"}
