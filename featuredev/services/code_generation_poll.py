"""Code Generation Polling — wait for a started code generation to finish.

Invariants:
    - Returns the first response whose status is terminal (Complete or Failed)
    - Errors raised by a poll propagate unchanged (already mapped by the service)
    - At most max_attempts polls; exhaustion raises ServiceError

Design Decisions:
    - sleep injectable: tests poll without waiting
    - interval and attempt budget default from settings
    - Failed status is returned, not raised: callers read the status detail
"""

import logging
import time
from collections.abc import Callable

from featuredev.config import get_settings
from featuredev.core.domain_types import (
    TERMINAL_CODE_GENERATION_STATUSES,
    FeatureDevOperation,
)
from featuredev.core.errors import ErrorContext, ServiceError
from featuredev.schemas.featuredev import GetCodeGenerationResponse
from featuredev.services.featuredev_service import FeatureDevService

logger = logging.getLogger(__name__)

_TERMINAL_VALUES = frozenset(s.value for s in TERMINAL_CODE_GENERATION_STATUSES)


def wait_for_code_generation(
    service: FeatureDevService,
    conversation_id: str,
    code_generation_id: str,
    *,
    interval_seconds: float | None = None,
    max_attempts: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> GetCodeGenerationResponse:
    settings = get_settings()
    if interval_seconds is None:
        interval_seconds = settings.codegen_poll_interval_seconds
    if max_attempts is None:
        max_attempts = settings.codegen_poll_max_attempts

    for attempt in range(1, max_attempts + 1):
        response = service.get_task_assist_code_generation(
            conversation_id, code_generation_id,
        )
        status = response.code_generation_status.status
        if status in _TERMINAL_VALUES:
            logger.info(
                f"Code generation {code_generation_id} finished with {status}",
                extra={"conversation_id": conversation_id, "attempt": attempt},
            )
            return response
        if attempt < max_attempts:
            sleep(interval_seconds)

    raise ServiceError(
        f"Code generation {code_generation_id} did not finish "
        f"after {max_attempts} polls",
        str(FeatureDevOperation.GET_CODE_GENERATION),
        context=ErrorContext(conversation_id=conversation_id),
    )
