"""Handlers for health REST API endpoints.

These endpoints are used to check if service is live and prepared to accept
requests. Note that these endpoints can be accessed using GET or HEAD HTTP
methods. For HEAD HTTP method, just the HTTP response code is used.
"""

import logging
from typing import Any

from fastapi import APIRouter, status, Response

from app.state import ApplicationState, app_state
from configuration import AppConfig, configuration
from models.responses import LivenessResponse, ReadinessResponse

logger = logging.getLogger("app.endpoints.handlers")
router = APIRouter(tags=["health"])


def check_readiness(
    config: AppConfig, state: ApplicationState
) -> tuple[bool, str]:
    """
    Check configuration and initialization state.

    Returns:
        tuple[bool, str]: (is_ready, detailed_reason)
    """
    if not config.is_loaded():
        for error in state.initialization_status["errors"]:
            if error.startswith("configuration_loaded"):
                return False, f"Configuration loading failed: {error.split(':', 1)[1].strip()}"
        return False, "Configuration not loaded"

    if not state.is_fully_initialized:
        initialization = state.initialization_status
        if initialization["errors"]:
            return False, f"Initialization failed: {initialization['errors'][0]}"
        failed_checks = [name for name, ok in initialization["checks"].items() if not ok]
        if failed_checks:
            failed_names = [check.replace("_", " ").title() for check in failed_checks]
            return False, f"Incomplete initialization: {', '.join(failed_names)}"
        return False, "Application initialization not complete"

    return True, "Service ready"


get_readiness_responses: dict[int | str, dict[str, Any]] = {
    200: {
        "description": "Service is ready",
        "model": ReadinessResponse,
    },
    503: {
        "description": "Service is not ready",
        "model": ReadinessResponse,
    },
}


@router.get("/readiness", responses=get_readiness_responses)
async def readiness_probe_get_method(
    response: Response,
) -> ReadinessResponse:
    """
    Readiness probe validating configuration and application startup.

    Returns 200 when fully ready, 503 when any issue is detected.
    """
    logger.info("Response to /readiness endpoint")

    ready, reason = check_readiness(configuration, app_state)
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(
        ready=ready,
        reason=reason,
        checks=app_state.initialization_status["checks"],
    )


get_liveness_responses: dict[int | str, dict[str, Any]] = {
    200: {
        "description": "Service is alive",
        "model": LivenessResponse,
    },
    # HTTP_503_SERVICE_UNAVAILABLE will never be returned when unreachable
}


@router.get("/liveness", responses=get_liveness_responses)
async def liveness_probe_get_method() -> LivenessResponse:
    """
    Return the liveness status of the service.

    Returns:
        LivenessResponse: Indicates that the service is alive.
    """
    logger.info("Response to /liveness endpoint")

    return LivenessResponse(alive=True)
