"""Health Check Endpoints"""

from datetime import datetime, timezone
from typing import Any, Dict, Union

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from pli_assistant.config import get_settings
from pli_assistant.services.policy_store import get_policy_store
from pli_assistant.services.rate_tables import RateTableError
from pli_assistant.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, Any]:
    """
    Basic liveness check.

    Returns:
        200 OK with basic status
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": get_settings().app_name,
    }


@router.get("/ready", status_code=status.HTTP_200_OK, response_model=None)
async def readiness_check() -> Union[Dict[str, Any], JSONResponse]:
    """
    Readiness check.

    The calculator needs its rate tables; the voice assistant needs an API key.

    Returns:
        200 OK if both are available
        503 Service Unavailable otherwise
    """
    checks = {"rate_tables": False, "live_api_key": False}

    try:
        checks["rate_tables"] = not get_policy_store().rate_tables.is_empty()
    except RateTableError as e:
        logger.error("Rate tables unavailable", error=str(e))

    checks["live_api_key"] = bool(get_settings().gemini_api_key)

    all_healthy = all(checks.values())
    response = {
        "status": "ready" if all_healthy else "not_ready",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }

    if not all_healthy:
        logger.warning("Readiness check failed", checks=checks)
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=response)

    return response
