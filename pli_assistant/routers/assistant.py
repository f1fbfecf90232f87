"""Voice Assistant API Endpoints"""

from fastapi import APIRouter, Depends

from pli_assistant.models.session import AssistantStatus
from pli_assistant.services.assistant_service import AssistantService, get_assistant_service
from pli_assistant.utils.logger import get_logger

router = APIRouter(prefix="/api/v1/assistant", tags=["assistant"])
logger = get_logger(__name__)


@router.post("/start", response_model=AssistantStatus)
async def start_assistant(
    service: AssistantService = Depends(get_assistant_service),
) -> AssistantStatus:
    """Start the voice session (no-op while one is already live)"""
    result = await service.start()
    logger.info("Assistant start requested", state=result.state, status=result.status)
    return result


@router.post("/stop", response_model=AssistantStatus)
async def stop_assistant(
    service: AssistantService = Depends(get_assistant_service),
) -> AssistantStatus:
    """Stop the voice session; safe to call when nothing is running"""
    result = await service.stop()
    logger.info("Assistant stop requested", state=result.state)
    return result


@router.get("/status", response_model=AssistantStatus)
async def assistant_status(
    service: AssistantService = Depends(get_assistant_service),
) -> AssistantStatus:
    """Session state, status text and the currently highlighted field"""
    return service.status()
