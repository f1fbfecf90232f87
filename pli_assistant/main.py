"""
PLI Santosh Assistant - Main FastAPI Application

Serves the premium calculator form state and controls the "Gopal" voice
assistant:

- Policy form read/update with live premium quotes
- Voice session start/stop/status over the Gemini Live API
- Tool calls from the assistant applied to the same policy state
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import sys

from pli_assistant.config import get_settings
from pli_assistant.utils.logger import get_logger
from pli_assistant.routers import assistant, health, policy

settings = get_settings()
logger = get_logger(__name__, level=settings.log_level)

app = FastAPI(
    title="PLI Santosh Assistant API",
    description="Postal Life Insurance Santosh premium calculator with a voice assistant",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc"
)

logger.info(
    "Application starting",
    app_name=settings.app_name,
    live_model=settings.live_model,
    debug=settings.debug
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:8080", "http://127.0.0.1:8080"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(health.router)
app.include_router(policy.router)
app.include_router(assistant.router)

logger.info("All routers registered")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors"""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": "An unexpected error occurred. Please try again later."
        }
    )


@app.on_event("startup")
async def startup_event():
    """Application startup event - load rate tables and wire the policy listener"""
    from pli_assistant.services.policy_store import get_policy_store

    store = get_policy_store()
    store.subscribe(
        lambda snapshot: logger.debug(
            "Policy snapshot updated",
            current_age=snapshot.current_age,
            quote_available=snapshot.result is not None,
        )
    )

    logger.info(
        "Application startup complete",
        python_version=sys.version,
        rate_tables=str(settings.resolved_rate_tables_path),
        voice_enabled=bool(settings.gemini_api_key)
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event - release microphone, speaker and socket"""
    logger.info("Application shutting down")

    from pli_assistant.services.assistant_service import get_assistant_service

    await get_assistant_service().stop()
