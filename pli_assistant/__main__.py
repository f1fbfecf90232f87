"""
Entry point for running the assistant API server.

Usage:
    python -m pli_assistant
"""
import uvicorn

from pli_assistant.config import get_settings

if __name__ == "__main__":
    settings = get_settings()

    uvicorn.run(
        "pli_assistant.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )
