"""Application Configuration Management"""

import os
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings
from functools import lru_cache

BUNDLED_RATE_TABLES = Path(__file__).parent / "data" / "sample_rate_tables.json"


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    app_name: str = "PLI Santosh Assistant"
    debug: bool = False
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8080"))

    # Gemini Live API
    # The key is only needed once a voice session starts; manual editing works without it.
    gemini_api_key: str = os.getenv("GEMINI_API_KEY", "")
    live_api_url: str = os.getenv(
        "LIVE_API_URL",
        "wss://generativelanguage.googleapis.com/ws/"
        "google.ai.generativelanguage.v1beta.GenerativeService.BidiGenerateContent",
    )
    live_model: str = os.getenv(
        "LIVE_MODEL", "gemini-2.5-flash-native-audio-preview-12-2025"
    )
    voice_name: str = os.getenv("VOICE_NAME", "Puck")

    # Audio pipeline (16-bit mono PCM only)
    input_sample_rate: int = 16000
    output_sample_rate: int = 24000
    capture_block_size: int = int(os.getenv("CAPTURE_BLOCK_SIZE", "4096"))
    capture_queue_size: int = int(os.getenv("CAPTURE_QUEUE_SIZE", "32"))

    # UI signalling
    highlight_seconds: float = float(os.getenv("HIGHLIGHT_SECONDS", "3.0"))

    # Premium calculation
    rate_tables_path: Optional[str] = os.getenv("RATE_TABLES_PATH")
    bonus_rate: float = float(os.getenv("BONUS_RATE", "52.0"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def resolved_rate_tables_path(self) -> Path:
        """Rate table file to load, falling back to the bundled sample"""
        if self.rate_tables_path:
            return Path(self.rate_tables_path)
        return BUNDLED_RATE_TABLES

    @property
    def live_model_resource(self) -> str:
        """Model name in the `models/...` form the Live API setup expects"""
        if self.live_model.startswith("models/"):
            return self.live_model
        return f"models/{self.live_model}"

    class Config:
        env_file = ".env.local"  # Use .env.local for local dev
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
