"""
Configuration management for the FastAPI backend
"""

import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings:
    """Application settings"""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./shorts_studio.db")

    # CORS
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    # Application
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    API_KEY: str = os.getenv("API_KEY", "")

    # OpenRouter (LLM text generation)
    OPENROUTER_API_KEY: str = os.getenv("OPENROUTER_API_KEY", "")
    OPENROUTER_BASE_URL: str = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
    OPENROUTER_TIMEOUT: float = float(os.getenv("OPENROUTER_TIMEOUT", "120"))

    # fal.ai (image / video generation)
    FAL_API_KEY: str = os.getenv("FAL_API_KEY", "")
    FAL_TIMEOUT: float = float(os.getenv("FAL_TIMEOUT", "60"))  # synchronous endpoint
    FAL_QUEUE_TIMEOUT: float = float(os.getenv("FAL_QUEUE_TIMEOUT", "300"))  # queued endpoint
    FAL_POLLING_INTERVAL: float = float(os.getenv("FAL_POLLING_INTERVAL", "2.0"))

    # Default models per task (names from services.model_registry)
    DEFAULT_SCRIPT_MODEL: Optional[str] = os.getenv("DEFAULT_SCRIPT_MODEL", None)
    DEFAULT_PROMPT_MODEL: Optional[str] = os.getenv("DEFAULT_PROMPT_MODEL", None)
    DEFAULT_IMAGE_MODEL: Optional[str] = os.getenv("DEFAULT_IMAGE_MODEL", None)
    DEFAULT_VIDEO_MODEL: Optional[str] = os.getenv("DEFAULT_VIDEO_MODEL", None)

    # Media generation
    MEDIA_BATCH_SIZE: int = int(os.getenv("MEDIA_BATCH_SIZE", "3"))  # scenes rendered concurrently

    # Seed system climates/styles at startup
    SEED_SYSTEM_DATA: bool = os.getenv("SEED_SYSTEM_DATA", "true").lower() == "true"

    def validate_provider_config(self) -> None:
        """
        Validate AI provider configuration at startup.
        Raises ValueError if a provider is configured with an unusable value.
        """
        if self.OPENROUTER_TIMEOUT <= 0:
            raise ValueError("OPENROUTER_TIMEOUT must be > 0")
        if self.FAL_TIMEOUT <= 0 or self.FAL_QUEUE_TIMEOUT <= 0:
            raise ValueError("FAL_TIMEOUT and FAL_QUEUE_TIMEOUT must be > 0")
        if self.MEDIA_BATCH_SIZE < 1:
            raise ValueError("MEDIA_BATCH_SIZE must be >= 1")

    @property
    def cors_origins_list(self) -> list:
        """Parse CORS origins into a list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


# Global settings instance
settings = Settings()
