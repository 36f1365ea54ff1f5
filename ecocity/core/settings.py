"""
Core settings and environment variables for EcoCity Signals.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "EcoCity Signals"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - comma separated list of frontend origins
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON
    REPORTS_COLLECTION: str = "reports"

    # In-memory store for local development without Firebase credentials
    USE_MOCK_DB: bool = False

    # Image inference (captioning + classification)
    # - INFERENCE_ENABLED=false skips the external call; extraction runs on text only
    # - CF_ACCOUNT_ID / CF_API_TOKEN: Cloudflare Workers AI REST credentials
    INFERENCE_ENABLED: bool = True
    CF_ACCOUNT_ID: Optional[str] = None
    CF_API_TOKEN: Optional[str] = None
    CAPTION_MODEL: str = "@cf/unum/uform-gen2-qwen-500m"
    CLASSIFICATION_MODEL: str = "@cf/microsoft/resnet-50"
    INFERENCE_TIMEOUT_SECONDS: float = 10.0

    # Uploader IPs are stored hashed (privacy-protected)
    IP_HASH_SALT: str = "ecocity_signals_salt"

    # Moderation dashboard
    FLAGGED_LIMIT_DEFAULT: int = 20
    FLAGGED_LIMIT_MAX: int = 100
    ADMIN_PAGE_SIZE_DEFAULT: int = 20
    ADMIN_PAGE_SIZE_MAX: int = 100

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
