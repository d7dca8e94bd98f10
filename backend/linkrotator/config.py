from fastapi import Request
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = "sqlite:///./linkrotator.db"

    # Site
    SITE_NAME: str = "Minglemoody"
    BASE_URL: str = "http://localhost:8000"

    # Visitor session cookie
    SESSION_COOKIE_NAME: str = "minglemoody_session"
    SESSION_COOKIE_MAX_AGE: int = 60 * 60 * 24 * 365  # 1 year

    # Redirect chain
    MASKED_LINK_PREFIX: str = "minglemoody.lid="
    PRELANDING_REDIRECT_DELAY_MS: int = 1500

    # Geo lookup (ip-api.com)
    GEO_LOOKUP_ENABLED: bool = True
    GEO_LOOKUP_TIMEOUT: float = 2.0

    # AI gateway
    AI_GATEWAY_URL: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    AI_GATEWAY_API_KEY: str = ""
    AI_TEXT_MODEL: str = "google/gemini-2.5-flash"
    AI_IMAGE_MODEL: str = "google/gemini-2.5-flash-image-preview"
    AI_GATEWAY_TIMEOUT: float = 60.0

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()


def get_settings(request: Request) -> Settings:
    """Dependency returning the settings the running app was built with"""
    return request.app.state.settings
