"""
Centralized application configuration
"""
import json
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from the environment or .env"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # API Settings
    API_TITLE: str = "Kamioun Marketplace API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "B2B marketplace order management backend"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./kamioun.db"

    # Auth
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_DAYS: int = 7
    PASSWORD_RESET_TTL_MINUTES: int = 60

    # Login rate limiting (fixed window)
    LOGIN_RATE_LIMIT: int = 5
    LOGIN_RATE_WINDOW_SECONDS: int = 60

    # Phone numbers are parsed relative to this region when no prefix is given
    PHONE_DEFAULT_REGION: str = "TN"

    # Metrics
    PROMETHEUS_ENDPOINT: str = "/metrics"

    # Supabase Storage (banners, brand images, customer documents)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://admin.kamioun.tn" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "*"

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["*"]

        # Try JSON parse first (for array format)
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]


settings = Settings()
