"""
Centralized application configuration
"""
import json
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # API Settings
    API_TITLE: str = "TechTots API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Storefront and back-office API for TechTots STEM toys"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./storefront.db"

    # Auth
    AUTH_SECRET: str = "dev-secret-change-me"
    AUTH_TOKEN_TTL_MINUTES: int = 60 * 24

    # Payment card encryption (AES-256, key is padded/truncated to 32 bytes)
    ENCRYPTION_KEY: str = "dev-encryption-key-change-me-0000"

    # Admin seed credentials
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None
    ADMIN_NAME: str = "Admin"

    # Dashboard and analytics serve fixed sample data when enabled
    USE_MOCK_DATA: bool = False

    # Email (Brevo)
    BREVO_API_KEY: Optional[str] = None
    BREVO_API_URL: str = "https://api.brevo.com/v3/smtp/email"
    EMAIL_FROM: str = "no-reply@techtots.com"
    EMAIL_FROM_NAME: str = "TechTots"
    STORE_URL: str = "http://localhost:3000"

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://techtots.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000"

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:3000"]

        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


settings = Settings()
