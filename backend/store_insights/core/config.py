"""
Centralized application configuration

Settings for the Store Insights API, loaded from environment / .env
"""
import json
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    # API Settings
    API_TITLE: str = "Store Insights API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Admin analytics and custom routes for the Pakistan storefront"
    LOG_LEVEL: str = "INFO"

    # Commerce backend (Medusa)
    MEDUSA_BACKEND_URL: str = "http://localhost:9000"
    MEDUSA_ADMIN_TOKEN: str = ""
    MEDUSA_PUBLISHABLE_KEY: str = ""
    MEDUSA_TIMEOUT_SECONDS: float = 30.0

    # Aggregation
    ORDERS_FETCH_LIMIT: int = 1000
    # Order totals are whole PKR; set to 100 for a backend that reports minor units
    AMOUNT_DIVISOR: int = 1
    CURRENCY_CODE: str = "pkr"
    STORE_TIMEZONE: str = "Asia/Karachi"
    LOW_STOCK_THRESHOLD: int = 10
    CRITICAL_STOCK_THRESHOLD: int = 5

    # Storefront (used for cart recovery links)
    STOREFRONT_URL: str = "http://localhost:8000"

    # Access control for the routes exposed by this service
    ADMIN_API_KEY: str = ""
    STORE_PUBLISHABLE_KEY: str = ""

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://yourdomain.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:9000,http://localhost:8000"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:9000"]

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
