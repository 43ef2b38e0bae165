"""
Configuration settings for the application.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    """Application settings loaded from environment variables."""

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    APP_VERSION: str = os.getenv("APP_VERSION", "7.0.0")

    # Redis settings
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    REDIS_KEY_PREFIX: str = os.getenv("REDIS_KEY_PREFIX", "brickdeals:")
    STORE_BATCH_SIZE: int = int(os.getenv("STORE_BATCH_SIZE", "450"))

    # Security
    APP_API_KEY: str = os.getenv("APP_API_KEY", "")
    ALLOWED_ORIGINS: list[str] = _csv(
        os.getenv(
            "ALLOWED_ORIGINS",
            "https://brickdealhunter.com,https://www.brickdealhunter.com,"
            "exp://,https://exp.host",
        )
    )
    RATE_LIMIT_MAX_REQUESTS: int = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "30"))
    RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

    # Catalog source
    REBRICKABLE_API_KEY: str = os.getenv("REBRICKABLE_API_KEY", "")
    REBRICKABLE_BASE_URL: str = os.getenv(
        "REBRICKABLE_BASE_URL", "https://rebrickable.com/api/v3/lego"
    )
    CATALOG_MAX_PAGES: int = int(os.getenv("CATALOG_MAX_PAGES", "10"))
    CATALOG_PAGE_SIZE: int = int(os.getenv("CATALOG_PAGE_SIZE", "100"))
    CATALOG_PAGE_DELAY_SECONDS: float = float(
        os.getenv("CATALOG_PAGE_DELAY_SECONDS", "0.3")
    )
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))

    # Push gateway
    EXPO_PUSH_URL: str = os.getenv(
        "EXPO_PUSH_URL", "https://exp.host/--/api/v2/push/send"
    )
    PUSH_BATCH_SIZE: int = int(os.getenv("PUSH_BATCH_SIZE", "100"))

    # Deal rules
    MIN_DEAL_DISCOUNT: int = int(os.getenv("MIN_DEAL_DISCOUNT", "10"))
    HOT_DEAL_THRESHOLD: int = int(os.getenv("HOT_DEAL_THRESHOLD", "40"))
    DEAL_RETENTION_HOURS: int = int(os.getenv("DEAL_RETENTION_HOURS", "24"))

    # Pipelines
    PRICE_REFRESH_PRODUCT_LIMIT: int = int(
        os.getenv("PRICE_REFRESH_PRODUCT_LIMIT", "100")
    )
    MANUAL_PRICE_PRODUCT_LIMIT: int = int(
        os.getenv("MANUAL_PRICE_PRODUCT_LIMIT", "50")
    )
    PRICE_ITERATION_DELAY_SECONDS: float = float(
        os.getenv("PRICE_ITERATION_DELAY_SECONDS", "0.05")
    )

    # Scheduler
    CATALOG_REFRESH_HOURS: float = float(os.getenv("CATALOG_REFRESH_HOURS", "24"))
    PRICE_REFRESH_MINUTES: float = float(os.getenv("PRICE_REFRESH_MINUTES", "60"))
    CATALOG_JOB_TIMEOUT_SECONDS: int = int(
        os.getenv("CATALOG_JOB_TIMEOUT_SECONDS", "540")
    )
    PRICE_JOB_TIMEOUT_SECONDS: int = int(os.getenv("PRICE_JOB_TIMEOUT_SECONDS", "300"))

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.
        """
        return self.ENVIRONMENT.lower() == "production"

    @property
    def api_key_configured(self) -> bool:
        """Admin endpoints and CORS are only locked down when a key is set."""
        return bool(self.APP_API_KEY)

    def __init__(self):
        self.debug = os.getenv("DEBUG", "false").lower() == "true"
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        logging.basicConfig(level=self.log_level)
        self.logger = logging.getLogger(__name__)

        self.logger.debug(
            f"Config initialized with env={self.ENVIRONMENT}, debug={self.debug}, "
            f"log_level={self.log_level}"
        )
        if not self.APP_API_KEY:
            self.logger.warning(
                "APP_API_KEY not configured - admin endpoints are open and CORS "
                "reflects any origin (development mode)"
            )


# Create a global settings instance for import
settings = Settings()
