"""
Configuration settings for the storefront service.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_DATA_DIRECTORY = Path(__file__).resolve().parent / "data"


class Settings:
    """Application settings loaded from environment variables."""

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Redis / session settings
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    SESSION_KEY_PREFIX: str = os.getenv("SESSION_KEY_PREFIX", "session:")
    SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "86400"))
    ORDER_KEY_PREFIX: str = os.getenv("ORDER_KEY_PREFIX", "order:")
    REVIEW_KEY_PREFIX: str = os.getenv("REVIEW_KEY_PREFIX", "reviews:")
    SUBMISSION_GUARD_TTL_SECONDS: int = int(
        os.getenv("SUBMISSION_GUARD_TTL_SECONDS", "30")
    )

    # Bundled fixtures
    CATALOG_PATH: str = os.getenv(
        "CATALOG_PATH", str(_DATA_DIRECTORY / "products.json")
    )
    VERIFICATIONS_PATH: str = os.getenv(
        "VERIFICATIONS_PATH",
        str(_DATA_DIRECTORY / "verification_requests.json"),
    )
    ANALYTICS_PATH: str = os.getenv(
        "ANALYTICS_PATH", str(_DATA_DIRECTORY / "seller_analytics.json")
    )

    # Browsing
    PRODUCTS_PAGE_SIZE: int = int(os.getenv("PRODUCTS_PAGE_SIZE", "12"))
    RECENTLY_VIEWED_LIMIT: int = int(os.getenv("RECENTLY_VIEWED_LIMIT", "12"))
    SEARCH_HISTORY_LIMIT: int = int(os.getenv("SEARCH_HISTORY_LIMIT", "10"))

    # Simulated network latency (milliseconds)
    ADD_TO_CART_DELAY_MS: int = int(os.getenv("ADD_TO_CART_DELAY_MS", "500"))
    PLACE_ORDER_DELAY_MS: int = int(os.getenv("PLACE_ORDER_DELAY_MS", "2000"))
    VERIFICATION_DELAY_MS: int = int(os.getenv("VERIFICATION_DELAY_MS", "1000"))
    REVIEW_DELAY_MS: int = int(os.getenv("REVIEW_DELAY_MS", "1500"))

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.
        """
        return self.ENVIRONMENT.lower() == "production"

    def __init__(self):
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        logging.basicConfig(
            level=self.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        self.logger = logging.getLogger(__name__)

        self.logger.debug(
            "Config initialized with environment=%s, log_level=%s, catalog=%s",
            self.ENVIRONMENT,
            self.log_level,
            self.CATALOG_PATH,
        )


# Create a global settings instance for import
settings = Settings()
