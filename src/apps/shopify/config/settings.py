from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """
    Application configuration settings loaded from environment variables.
    """

    LOG_LEVEL: str = "INFO"

    # Shopify Admin API
    SHOPIFY_STORE_DOMAIN: str = ""
    SHOPIFY_ACCESS_TOKEN: str = ""
    SHOPIFY_API_VERSION: str = "2024-10"

    # Model providers, only the one matching DEFAULT_MODEL is required
    OPENAI_API_KEY: str = ""
    ANTHROPIC_API_KEY: str = ""
    GOOGLE_API_KEY: str = ""
    GROQ_API_KEY: str = ""

    DEFAULT_MODEL: str = "gemini-2.5-flash"
    MODEL_TEMPERATURE: float = 0.5
    MAX_OUTPUT_TOKENS: int = 32768

    # Inventory tracking is enabled asynchronously on Shopify's side
    INVENTORY_WAIT_STRATEGY: Literal["sleep", "poll"] = "sleep"
    INVENTORY_SETTLE_DELAY: float = 1.0
    INVENTORY_POLL_INTERVAL: float = 0.5
    INVENTORY_POLL_TIMEOUT: float = 10.0

    # Upload compression
    IMAGE_MAX_WIDTH: int = 768
    IMAGE_JPEG_QUALITY: int = 80

    DATA_PATH: Path = Path(__file__).parent.parent.joinpath("data")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Create a singleton instance
settings = AppConfig()
