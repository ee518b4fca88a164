"""
Product Service configuration
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the product service directory path
PRODUCT_SERVICE_DIR = Path(__file__).parent.parent.parent
ENV_FILE = PRODUCT_SERVICE_DIR / ".env"


class ProductSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Product Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Service specific
    SERVICE_NAME: str = "product-service"

    # Database
    PRODUCT_DATABASE_URL: str

    # Kafka for events
    KAFKA_BOOTSTRAP_SERVERS: str = "localhost:9092"
    KAFKA_GROUP_ID: str = "product-service-group"
    KAFKA_TOPIC_ORDER_EVENTS: str = "order-events"
    KAFKA_TOPIC_INVENTORY_EVENTS: str = "inventory-events"
    KAFKA_CONNECT_MAX_RETRIES: int = 20
    KAFKA_CONNECT_RETRY_DELAY: float = 2.0

    # Consumer redelivery backoff (seconds)
    CONSUMER_RETRY_BACKOFF: float = 1.0
    CONSUMER_RETRY_BACKOFF_MAX: float = 30.0

    # Bounds on external calls made while handling an event (seconds)
    LEDGER_OPERATION_TIMEOUT: float = 10.0
    EVENT_PUBLISH_TIMEOUT: float = 10.0

    # Alert severity boundaries
    ALERT_CRITICAL_STOCK_LEVEL: int = 0
    ALERT_HIGH_RATIO: float = 0.5

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: List[str] = ["*"]
    CORS_HEADERS: List[str] = ["*"]


# Create a singleton instance
_settings_instance = None


def get_settings() -> ProductSettings:
    """Get settings singleton instance"""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = ProductSettings()
    return _settings_instance
