"""
Application settings loaded from the environment (and an optional .env file)
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # WhatsApp Cloud API
    phone_number_id: str = ""
    access_token: str = ""
    admin_number: str = ""
    whatsapp_api_base: str = "https://graph.facebook.com"
    whatsapp_api_version: str = "v17.0"
    whatsapp_timeout: float = 10.0

    # Optional shared secret checked against the x-order-secret header
    order_secret: str = ""
    allowed_origin: str = "*"

    port: int = 3000
    environment: str = "development"
    log_level: str = "info"

    # Storage
    orders_file: str = "orders.json"
    images_dir: str = "images"

    # Fixed-window limits per client address
    rate_limit_max: int = 100
    rate_limit_window: int = 15 * 60
    admin_rate_limit_max: int = 10
    admin_rate_limit_window: int = 60

    @property
    def has_whatsapp_credentials(self) -> bool:
        return bool(self.phone_number_id and self.access_token and self.admin_number)


@lru_cache
def get_settings() -> Settings:
    return Settings()
