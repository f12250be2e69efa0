from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CHECKOUT_",
        case_sensitive=False,
    )

    app_name: str = "Checkout Engine API"
    app_version: str = "0.1.0"
    environment: str = "local"
    log_json: bool = False

    money_rounding: Literal["half_up", "half_even", "up", "down"] = "half_up"

    # Fallbacks used when a store row leaves its shipping defaults empty.
    default_shipping_inside: Decimal = Decimal("60")
    default_shipping_outside: Decimal = Decimal("120")
    default_return_charge: Decimal = Decimal("0")
    default_delivery_radius_km: float = 5.0

    cors_origins: list[str] = ["http://localhost:5173"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
