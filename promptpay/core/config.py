"""Central runtime configuration for PromptPay."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


SUPPORTED_IMAGE_SIZES = {"256x256", "512x512", "1024x1024", "1024x1536", "1536x1024", "auto"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    env: str = "development"
    log_level: str = "INFO"
    app_name: str = "promptpay"
    app_version: str = "0.1.0"
    app_public_base_url: str = "http://localhost:8000"
    max_prompt_length: int = 400
    openai_api_key: str = ""
    image_model: str = "gpt-image-1"
    image_size: str = "1024x1024"
    image_api_base_url: str = "https://api.openai.com/v1"
    image_timeout_seconds: int = 120
    generation_note: str = "Generated after your payment was confirmed."
    checkout_provider: str = "mock"
    checkout_api_base_url: str = ""
    checkout_api_key: str = ""
    checkout_timeout_seconds: int = 20
    checkout_title: str = "AI-Generated Image"
    checkout_amount: int = 20
    checkout_currency: str = "SAT"
    checkout_required_customer_fields: str = "email"
    mock_checkout_status: str = "paid"
    payment_poll_interval_seconds: float = 2.0
    payment_poll_max_checks: int = 30
    fulfillment_allow_regeneration: bool = False
    fulfillment_max_sessions: int = 1000
    metrics_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def required_customer_fields(self) -> list[str]:
        return [item.strip() for item in self.checkout_required_customer_fields.split(",") if item.strip()]


def _validate(settings: Settings) -> Settings:
    is_production = settings.env.lower() in {"prod", "production"}
    if is_production and not settings.app_public_base_url.strip():
        raise ValueError("Missing required production secrets/config: APP_PUBLIC_BASE_URL.")
    if settings.max_prompt_length <= 0:
        raise ValueError("MAX_PROMPT_LENGTH must be positive.")
    if settings.image_size.strip() not in SUPPORTED_IMAGE_SIZES:
        joined = ", ".join(sorted(SUPPORTED_IMAGE_SIZES))
        raise ValueError(f"IMAGE_SIZE must be one of: {joined}.")
    if settings.image_timeout_seconds <= 0:
        raise ValueError("IMAGE_TIMEOUT_SECONDS must be positive.")
    provider = settings.checkout_provider.strip().lower()
    if provider not in {"mock", "http"}:
        raise ValueError("CHECKOUT_PROVIDER must be one of: mock, http.")
    if provider == "http" and not settings.checkout_api_base_url.strip():
        raise ValueError("CHECKOUT_API_BASE_URL is required when CHECKOUT_PROVIDER=http.")
    if settings.checkout_amount <= 0:
        raise ValueError("CHECKOUT_AMOUNT must be positive.")
    if not settings.checkout_currency.strip():
        raise ValueError("CHECKOUT_CURRENCY must not be empty.")
    if settings.mock_checkout_status.strip().lower() not in {"pending", "paid", "rejected"}:
        raise ValueError("MOCK_CHECKOUT_STATUS must be one of: pending, paid, rejected.")
    if settings.payment_poll_interval_seconds <= 0:
        raise ValueError("PAYMENT_POLL_INTERVAL_SECONDS must be positive.")
    if settings.payment_poll_max_checks <= 0:
        raise ValueError("PAYMENT_POLL_MAX_CHECKS must be positive.")
    if settings.fulfillment_max_sessions <= 0:
        raise ValueError("FULFILLMENT_MAX_SESSIONS must be positive.")
    return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return validated settings as a cached singleton."""

    return _validate(Settings())
