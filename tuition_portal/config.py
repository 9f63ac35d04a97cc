"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # HubSpot CRM
    hubspot_private_app_token: str = ""
    hubspot_api_base: str = "https://api.hubapi.com"

    # Stripe Checkout
    stripe_secret_key: str = ""
    checkout_success_url: str = "https://pacificdiscovery.org/success?session_id={CHECKOUT_SESSION_ID}"
    checkout_currency: str = "usd"

    # Service
    service_name: str = "tuition-portal"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 10.0


settings = Settings()
