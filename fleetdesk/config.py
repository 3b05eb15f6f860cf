"""Centralised client settings loaded from environment / .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Backend
    api_base_url: str = "http://localhost:5000/api"
    request_timeout_seconds: float = 15.0

    # Persisted client storage for {token, user}
    session_file: str = ".fleetdesk/session.json"

    # Pricing
    tax_rate: float = 0.10
    service_fee_rate: float = 0.05
    currency: str = "USD"

    # Front end
    rate_limit: str = "100/minute"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
