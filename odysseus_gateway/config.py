"""Configuration management using Pydantic Settings"""

from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "odysseus-gateway"
    log_level: str = "INFO"
    currency_symbol: str = "RM"

    # Validation
    limit_warning_threshold: Decimal = Field(default=Decimal("0.8"), gt=0, le=1)

    # Transfer execution retry
    transfer_max_attempts: int = Field(default=3, ge=1)
    transfer_retry_base_delay: float = 1.0  # seconds, doubled per attempt
    transfer_retry_max_delay: float = 10.0

    # Mock bank behaviour
    network_failure_rate: float = Field(default=0.1, ge=0, le=1)
    transfer_delay_seconds: float = 1.5
    # Lookups for these always come back empty
    unknown_recipient_account_number: str = "0000000000"
    unknown_recipient_phone_number: str = "+60100000000"
    lookup_bank_name: str = "Maybank"

    # Seed state for the in-memory store
    seed_savings_balance: Decimal = Decimal("4500.00")
    seed_current_balance: Decimal = Decimal("12350.75")
    seed_daily_limit: Decimal = Decimal("10000")
    seed_daily_used: Decimal = Decimal("2500")
    seed_monthly_limit: Decimal = Decimal("50000")
    seed_monthly_used: Decimal = Decimal("15000")
    seed_per_transaction_limit: Decimal = Decimal("5000")


settings = Settings()
