"""
Configuration Management for Agency Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: The engine functions never read configuration themselves.
Thresholds, default rates and the reporting timezone are read here and
passed in by the service layer, so the engine stays a set of pure functions.
"""

from datetime import date
from decimal import Decimal
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from agency_ledger.models.ledger import AgingThresholds
from agency_ledger.models.money import BASE_CURRENCY, Currency, ExchangeRateSnapshot


class LedgerSettings(BaseSettings):
    """
    Ledger engine settings.

    Loads configuration from LEDGER_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Currency
    default_currency: Currency = Field(
        default=BASE_CURRENCY,
        description="Currency assumed for opening balances recorded without one"
    )
    default_sar_rate: Decimal = Field(
        default=Decimal("430"),
        gt=0,
        description="SAR rate used when no rate has ever been published"
    )
    default_omr_rate: Decimal = Field(
        default=Decimal("425"),
        gt=0,
        description="OMR rate used when no rate has ever been published"
    )
    reporting_timezone: str = Field(
        default="Asia/Aden",
        description="Timezone whose calendar days rates are published for"
    )

    # Debt aging (exclusive upper bounds, in days)
    aging_new_days: int = Field(default=3, ge=0)
    aging_active_days: int = Field(default=15, ge=0)
    aging_overdue_days: int = Field(default=30, ge=0)

    # Inventory
    low_stock_threshold: int = Field(
        default=5,
        ge=0,
        description="Stock at or below this level is flagged as low"
    )

    # Snapshot loading
    snapshot_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times to try loading a snapshot"
    )
    snapshot_retry_min_wait: float = Field(default=2.0, ge=0)
    snapshot_retry_max_wait: float = Field(default=10.0, ge=0)

    # Memoised results
    result_cache_size: int = Field(
        default=128,
        ge=1,
        description="Most results kept per snapshot version, least recently used evicted first"
    )

    @field_validator("reporting_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @model_validator(mode="after")
    def validate_aging_order(self) -> "LedgerSettings":
        if not (self.aging_new_days <= self.aging_active_days <= self.aging_overdue_days):
            raise ValueError("Aging thresholds must be in ascending order")
        return self

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.reporting_timezone)

    @property
    def aging_thresholds(self) -> AgingThresholds:
        return AgingThresholds(
            new_days=self.aging_new_days,
            active_days=self.aging_active_days,
            overdue_days=self.aging_overdue_days,
        )

    def fallback_rates(self, today: date) -> ExchangeRateSnapshot:
        """Default-rate policy for an empty rate history."""
        return ExchangeRateSnapshot(
            sar_rate=self.default_sar_rate,
            omr_rate=self.default_omr_rate,
            effective_date=today,
        )


@lru_cache()
def get_settings() -> LedgerSettings:
    """
    Get ledger settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return LedgerSettings()
