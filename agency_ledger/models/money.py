"""
Money and Exchange Rate Models

Every monetary value in the ledger carries its currency explicitly.
Amounts are Decimal end to end.

DESIGN DECISION: Only three currencies exist. YER is the base reporting
currency; SAR and OMR are converted into it using rates published by the
agency once per day. An unknown currency code fails model validation, so
the engine itself never has to deal with one.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class Currency(str, Enum):
    """Supported currencies."""
    YER = "YER"  # Base reporting currency
    SAR = "SAR"
    OMR = "OMR"


BASE_CURRENCY = Currency.YER


# =============================================================================
# VALUE OBJECTS
# =============================================================================

class Money(BaseModel):
    """
    An amount in a specific currency.

    Negative amounts are only used for returns and reversals.
    """
    model_config = ConfigDict(frozen=True)

    amount: Decimal = Field(
        ...,
        description="Amount in the given currency"
    )
    currency: Currency = Field(
        default=BASE_CURRENCY,
        description="Currency of the amount"
    )

    @classmethod
    def zero(cls, currency: Currency = BASE_CURRENCY) -> "Money":
        return cls(amount=Decimal("0"), currency=currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    def negated(self) -> "Money":
        return Money(amount=-self.amount, currency=self.currency)


class ExchangeRateSnapshot(BaseModel):
    """
    Rates published for one calendar day.

    Each rate is the number of base-currency units per one unit of the
    foreign currency (e.g. 1 SAR = 430 YER).
    """
    model_config = ConfigDict(frozen=True)

    sar_rate: Decimal = Field(
        ...,
        gt=0,
        description="YER per 1 SAR"
    )
    omr_rate: Decimal = Field(
        ...,
        gt=0,
        description="YER per 1 OMR"
    )
    effective_date: date = Field(
        ...,
        description="Calendar day the rates were published for"
    )

    def rate_for(self, currency: Currency) -> Decimal:
        """Rate that converts one unit of `currency` into the base currency."""
        if currency == Currency.SAR:
            return self.sar_rate
        if currency == Currency.OMR:
            return self.omr_rate
        return Decimal("1")


class RateHistory(BaseModel):
    """
    Published rate snapshots, newest first.

    The first snapshot is the current rate. Lookups by day are exact
    calendar-day matches only.
    """
    model_config = ConfigDict(frozen=True)

    snapshots: tuple[ExchangeRateSnapshot, ...] = Field(default_factory=tuple)

    @classmethod
    def of(cls, snapshots: Iterable[ExchangeRateSnapshot]) -> "RateHistory":
        return cls(snapshots=tuple(snapshots))

    @property
    def current(self) -> Optional[ExchangeRateSnapshot]:
        return self.snapshots[0] if self.snapshots else None

    def on(self, day: date) -> Optional[ExchangeRateSnapshot]:
        """First snapshot published exactly on `day`, if any."""
        for snapshot in self.snapshots:
            if snapshot.effective_date == day:
                return snapshot
        return None
