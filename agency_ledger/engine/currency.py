"""
Currency Normalizer

Converts amounts into the base reporting currency.

DESIGN DECISION: Historical conversion matches the transaction's CALENDAR
DAY exactly against the rate history. There is no nearest-date search and
no interpolation: rates are published once per day, and a transaction on a
day without a published rate is converted at the current rate.

The calendar day of an instant is taken in the reporting timezone, never
in UTC, so a sale at 01:00 local time is matched against that local day.
"""

from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal
from typing import Optional, Union
from zoneinfo import ZoneInfo

from agency_ledger.models.money import (
    BASE_CURRENCY,
    Currency,
    ExchangeRateSnapshot,
    RateHistory,
)


When = Union[datetime, date]


def civil_date(when: When, tz: Optional[ZoneInfo] = None) -> date:
    """
    Calendar day of `when` in the given timezone.

    Dates are returned unchanged. Naive datetimes are treated as UTC.
    """
    if not isinstance(when, datetime):
        return when
    if when.tzinfo is None:
        when = when.replace(tzinfo=dt_timezone.utc)
    if tz is not None:
        when = when.astimezone(tz)
    return when.date()


class CurrencyNormalizer:
    """
    Converts amounts to the base currency using a rate history.

    GUARANTEES:
    - Base-currency amounts are returned unchanged
    - Never raises for a missing rate (falls back to the current rate,
      then to the configured default-rate snapshot)
    - Pure: same history, same answers
    """

    def __init__(
        self,
        history: Union[RateHistory, list[ExchangeRateSnapshot], tuple[ExchangeRateSnapshot, ...]],
        fallback: Optional[ExchangeRateSnapshot] = None,
        tz: Optional[ZoneInfo] = None,
    ):
        """
        Args:
            history: Rate snapshots, newest first.
            fallback: Rates to use when the history is empty. If None,
                      foreign amounts convert at 1 (identity policy).
            tz: Timezone used to find the calendar day of an instant.
        """
        if not isinstance(history, RateHistory):
            history = RateHistory.of(history)
        self._history = history
        self._fallback = fallback
        self._tz = tz

    @property
    def history(self) -> RateHistory:
        return self._history

    @property
    def tz(self) -> Optional[ZoneInfo]:
        return self._tz

    @property
    def current(self) -> Optional[ExchangeRateSnapshot]:
        """Most recent snapshot, or the fallback when there is none."""
        return self._history.current or self._fallback

    def civil_date(self, when: When) -> date:
        return civil_date(when, self._tz)

    def snapshot_for(self, when: Optional[When] = None) -> Optional[ExchangeRateSnapshot]:
        """Snapshot published on the calendar day of `when`, else the current one."""
        if when is not None:
            match = self._history.on(self.civil_date(when))
            if match is not None:
                return match
        return self.current

    def has_rate_on(self, when: When) -> bool:
        return self._history.on(self.civil_date(when)) is not None

    def rate_for(self, currency: Currency, when: Optional[When] = None) -> Decimal:
        """Rate converting one unit of `currency` to base on the day of `when`."""
        if currency == BASE_CURRENCY:
            return Decimal("1")
        snapshot = self.snapshot_for(when)
        if snapshot is None:
            return Decimal("1")
        return snapshot.rate_for(currency)

    def to_base(
        self,
        amount: Decimal,
        currency: Currency,
        when: Optional[When] = None,
    ) -> Decimal:
        """
        Convert `amount` in `currency` to the base currency.

        Without `when` the current rate is used. With `when` the rate
        published on that calendar day is used if one exists.
        """
        if currency == BASE_CURRENCY:
            return amount
        return amount * self.rate_for(currency, when)
