"""Tests for the currency normalizer."""

from datetime import date, datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

from agency_ledger.engine import CurrencyNormalizer, civil_date
from agency_ledger.models import Currency, ExchangeRateSnapshot, RateHistory


ADEN = ZoneInfo("Asia/Aden")


def _rates(day: date, sar: str, omr: str = "425") -> ExchangeRateSnapshot:
    return ExchangeRateSnapshot(sar_rate=Decimal(sar), omr_rate=Decimal(omr), effective_date=day)


def _noon(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, 12, 0, tzinfo=timezone.utc)


DAY1 = date(2024, 1, 1)
DAY2 = date(2024, 1, 2)
DAY3 = date(2024, 1, 3)


class TestHistoricalRates:
    """Tests for exact-day rate matching."""

    def setup_method(self):
        self.normalizer = CurrencyNormalizer([_rates(DAY2, "400"), _rates(DAY1, "420")])

    def test_matching_day_uses_that_days_rate(self):
        """Test a transaction on day 1 converts at day 1's rate."""
        assert self.normalizer.to_base(Decimal("1"), Currency.SAR, _noon(DAY1)) == Decimal("420")

    def test_unmatched_day_uses_newest_rate(self):
        """Test a day without a rate falls back to the newest snapshot."""
        assert self.normalizer.to_base(Decimal("1"), Currency.SAR, _noon(DAY3)) == Decimal("400")

    def test_no_date_uses_current_rate(self):
        assert self.normalizer.to_base(Decimal("2"), Currency.SAR) == Decimal("800")

    def test_fallback_equivalence(self):
        """Test that an unmatched date converts exactly like no date at all."""
        for amount in (Decimal("0"), Decimal("1"), Decimal("12.345"), Decimal("-7")):
            for currency in Currency:
                assert (
                    self.normalizer.to_base(amount, currency, _noon(DAY3))
                    == self.normalizer.to_base(amount, currency)
                )

    def test_plain_date_is_used_as_is(self):
        assert self.normalizer.rate_for(Currency.SAR, DAY1) == Decimal("420")

    def test_has_rate_on(self):
        assert self.normalizer.has_rate_on(_noon(DAY1))
        assert not self.normalizer.has_rate_on(_noon(DAY3))

    def test_no_nearest_date_search(self):
        """Test that a rate published the day before is not used."""
        normalizer = CurrencyNormalizer([_rates(DAY3, "390"), _rates(DAY1, "420")])
        assert normalizer.rate_for(Currency.SAR, _noon(DAY2)) == Decimal("390")


class TestBaseCurrency:
    """Tests for base-currency identity."""

    def test_base_amount_unchanged(self):
        normalizer = CurrencyNormalizer([_rates(DAY1, "420")])
        amount = Decimal("1234.56")
        once = normalizer.to_base(amount, Currency.YER)
        assert normalizer.to_base(once, Currency.YER) == amount
        assert normalizer.to_base(amount, Currency.YER, _noon(DAY3)) == amount

    def test_base_rate_is_one(self):
        normalizer = CurrencyNormalizer([])
        assert normalizer.rate_for(Currency.YER) == Decimal("1")


class TestEmptyHistory:
    """Tests for the default-rate policy."""

    def test_fallback_snapshot_used(self):
        normalizer = CurrencyNormalizer([], fallback=_rates(DAY1, "430", "425"))
        assert normalizer.to_base(Decimal("1"), Currency.SAR, _noon(DAY2)) == Decimal("430")
        assert normalizer.to_base(Decimal("1"), Currency.OMR) == Decimal("425")
        assert normalizer.current.sar_rate == Decimal("430")

    def test_identity_without_fallback(self):
        """Test that conversion never raises when no rate exists at all."""
        normalizer = CurrencyNormalizer([])
        assert normalizer.current is None
        assert normalizer.to_base(Decimal("5"), Currency.SAR) == Decimal("5")

    def test_accepts_rate_history(self):
        history = RateHistory.of([_rates(DAY1, "420")])
        assert CurrencyNormalizer(history).history is history


class TestCivilDate:
    """Tests for calendar-day resolution."""

    def test_date_returned_unchanged(self):
        assert civil_date(DAY1, ADEN) == DAY1

    def test_naive_datetime_is_utc(self):
        assert civil_date(datetime(2024, 1, 1, 23, 30)) == DAY1

    def test_reporting_timezone_shifts_day(self):
        """Test that late-evening UTC instants fall on the next local day."""
        late = datetime(2024, 1, 1, 22, 0, tzinfo=timezone.utc)
        assert civil_date(late) == DAY1
        assert civil_date(late, ADEN) == DAY2

    def test_rate_matched_on_local_day(self):
        history = [_rates(DAY2, "400"), _rates(DAY1, "420")]
        late = datetime(2024, 1, 1, 22, 0, tzinfo=timezone.utc)

        assert CurrencyNormalizer(history).rate_for(Currency.SAR, late) == Decimal("420")
        assert CurrencyNormalizer(history, tz=ADEN).rate_for(Currency.SAR, late) == Decimal("400")
