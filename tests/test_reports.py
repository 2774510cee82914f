"""Tests for period reports and the daily cash closing."""

from datetime import date, datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

from agency_ledger.engine import CurrencyNormalizer, daily_closing, period_report
from agency_ledger.models import (
    Currency,
    EntityType,
    ExchangeRateSnapshot,
    Expense,
    PaymentStatus,
    Purchase,
    Sale,
    Voucher,
    VoucherKind,
)


def _at(day: int, hour: int = 12) -> datetime:
    return datetime(2024, 1, day, hour, 0, tzinfo=timezone.utc)


def _normalizer(tz=None) -> CurrencyNormalizer:
    return CurrencyNormalizer(
        [
            ExchangeRateSnapshot(sar_rate=Decimal("400"), omr_rate=Decimal("1000"), effective_date=date(2024, 1, 5)),
            ExchangeRateSnapshot(sar_rate=Decimal("420"), omr_rate=Decimal("1050"), effective_date=date(2024, 1, 2)),
        ],
        tz=tz,
    )


def _sale(id, day, total, status=PaymentStatus.CASH, is_return=False, currency=Currency.YER,
          item_type="TypeA", quantity=1, hour=12):
    return Sale(
        id=id,
        timestamp=_at(day, hour),
        customer_id="c1",
        item_type=item_type,
        quantity=quantity,
        total=Decimal(total),
        status=status,
        is_return=is_return,
        currency=currency,
    )


def _purchase(id, day, total, status=PaymentStatus.CASH, is_return=False, item_type="TypeA"):
    return Purchase(
        id=id,
        timestamp=_at(day),
        supplier_id="p1",
        item_type=item_type,
        quantity=1,
        total_cost=Decimal(total),
        status=status,
        is_return=is_return,
    )


def _expense(id, day, amount):
    return Expense(id=id, timestamp=_at(day), category="Rent", amount=Decimal(amount))


def _voucher(id, day, amount, kind):
    return Voucher(
        id=id,
        timestamp=_at(day),
        entity_id="c1",
        entity_type=EntityType.CUSTOMER,
        voucher_kind=kind,
        amount=Decimal(amount),
    )


class TestPeriodReport:
    """Tests for profit and loss over a date range."""

    def setup_method(self):
        self.sales = [
            _sale("s1", 2, "1000", quantity=2),
            _sale("s2", 3, "10", status=PaymentStatus.CREDIT, currency=Currency.SAR,
                  item_type="TypeB", quantity=4),
            _sale("s3", 3, "200", is_return=True, quantity=1),
            _sale("s4", 20, "999"),
        ]
        self.purchases = [
            _purchase("p1", 2, "3000"),
            _purchase("p2", 4, "500", is_return=True, item_type="TypeB"),
        ]
        self.expenses = [_expense("e1", 3, "500"), _expense("e2", 21, "77")]

    def _report(self, **kwargs):
        return period_report(
            _normalizer(),
            date(2024, 1, 1),
            date(2024, 1, 10),
            sales=self.sales,
            purchases=self.purchases,
            expenses=self.expenses,
            **kwargs,
        )

    def test_totals(self):
        """Test returns count against revenue and cost."""
        report = self._report()
        assert report.gross_sales == Decimal("4800")
        assert report.cash_sales == Decimal("800")
        assert report.cost_of_goods == Decimal("2500")
        assert report.total_expenses == Decimal("500")
        assert report.net_profit == Decimal("1800")

    def test_converts_at_current_rate(self):
        """Test that a SAR sale uses the newest rate, not its day's rate."""
        report = period_report(
            _normalizer(), date(2024, 1, 1), date(2024, 1, 2),
            sales=[_sale("s1", 2, "1", currency=Currency.SAR)],
        )
        assert report.gross_sales == Decimal("400")

    def test_item_performance(self):
        items = {item.item_type: item for item in self._report().items}
        assert list(items) == ["TypeA", "TypeB"]

        assert items["TypeA"].quantity_sold == 1
        assert items["TypeA"].revenue == Decimal("800")
        assert items["TypeA"].cost == Decimal("3000")
        assert items["TypeA"].profit == Decimal("-2200")

        assert items["TypeB"].quantity_sold == 4
        assert items["TypeB"].revenue == Decimal("4000")
        assert items["TypeB"].cost == Decimal("-500")

    def test_known_item_types(self):
        items = self._report(item_types=("TypeC", "TypeA")).items
        assert [item.item_type for item in items] == ["TypeC", "TypeA"]
        assert items[0].revenue == Decimal("0")

    def test_range_is_inclusive(self):
        report = period_report(
            _normalizer(), date(2024, 1, 2), date(2024, 1, 2), sales=[_sale("s1", 2, "100")]
        )
        assert report.gross_sales == Decimal("100")

    def test_range_uses_reporting_timezone(self):
        """Test a late-evening UTC sale belongs to the next local day."""
        sales = [_sale("s1", 10, "100", hour=22)]
        utc = period_report(_normalizer(), date(2024, 1, 1), date(2024, 1, 10), sales=sales)
        aden = period_report(
            _normalizer(ZoneInfo("Asia/Aden")), date(2024, 1, 1), date(2024, 1, 10), sales=sales
        )
        assert utc.gross_sales == Decimal("100")
        assert aden.gross_sales == Decimal("0")

    def test_empty_period(self):
        report = period_report(_normalizer(), date(2024, 2, 1), date(2024, 2, 28))
        assert report.net_profit == Decimal("0")
        assert report.collection_rate == Decimal("0")
        assert report.items == ()


class TestDailyClosing:
    """Tests for the expected cash position of a day."""

    def setup_method(self):
        self.sales = [
            _sale("s1", 2, "1000"),
            _sale("s2", 2, "2000", status=PaymentStatus.CREDIT),
            _sale("s3", 2, "150", is_return=True),
            _sale("s4", 3, "5000"),
        ]
        self.purchases = [
            _purchase("p1", 2, "300"),
            _purchase("p2", 2, "999", status=PaymentStatus.CREDIT),
            _purchase("p3", 2, "40", is_return=True),
        ]
        self.expenses = [_expense("e1", 2, "100")]
        self.vouchers = [
            _voucher("v1", 2, "400", VoucherKind.RECEIPT),
            _voucher("v2", 2, "50", VoucherKind.PAYMENT),
        ]

    def _closing(self, day=date(2024, 1, 2)):
        return daily_closing(
            _normalizer(),
            day,
            sales=self.sales,
            purchases=self.purchases,
            expenses=self.expenses,
            vouchers=self.vouchers,
        )

    def test_cash_in_and_out(self):
        closing = self._closing()
        assert closing.cash_in == Decimal("1440")
        assert closing.cash_out == Decimal("600")
        assert closing.expected_cash == Decimal("840")

    def test_credit_sales_kept_out_of_drawer(self):
        assert self._closing().credit_sales == Decimal("2000")

    def test_counts(self):
        closing = self._closing()
        assert closing.sales_count == 3
        assert closing.purchases_count == 3
        assert closing.expenses_count == 1
        assert closing.vouchers_count == 2

    def test_counted_cash_difference(self):
        assert self._closing().difference(Decimal("850")) == Decimal("10")

    def test_quiet_day(self):
        closing = self._closing(date(2024, 1, 9))
        assert closing.expected_cash == Decimal("0")
        assert closing.sales_count == 0
