"""
Period and Daily Reports

Profit-and-loss over a date range and the expected cash position for a
single day. All amounts are converted at the current rate, like the debt
dashboard.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from agency_ledger.engine.currency import CurrencyNormalizer
from agency_ledger.engine.inventory import discover_item_types
from agency_ledger.models.ledger import DailyClosing, ItemPerformance, PeriodReport
from agency_ledger.models.records import (
    Expense,
    PaymentStatus,
    Purchase,
    Sale,
    Voucher,
    VoucherKind,
)


def _in_range(normalizer: CurrencyNormalizer, record, date_from: date, date_to: date) -> bool:
    day = normalizer.civil_date(record.timestamp)
    return date_from <= day <= date_to


def period_report(
    normalizer: CurrencyNormalizer,
    date_from: date,
    date_to: date,
    sales: Iterable[Sale] = (),
    purchases: Iterable[Purchase] = (),
    expenses: Iterable[Expense] = (),
    item_types: Optional[Sequence[str]] = None,
) -> PeriodReport:
    """
    Profit and loss for the civil days `date_from`..`date_to` inclusive.

    Returns count against revenue and cost. Item quantities are net of
    customer returns.
    """
    period_sales = [s for s in sales if _in_range(normalizer, s, date_from, date_to)]
    period_purchases = [p for p in purchases if _in_range(normalizer, p, date_from, date_to)]
    period_expenses = [e for e in expenses if _in_range(normalizer, e, date_from, date_to)]

    gross_sales = Decimal("0")
    cash_sales = Decimal("0")
    cost_of_goods = Decimal("0")
    total_expenses = Decimal("0")

    revenue_by_item: dict[str, Decimal] = {}
    cost_by_item: dict[str, Decimal] = {}
    quantity_by_item: dict[str, int] = {}

    for sale in period_sales:
        sign = -1 if sale.is_return else 1
        value = normalizer.to_base(sale.total, sale.currency) * sign
        gross_sales += value
        if sale.status == PaymentStatus.CASH:
            cash_sales += value
        revenue_by_item[sale.item_type] = revenue_by_item.get(sale.item_type, Decimal("0")) + value
        quantity_by_item[sale.item_type] = quantity_by_item.get(sale.item_type, 0) + sale.quantity * sign

    for purchase in period_purchases:
        sign = -1 if purchase.is_return else 1
        value = normalizer.to_base(purchase.total_cost, purchase.currency) * sign
        cost_of_goods += value
        cost_by_item[purchase.item_type] = cost_by_item.get(purchase.item_type, Decimal("0")) + value

    for expense in period_expenses:
        total_expenses += normalizer.to_base(expense.amount, expense.currency)

    if item_types is None:
        item_types = discover_item_types(period_sales, period_purchases)

    items = tuple(
        ItemPerformance(
            item_type=item_type,
            quantity_sold=quantity_by_item.get(item_type, 0),
            revenue=revenue_by_item.get(item_type, Decimal("0")),
            cost=cost_by_item.get(item_type, Decimal("0")),
        )
        for item_type in item_types
    )

    return PeriodReport(
        date_from=date_from,
        date_to=date_to,
        gross_sales=gross_sales,
        cost_of_goods=cost_of_goods,
        total_expenses=total_expenses,
        cash_sales=cash_sales,
        items=items,
    )


def daily_closing(
    normalizer: CurrencyNormalizer,
    day: date,
    sales: Iterable[Sale] = (),
    purchases: Iterable[Purchase] = (),
    expenses: Iterable[Expense] = (),
    vouchers: Iterable[Voucher] = (),
) -> DailyClosing:
    """
    Expected cash drawer movement for one civil day.

    Cash in:  cash sales, receipts, cash refunds from suppliers.
    Cash out: cash purchases, expenses, payments, cash refunds to customers.
    Credit sales are reported separately and never touch the drawer.
    """
    def on_day(record) -> bool:
        return normalizer.civil_date(record.timestamp) == day

    day_sales = [s for s in sales if on_day(s)]
    day_purchases = [p for p in purchases if on_day(p)]
    day_expenses = [e for e in expenses if on_day(e)]
    day_vouchers = [v for v in vouchers if on_day(v)]

    cash_in = Decimal("0")
    cash_out = Decimal("0")
    credit_sales = Decimal("0")

    for sale in day_sales:
        value = normalizer.to_base(sale.total, sale.currency)
        if sale.status == PaymentStatus.CREDIT:
            credit_sales += -value if sale.is_return else value
        elif sale.is_return:
            cash_out += value
        else:
            cash_in += value

    for purchase in day_purchases:
        if purchase.status != PaymentStatus.CASH:
            continue
        value = normalizer.to_base(purchase.total_cost, purchase.currency)
        if purchase.is_return:
            cash_in += value
        else:
            cash_out += value

    for expense in day_expenses:
        cash_out += normalizer.to_base(expense.amount, expense.currency)

    for voucher in day_vouchers:
        value = normalizer.to_base(voucher.amount, voucher.currency)
        if voucher.voucher_kind == VoucherKind.RECEIPT:
            cash_in += value
        else:
            cash_out += value

    return DailyClosing(
        day=day,
        cash_in=cash_in,
        cash_out=cash_out,
        credit_sales=credit_sales,
        sales_count=len(day_sales),
        purchases_count=len(day_purchases),
        expenses_count=len(day_expenses),
        vouchers_count=len(day_vouchers),
    )
