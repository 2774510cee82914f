"""
Debt Aggregator

Computes, for every customer or supplier, the outstanding balance broken
out by currency.

DESIGN DECISION: Unlike statements, debt vectors are NOT converted. Each
currency is summed on its own. Only the display total (`total_base`) is
converted, and it uses the CURRENT rate: dashboards show present-day
valuation, statements show historical valuation.

Contributions (positive = entity owes the agency):

    customer  credit sale      +total   (-total when returned)
              receipt          -amount
              payment          +amount
    supplier  credit purchase  +cost    (-cost when returned)
              payment          -amount
              receipt          +amount

Cash sales and purchases settle immediately and never contribute to the
balances. They still count as activity: `last_activity_date` is the day of
the latest transaction of any kind for the entity.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from agency_ledger.engine.currency import CurrencyNormalizer
from agency_ledger.models.ledger import (
    AgingBucket,
    AgingStatus,
    AgingThresholds,
    DebtBoard,
    DebtVector,
)
from agency_ledger.models.money import BASE_CURRENCY, Currency
from agency_ledger.models.records import (
    Entity,
    EntityType,
    PaymentStatus,
    Purchase,
    Sale,
    Voucher,
    VoucherKind,
)


def _voucher_sign(voucher: Voucher, entity_type: EntityType) -> int:
    if entity_type == EntityType.CUSTOMER:
        return -1 if voucher.voucher_kind == VoucherKind.RECEIPT else 1
    return -1 if voucher.voucher_kind == VoucherKind.PAYMENT else 1


def aggregate_debt(
    entity: Entity,
    entity_type: EntityType,
    normalizer: CurrencyNormalizer,
    sales: Iterable[Sale] = (),
    purchases: Iterable[Purchase] = (),
    vouchers: Iterable[Voucher] = (),
    default_currency: Currency = BASE_CURRENCY,
) -> DebtVector:
    """
    Debt vector for one entity.

    Records for other entities are skipped, so full collections may be
    passed in.
    """
    balances = {currency: Decimal("0") for currency in Currency}
    latest: Optional[datetime] = None

    opening = entity.opening_money(default_currency)
    if opening is not None:
        balances[opening.currency] += opening.amount

    def touch(timestamp: datetime) -> None:
        nonlocal latest
        if latest is None or timestamp > latest:
            latest = timestamp

    if entity_type == EntityType.CUSTOMER:
        for sale in sales:
            if sale.customer_id != entity.id:
                continue
            touch(sale.timestamp)
            if sale.status != PaymentStatus.CREDIT:
                continue
            sign = -1 if sale.is_return else 1
            balances[sale.currency] += sale.total * sign
    else:
        for purchase in purchases:
            if purchase.supplier_id != entity.id:
                continue
            touch(purchase.timestamp)
            if purchase.status != PaymentStatus.CREDIT:
                continue
            sign = -1 if purchase.is_return else 1
            balances[purchase.currency] += purchase.total_cost * sign

    for voucher in vouchers:
        if voucher.entity_id != entity.id or voucher.entity_type != entity_type:
            continue
        balances[voucher.currency] += voucher.amount * _voucher_sign(voucher, entity_type)
        touch(voucher.timestamp)

    if latest is not None:
        last_activity = normalizer.civil_date(latest)
    else:
        last_activity = entity.opening_balance_date

    total = sum(
        (normalizer.to_base(amount, currency) for currency, amount in balances.items()),
        Decimal("0"),
    )

    return DebtVector(
        entity_id=entity.id,
        entity_type=entity_type,
        entity_name=entity.name,
        balances=balances,
        last_activity_date=last_activity,
        total_base=total,
    )


def aggregate_debts(
    entities: Iterable[Entity],
    entity_type: EntityType,
    normalizer: CurrencyNormalizer,
    sales: Sequence[Sale] = (),
    purchases: Sequence[Purchase] = (),
    vouchers: Sequence[Voucher] = (),
    default_currency: Currency = BASE_CURRENCY,
) -> list[DebtVector]:
    """One debt vector per entity, in entity order."""
    return [
        aggregate_debt(
            entity,
            entity_type,
            normalizer,
            sales=sales,
            purchases=purchases,
            vouchers=vouchers,
            default_currency=default_currency,
        )
        for entity in entities
    ]


def debt_board(
    entities: Iterable[Entity],
    entity_type: EntityType,
    normalizer: CurrencyNormalizer,
    sales: Sequence[Sale] = (),
    purchases: Sequence[Purchase] = (),
    vouchers: Sequence[Voucher] = (),
    name_filter: Optional[str] = None,
    default_currency: Currency = BASE_CURRENCY,
) -> DebtBoard:
    """
    Debt vectors sorted by base-currency total, largest first.

    `name_filter` keeps entities whose name contains it (case-insensitive).
    """
    if name_filter:
        needle = name_filter.lower()
        entities = [e for e in entities if needle in e.name.lower()]

    vectors = aggregate_debts(
        entities,
        entity_type,
        normalizer,
        sales=sales,
        purchases=purchases,
        vouchers=vouchers,
        default_currency=default_currency,
    )
    vectors.sort(key=lambda v: v.total_base, reverse=True)

    return DebtBoard(
        entity_type=entity_type,
        vectors=tuple(vectors),
        grand_total=sum((v.total_base for v in vectors), Decimal("0")),
    )


def classify_aging(
    last_activity_date: Optional[date],
    today: date,
    thresholds: AgingThresholds = AgingThresholds(),
) -> AgingStatus:
    """
    Bucket a debt by days since its last activity.

    No recorded activity counts as zero days.
    """
    days = (today - last_activity_date).days if last_activity_date else 0
    if days < thresholds.new_days:
        bucket = AgingBucket.NEW
    elif days < thresholds.active_days:
        bucket = AgingBucket.ACTIVE
    elif days < thresholds.overdue_days:
        bucket = AgingBucket.OVERDUE
    else:
        bucket = AgingBucket.STALE
    return AgingStatus(bucket=bucket, days=days)
