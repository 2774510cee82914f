"""
Transaction Unifier

Merges an entity's sales or purchases, its vouchers and its opening balance
into one date-ordered sequence of statement rows.

Sign conventions (positive balance = entity owes the agency):

    customer  sale            debit   (credit when returned)
              receipt         credit
              payment         debit
    supplier  purchase        credit  (debit when returned)
              payment         debit
              receipt         credit
    both      opening balance debit when positive, credit when negative

ORDERING: the opening balance is always first. Everything else is sorted by
timestamp; rows with equal timestamps keep their source order (sales or
purchases before vouchers, each in the order supplied).
"""

from typing import Iterable, Optional, Sequence
from zoneinfo import ZoneInfo

from agency_ledger.engine.currency import civil_date
from agency_ledger.models.ledger import UnifiedEntry
from agency_ledger.models.money import BASE_CURRENCY, Currency, Money
from agency_ledger.models.records import (
    Entity,
    EntityType,
    OpeningBalance,
    Purchase,
    Sale,
    Transaction,
    Voucher,
    VoucherKind,
)


def _debit(money: Money) -> tuple[Money, Money]:
    return money, Money.zero(money.currency)


def _credit(money: Money) -> tuple[Money, Money]:
    return Money.zero(money.currency), money


def _trade_description(item_type: str, quantity: int, is_return: bool) -> str:
    prefix = "Return: " if is_return else ""
    return f"{prefix}{item_type} ({quantity})"


def _opening_entry(opening: OpeningBalance) -> UnifiedEntry:
    money = opening.money
    if money.amount > 0:
        debit, credit = _debit(money)
    else:
        debit, credit = _credit(money.negated())
    return UnifiedEntry(
        entry_date=opening.effective_date,
        when=opening.effective_date,
        description=opening.note or "Opening balance",
        reference=opening.kind,
        source_id=opening.entity_id,
        debit=debit,
        credit=credit,
    )


def _sale_entry(sale: Sale, tz: Optional[ZoneInfo] = None) -> UnifiedEntry:
    debit, credit = _credit(sale.money) if sale.is_return else _debit(sale.money)
    return UnifiedEntry(
        entry_date=civil_date(sale.timestamp, tz),
        when=sale.timestamp,
        description=_trade_description(sale.item_type, sale.quantity, sale.is_return),
        reference=sale.kind,
        source_id=sale.id,
        debit=debit,
        credit=credit,
    )


def _purchase_entry(purchase: Purchase, tz: Optional[ZoneInfo] = None) -> UnifiedEntry:
    money = purchase.money
    debit, credit = _debit(money) if purchase.is_return else _credit(money)
    return UnifiedEntry(
        entry_date=civil_date(purchase.timestamp, tz),
        when=purchase.timestamp,
        description=_trade_description(purchase.item_type, purchase.quantity, purchase.is_return),
        reference=purchase.kind,
        source_id=purchase.id,
        debit=debit,
        credit=credit,
    )


def _voucher_entry(voucher: Voucher, tz: Optional[ZoneInfo] = None) -> UnifiedEntry:
    # Receipts reduce what the entity owes, payments increase it, for both
    # customers and suppliers.
    if voucher.voucher_kind == VoucherKind.RECEIPT:
        debit, credit = _credit(voucher.money)
        default_description = "Cash receipt"
    else:
        debit, credit = _debit(voucher.money)
        default_description = "Cash payment"
    return UnifiedEntry(
        entry_date=civil_date(voucher.timestamp, tz),
        when=voucher.timestamp,
        description=voucher.notes or default_description,
        reference=voucher.kind,
        source_id=voucher.id,
        debit=debit,
        credit=credit,
    )


def statement_row(record: Transaction, tz: Optional[ZoneInfo] = None) -> UnifiedEntry:
    """
    Statement row for one transaction, dispatched on its `kind`.

    Raises:
        ValueError: For kinds that never appear on a statement (expenses)
    """
    if record.kind == "sale":
        return _sale_entry(record, tz)
    if record.kind == "purchase":
        return _purchase_entry(record, tz)
    if record.kind == "voucher":
        return _voucher_entry(record, tz)
    if record.kind == "opening_balance":
        return _opening_entry(record)
    raise ValueError(f"'{record.kind}' records have no statement row")


def unify(
    entity_id: str,
    entity_type: EntityType,
    sales: Iterable[Sale] = (),
    purchases: Iterable[Purchase] = (),
    vouchers: Iterable[Voucher] = (),
    opening_balance: Optional[OpeningBalance] = None,
    tz: Optional[ZoneInfo] = None,
) -> tuple[UnifiedEntry, ...]:
    """
    Build the ordered statement rows for one entity.

    Records belonging to other entities are ignored, so callers may pass the
    full collections.
    """
    records: list[Transaction] = []

    if entity_type == EntityType.CUSTOMER:
        records.extend(sale for sale in sales if sale.customer_id == entity_id)
    else:
        records.extend(p for p in purchases if p.supplier_id == entity_id)

    records.extend(
        voucher for voucher in vouchers
        if voucher.entity_id == entity_id and voucher.entity_type == entity_type
    )

    # list.sort is stable: equal timestamps keep insertion order
    records.sort(key=lambda record: record.timestamp)

    if opening_balance is not None:
        records.insert(0, opening_balance)
    return tuple(statement_row(record, tz) for record in records)


def unify_entity(
    entity: Entity,
    entity_type: EntityType,
    sales: Sequence[Sale] = (),
    purchases: Sequence[Purchase] = (),
    vouchers: Sequence[Voucher] = (),
    default_currency: Currency = BASE_CURRENCY,
    tz: Optional[ZoneInfo] = None,
) -> tuple[UnifiedEntry, ...]:
    """Like `unify`, taking the opening balance from the entity record."""
    opening = OpeningBalance.from_entity(entity, default_currency)
    return unify(
        entity.id,
        entity_type,
        sales=sales,
        purchases=purchases,
        vouchers=vouchers,
        opening_balance=opening,
        tz=tz,
    )
