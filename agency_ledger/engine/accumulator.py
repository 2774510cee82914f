"""
Balance Accumulator

Walks unified statement rows in order and attaches a running balance in the
base currency to each one.

GUARANTEE: the final running balance equals the sum of
(debit_base - credit_base) over all rows. Amounts are Decimal and nothing is
rounded here, so the result does not depend on how the sum is chunked.

Each row is converted at the rate published on its own calendar day
(historical valuation). Debt dashboards use the current rate instead; see
`agency_ledger.engine.debts`.
"""

from decimal import Decimal
from typing import Iterable, Sequence

from agency_ledger.engine.currency import CurrencyNormalizer
from agency_ledger.engine.unifier import unify_entity
from agency_ledger.models.ledger import LedgerEntry, Statement, UnifiedEntry
from agency_ledger.models.money import BASE_CURRENCY, Currency
from agency_ledger.models.records import Entity, EntityType, Purchase, Sale, Voucher


def accumulate(
    entries: Iterable[UnifiedEntry],
    normalizer: CurrencyNormalizer,
) -> tuple[LedgerEntry, ...]:
    """Attach base-currency running balances to ordered statement rows."""
    running = Decimal("0")
    result = []
    for entry in entries:
        debit_base = normalizer.to_base(entry.debit.amount, entry.debit.currency, entry.when)
        credit_base = normalizer.to_base(entry.credit.amount, entry.credit.currency, entry.when)
        running += debit_base - credit_base
        result.append(
            LedgerEntry(
                **dict(entry),
                rate_used=normalizer.rate_for(entry.debit.currency, entry.when),
                debit_base=debit_base,
                credit_base=credit_base,
                running_balance=running,
            )
        )
    return tuple(result)


def final_balance(entries: Sequence[LedgerEntry]) -> Decimal:
    return entries[-1].running_balance if entries else Decimal("0")


def build_statement(
    entity: Entity,
    entity_type: EntityType,
    normalizer: CurrencyNormalizer,
    sales: Sequence[Sale] = (),
    purchases: Sequence[Purchase] = (),
    vouchers: Sequence[Voucher] = (),
    default_currency: Currency = BASE_CURRENCY,
) -> Statement:
    """
    Full statement for one entity: unify, accumulate, summarise.

    The original-currency totals let the presentation layer show the
    statement without any conversion.
    """
    unified = unify_entity(
        entity,
        entity_type,
        sales=sales,
        purchases=purchases,
        vouchers=vouchers,
        default_currency=default_currency,
        tz=normalizer.tz,
    )
    entries = accumulate(unified, normalizer)

    debits = {currency: Decimal("0") for currency in Currency}
    credits = {currency: Decimal("0") for currency in Currency}
    for entry in entries:
        debits[entry.debit.currency] += entry.debit.amount
        credits[entry.credit.currency] += entry.credit.amount

    return Statement(
        entity_id=entity.id,
        entity_type=entity_type,
        entity_name=entity.name,
        entries=entries,
        final_balance=final_balance(entries),
        original_debits=debits,
        original_credits=credits,
    )
