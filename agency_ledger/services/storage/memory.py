"""
In-Memory Snapshot Source

Holds collections in process memory. Used by tests and by callers that
already have their records loaded.

Every mutation bumps the version, so cached results computed from an older
snapshot are never reused.
"""

from typing import Iterable, Optional

from agency_ledger.models.money import ExchangeRateSnapshot, RateHistory
from agency_ledger.models.records import (
    Customer,
    Expense,
    Purchase,
    Sale,
    Supplier,
    Voucher,
)
from agency_ledger.models.snapshot import LedgerSnapshot
from agency_ledger.services.storage.interface import LedgerSnapshotSource, NotFoundError


class InMemorySnapshotSource(LedgerSnapshotSource):
    """
    Snapshot source backed by Python lists.

    Collections are kept newest-first where the sync layer delivers them
    that way (rates); transactions are kept in insertion order.
    """

    def __init__(
        self,
        customers: Iterable[Customer] = (),
        suppliers: Iterable[Supplier] = (),
        sales: Iterable[Sale] = (),
        purchases: Iterable[Purchase] = (),
        vouchers: Iterable[Voucher] = (),
        expenses: Iterable[Expense] = (),
        rates: Iterable[ExchangeRateSnapshot] = (),
        item_types: Optional[Iterable[str]] = None,
    ):
        self._customers = list(customers)
        self._suppliers = list(suppliers)
        self._sales = list(sales)
        self._purchases = list(purchases)
        self._vouchers = list(vouchers)
        self._expenses = list(expenses)
        self._rates = list(rates)
        self._item_types = list(item_types) if item_types is not None else None
        self._revision = 0

    @property
    def version(self) -> str:
        return f"mem-{self._revision}"

    def _bump(self) -> None:
        self._revision += 1

    async def load_snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            version=self.version,
            customers=tuple(self._customers),
            suppliers=tuple(self._suppliers),
            sales=tuple(self._sales),
            purchases=tuple(self._purchases),
            vouchers=tuple(self._vouchers),
            expenses=tuple(self._expenses),
            rate_history=RateHistory.of(self._rates),
            item_types=tuple(self._item_types) if self._item_types is not None else None,
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_customer(self, customer: Customer) -> None:
        self._customers.append(customer)
        self._bump()

    def add_supplier(self, supplier: Supplier) -> None:
        self._suppliers.append(supplier)
        self._bump()

    def add_sale(self, sale: Sale) -> None:
        self._sales.append(sale)
        self._bump()

    def add_purchase(self, purchase: Purchase) -> None:
        self._purchases.append(purchase)
        self._bump()

    def add_voucher(self, voucher: Voucher) -> None:
        self._vouchers.append(voucher)
        self._bump()

    def add_expense(self, expense: Expense) -> None:
        self._expenses.append(expense)
        self._bump()

    def add_rate(self, snapshot: ExchangeRateSnapshot) -> None:
        """Publish a new rate. It becomes the current rate."""
        self._rates.insert(0, snapshot)
        self._bump()

    def add_item_type(self, item_type: str) -> None:
        if self._item_types is None:
            self._item_types = []
        if item_type not in self._item_types:
            self._item_types.append(item_type)
            self._bump()

    def remove_transaction(self, transaction_id: str) -> None:
        """
        Remove a sale, purchase, voucher or expense by id.

        Raises:
            NotFoundError: If no transaction has this id
        """
        for collection in (self._sales, self._purchases, self._vouchers, self._expenses):
            for index, record in enumerate(collection):
                if record.id == transaction_id:
                    del collection[index]
                    self._bump()
                    return
        raise NotFoundError(f"Transaction {transaction_id} not found")
