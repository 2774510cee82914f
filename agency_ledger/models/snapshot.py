"""
Ledger Snapshot Model

An immutable, versioned copy of every collection the engine reads. A
snapshot is what the persistence/sync layer hands over for one round of
computation.

CRITICAL: `version` must change whenever any collection changes. Derived
values are cached against it.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from agency_ledger.models.money import RateHistory
from agency_ledger.models.records import (
    Customer,
    Entity,
    EntityType,
    Expense,
    Purchase,
    Sale,
    Supplier,
    Voucher,
)


class LedgerSnapshot(BaseModel):
    """All source records at one point in time."""
    model_config = ConfigDict(frozen=True)

    version: str = Field(..., min_length=1)

    customers: tuple[Customer, ...] = Field(default_factory=tuple)
    suppliers: tuple[Supplier, ...] = Field(default_factory=tuple)
    sales: tuple[Sale, ...] = Field(default_factory=tuple)
    purchases: tuple[Purchase, ...] = Field(default_factory=tuple)
    vouchers: tuple[Voucher, ...] = Field(default_factory=tuple)
    expenses: tuple[Expense, ...] = Field(default_factory=tuple)
    rate_history: RateHistory = Field(default_factory=RateHistory)

    item_types: Optional[tuple[str, ...]] = Field(
        default=None,
        description="Known item types; None means discover them from the records"
    )

    @property
    def record_count(self) -> int:
        return (
            len(self.customers) + len(self.suppliers) + len(self.sales)
            + len(self.purchases) + len(self.vouchers) + len(self.expenses)
        )

    def customer(self, customer_id: str) -> Optional[Customer]:
        return next((c for c in self.customers if c.id == customer_id), None)

    def supplier(self, supplier_id: str) -> Optional[Supplier]:
        return next((s for s in self.suppliers if s.id == supplier_id), None)

    def entity(self, entity_id: str, entity_type: EntityType) -> Optional[Entity]:
        if entity_type == EntityType.CUSTOMER:
            return self.customer(entity_id)
        return self.supplier(entity_id)

    def entities(self, entity_type: EntityType) -> tuple[Entity, ...]:
        if entity_type == EntityType.CUSTOMER:
            return self.customers
        return self.suppliers
