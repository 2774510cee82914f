"""
Derived Ledger Models

Everything in this module is computed by the engine from a snapshot of
source records. None of it is stored.

CRITICAL: Derived values belong to the query that produced them. Never
cache them keyed only by entity id - any change to the transaction
collections invalidates all of them.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from agency_ledger.models.money import BASE_CURRENCY, Currency, Money
from agency_ledger.models.records import EntityType


# =============================================================================
# STATEMENTS
# =============================================================================

class UnifiedEntry(BaseModel):
    """
    One row of a per-entity statement before balances are applied.

    Exactly one of debit/credit is non-zero for every row produced by the
    unifier.
    """
    model_config = ConfigDict(frozen=True)

    entry_date: date
    when: Union[datetime, date] = Field(
        ...,
        description="Original timestamp, or the calendar date for opening balances",
    )
    description: str
    reference: str = Field(..., description="Source kind: sale, purchase, voucher, opening_balance")
    source_id: Optional[str] = None
    debit: Money
    credit: Money


class LedgerEntry(UnifiedEntry):
    """A statement row with its base-currency running balance."""

    rate_used: Decimal = Field(..., description="Rate applied to convert this row")
    debit_base: Decimal
    credit_base: Decimal
    running_balance: Decimal = Field(..., description="Cumulative balance in base currency")


class BalanceSide(str, Enum):
    """Who owes whom, after the last statement row."""
    DEBTOR = "debtor"      # Entity owes the agency
    CREDITOR = "creditor"  # Agency owes the entity
    SETTLED = "settled"


class Statement(BaseModel):
    """A full per-entity statement."""
    model_config = ConfigDict(frozen=True)

    entity_id: str
    entity_type: EntityType
    entity_name: Optional[str] = None
    entries: tuple[LedgerEntry, ...] = Field(default_factory=tuple)
    final_balance: Decimal = Decimal("0")

    # Per-currency totals without conversion ("original currency" view)
    original_debits: dict[Currency, Decimal] = Field(default_factory=dict)
    original_credits: dict[Currency, Decimal] = Field(default_factory=dict)

    @property
    def side(self) -> BalanceSide:
        if self.final_balance > 0:
            return BalanceSide.DEBTOR
        if self.final_balance < 0:
            return BalanceSide.CREDITOR
        return BalanceSide.SETTLED

    @property
    def original_balances(self) -> dict[Currency, Decimal]:
        """Net debit minus credit per currency, unconverted."""
        return {
            currency: self.original_debits.get(currency, Decimal("0"))
            - self.original_credits.get(currency, Decimal("0"))
            for currency in Currency
        }


# =============================================================================
# DEBTS
# =============================================================================

class DebtVector(BaseModel):
    """
    Point-in-time outstanding balance of one entity, per currency.

    Balances are never summed across currencies. `total_base` is a
    present-day valuation for sorting and display only.
    """
    model_config = ConfigDict(frozen=True)

    entity_id: str
    entity_type: EntityType
    entity_name: Optional[str] = None
    balances: dict[Currency, Decimal] = Field(
        default_factory=lambda: {c: Decimal("0") for c in Currency}
    )
    last_activity_date: Optional[date] = None
    total_base: Decimal = Field(
        default=Decimal("0"),
        description="Sum of balances converted at the current rate"
    )

    def balance(self, currency: Currency) -> Decimal:
        return self.balances.get(currency, Decimal("0"))


class DebtBoard(BaseModel):
    """All debt vectors of one entity type, largest first."""
    model_config = ConfigDict(frozen=True)

    entity_type: EntityType
    vectors: tuple[DebtVector, ...] = Field(default_factory=tuple)
    grand_total: Decimal = Decimal("0")
    currency: Currency = BASE_CURRENCY


class AgingBucket(str, Enum):
    """How long since an entity's last debt activity."""
    NEW = "new"
    ACTIVE = "active"
    OVERDUE = "overdue"
    STALE = "stale"


class AgingThresholds(BaseModel):
    """Upper bounds (exclusive, in days) of the first three buckets."""
    model_config = ConfigDict(frozen=True)

    new_days: int = Field(default=3, ge=0)
    active_days: int = Field(default=15, ge=0)
    overdue_days: int = Field(default=30, ge=0)


class AgingStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    bucket: AgingBucket
    days: int


# =============================================================================
# INVENTORY
# =============================================================================

class InventoryLevel(BaseModel):
    """
    Stock of one item type.

    `on_hand` is clamped at zero. `inbound - outbound` can be negative when
    a sale was recorded before its purchase.
    """
    model_config = ConfigDict(frozen=True)

    item_type: str
    inbound: int = 0
    outbound: int = 0
    on_hand: int = Field(default=0, ge=0)
    turnover_ratio: Decimal = Field(default=Decimal("0"), ge=0, le=1)
    is_low_stock: bool = False

    @property
    def raw_balance(self) -> int:
        return self.inbound - self.outbound


class MovementDirection(str, Enum):
    IN = "in"
    OUT = "out"


class StockMovement(BaseModel):
    """One inventory movement, for the per-item movement log."""
    model_config = ConfigDict(frozen=True)

    source_id: str
    timestamp: datetime
    description: str
    quantity: int
    direction: MovementDirection


# =============================================================================
# REPORTS
# =============================================================================

class ItemPerformance(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_type: str
    quantity_sold: int = 0
    revenue: Decimal = Decimal("0")
    cost: Decimal = Decimal("0")

    @property
    def profit(self) -> Decimal:
        return self.revenue - self.cost


class PeriodReport(BaseModel):
    """Profit and loss over a civil-date range, in base currency."""
    model_config = ConfigDict(frozen=True)

    date_from: date
    date_to: date
    gross_sales: Decimal = Decimal("0")
    cost_of_goods: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    cash_sales: Decimal = Decimal("0")
    items: tuple[ItemPerformance, ...] = Field(default_factory=tuple)

    @property
    def net_profit(self) -> Decimal:
        return self.gross_sales - self.cost_of_goods - self.total_expenses

    @property
    def collection_rate(self) -> Decimal:
        """Cash sales as a percentage of gross sales."""
        if self.gross_sales <= 0:
            return Decimal("0")
        return self.cash_sales / self.gross_sales * 100


class DailyClosing(BaseModel):
    """Expected cash-drawer position for one civil day, in base currency."""
    model_config = ConfigDict(frozen=True)

    day: date
    cash_in: Decimal = Decimal("0")
    cash_out: Decimal = Decimal("0")
    credit_sales: Decimal = Decimal("0")
    sales_count: int = 0
    purchases_count: int = 0
    expenses_count: int = 0
    vouchers_count: int = 0

    @property
    def expected_cash(self) -> Decimal:
        return self.cash_in - self.cash_out

    def difference(self, actual_cash: Decimal) -> Decimal:
        """Counted cash minus expected cash."""
        return actual_cash - self.expected_cash
