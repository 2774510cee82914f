"""
Source Record Models

These are the records handed to the engine by the persistence/sync layer:
customers and suppliers (with their opening balances) and the four
append-only transaction streams - sales, purchases, cash vouchers and
expenses.

DESIGN DECISION: Transactions form a closed tagged union discriminated by
`kind`. The unifier matches on the kind exhaustively instead of renaming
fields per source type.

CRITICAL: Records are frozen. The engine never mutates what it is given.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agency_ledger.models.money import BASE_CURRENCY, Currency, Money


# =============================================================================
# ENUMS
# =============================================================================

class PaymentStatus(str, Enum):
    """
    How a sale or purchase was settled.

    Only CREDIT transactions create debt. CASH settles immediately.
    """
    CASH = "cash"
    CREDIT = "credit"


class VoucherKind(str, Enum):
    """Cash voucher direction."""
    RECEIPT = "receipt"  # Money received from the entity
    PAYMENT = "payment"  # Money paid to the entity


class EntityType(str, Enum):
    """Counterparty kind."""
    CUSTOMER = "customer"
    SUPPLIER = "supplier"


def _as_utc(value: datetime) -> datetime:
    """Naive timestamps are UTC instants."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =============================================================================
# ENTITIES
# =============================================================================

class Entity(BaseModel):
    """
    A customer or supplier.

    The opening balance represents debt that predates the system's own
    history. Positive means the entity owes the agency.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = None
    address: Optional[str] = None

    opening_balance: Optional[Decimal] = Field(
        default=None,
        description="Balance carried over from before the system's history"
    )
    opening_balance_currency: Optional[Currency] = None
    opening_balance_date: Optional[date] = Field(
        default=None,
        description="User-supplied backdate for the opening balance"
    )
    opening_balance_note: Optional[str] = Field(default=None, max_length=500)

    def opening_money(
        self,
        default_currency: Currency = BASE_CURRENCY,
    ) -> Optional[Money]:
        """Opening balance as Money, or None when absent or zero."""
        if not self.opening_balance:
            return None
        return Money(
            amount=self.opening_balance,
            currency=self.opening_balance_currency or default_currency,
        )


class Customer(Entity):
    """A customer of the agency."""


class Supplier(Entity):
    """A supplier to the agency."""

    category: Optional[str] = None


# =============================================================================
# TRANSACTIONS
# =============================================================================

class _Transaction(BaseModel):
    """Fields shared by every transaction kind."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    timestamp: datetime = Field(
        ...,
        description="When the transaction was recorded (UTC)"
    )
    currency: Currency = Field(default=BASE_CURRENCY)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return _as_utc(v)


class Sale(_Transaction):
    """A sale to a customer, or a customer return when `is_return` is set."""

    kind: Literal["sale"] = "sale"
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    item_type: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=0)
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    total: Decimal = Field(..., ge=0)
    status: PaymentStatus = PaymentStatus.CASH
    is_return: bool = False

    @property
    def money(self) -> Money:
        return Money(amount=self.total, currency=self.currency)


class Purchase(_Transaction):
    """A purchase from a supplier, or a return to the supplier."""

    kind: Literal["purchase"] = "purchase"
    supplier_id: Optional[str] = None
    supplier_name: Optional[str] = None
    item_type: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=0)
    cost_price: Decimal = Field(default=Decimal("0"), ge=0)
    total_cost: Decimal = Field(..., ge=0)
    status: PaymentStatus = PaymentStatus.CASH
    is_return: bool = False

    @property
    def money(self) -> Money:
        return Money(amount=self.total_cost, currency=self.currency)


class Voucher(_Transaction):
    """
    A cash voucher against a customer or supplier.

    Vouchers always settle debt, whatever the entity type.
    """

    kind: Literal["voucher"] = "voucher"
    entity_id: str = Field(..., min_length=1)
    entity_type: EntityType
    entity_name: Optional[str] = None
    voucher_kind: VoucherKind
    amount: Decimal = Field(..., ge=0)

    @property
    def money(self) -> Money:
        return Money(amount=self.amount, currency=self.currency)


class Expense(_Transaction):
    """An operating expense. Not attributed to any entity."""

    kind: Literal["expense"] = "expense"
    category: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0)
    description: Optional[str] = None

    @property
    def money(self) -> Money:
        return Money(amount=self.amount, currency=self.currency)


class OpeningBalance(BaseModel):
    """
    Synthetic transaction built from an entity's opening balance.

    It always sorts first in a statement: it stands for everything that
    happened before the recorded history began.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["opening_balance"] = "opening_balance"
    entity_id: str
    money: Money
    effective_date: date = Field(default=date(1970, 1, 1))
    note: Optional[str] = None

    @classmethod
    def from_entity(
        cls,
        entity: Entity,
        default_currency: Currency = BASE_CURRENCY,
    ) -> Optional["OpeningBalance"]:
        money = entity.opening_money(default_currency)
        if money is None:
            return None
        return cls(
            entity_id=entity.id,
            money=money,
            effective_date=entity.opening_balance_date or date(1970, 1, 1),
            note=entity.opening_balance_note,
        )


Transaction = Annotated[
    Union[Sale, Purchase, Voucher, Expense, OpeningBalance],
    Field(discriminator="kind"),
]
