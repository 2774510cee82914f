"""
Data Models Package

Pydantic models for everything the ledger engine consumes and produces.
"""

from agency_ledger.models.money import (
    BASE_CURRENCY,
    Currency,
    ExchangeRateSnapshot,
    Money,
    RateHistory,
)
from agency_ledger.models.records import (
    Customer,
    Entity,
    EntityType,
    Expense,
    OpeningBalance,
    PaymentStatus,
    Purchase,
    Sale,
    Supplier,
    Transaction,
    Voucher,
    VoucherKind,
)
from agency_ledger.models.ledger import (
    AgingBucket,
    AgingStatus,
    AgingThresholds,
    BalanceSide,
    DailyClosing,
    DebtBoard,
    DebtVector,
    InventoryLevel,
    ItemPerformance,
    LedgerEntry,
    MovementDirection,
    PeriodReport,
    Statement,
    StockMovement,
    UnifiedEntry,
)
from agency_ledger.models.snapshot import LedgerSnapshot
from agency_ledger.models.integrity import IntegrityIssue, IntegrityReport
from agency_ledger.models.events import (
    EngineEvent,
    EngineEventBuilder,
    EngineEventSeverity,
    EngineEventType,
)

__all__ = [
    # Money
    "BASE_CURRENCY",
    "Currency",
    "ExchangeRateSnapshot",
    "Money",
    "RateHistory",
    # Source records
    "Customer",
    "Entity",
    "EntityType",
    "Expense",
    "OpeningBalance",
    "PaymentStatus",
    "Purchase",
    "Sale",
    "Supplier",
    "Transaction",
    "Voucher",
    "VoucherKind",
    # Derived
    "AgingBucket",
    "AgingStatus",
    "AgingThresholds",
    "BalanceSide",
    "DailyClosing",
    "DebtBoard",
    "DebtVector",
    "InventoryLevel",
    "ItemPerformance",
    "LedgerEntry",
    "MovementDirection",
    "PeriodReport",
    "Statement",
    "StockMovement",
    "UnifiedEntry",
    # Snapshot
    "LedgerSnapshot",
    # Integrity
    "IntegrityIssue",
    "IntegrityReport",
    # Events
    "EngineEvent",
    "EngineEventBuilder",
    "EngineEventSeverity",
    "EngineEventType",
]
