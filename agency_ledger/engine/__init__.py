"""
Ledger Engine Package

Pure functions over immutable snapshots of source records. Nothing in this
package performs I/O or keeps state between calls.
"""

from agency_ledger.engine.accumulator import accumulate, build_statement, final_balance
from agency_ledger.engine.currency import CurrencyNormalizer, civil_date
from agency_ledger.engine.debts import (
    aggregate_debt,
    aggregate_debts,
    classify_aging,
    debt_board,
)
from agency_ledger.engine.inventory import (
    discover_item_types,
    inventory,
    inventory_levels,
    stock_movements,
)
from agency_ledger.engine.reports import daily_closing, period_report
from agency_ledger.engine.unifier import statement_row, unify, unify_entity

__all__ = [
    # Currency
    "CurrencyNormalizer",
    "civil_date",
    # Statements
    "statement_row",
    "unify",
    "unify_entity",
    "accumulate",
    "build_statement",
    "final_balance",
    # Debts
    "aggregate_debt",
    "aggregate_debts",
    "classify_aging",
    "debt_board",
    # Inventory
    "discover_item_types",
    "inventory",
    "inventory_levels",
    "stock_movements",
    # Reports
    "daily_closing",
    "period_report",
]
