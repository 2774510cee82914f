"""
Agency Ledger - Source Package

The accounting core of a small trading agency: customer and supplier
statements, per-currency debts, inventory levels and reports, computed
from immutable snapshots of sales, purchases, vouchers and expenses.

DESIGN PRINCIPLES:
1. Money is Decimal, and always carries its currency
2. Derived figures are computed, never stored
3. The engine is pure: no I/O, no clock, no ambient settings
4. Silent policies (rate fallback, stock clamping) are logged and checkable
5. Snapshot source is swappable
"""

__version__ = "1.0.0"
__author__ = "Agency Ledger Team"
