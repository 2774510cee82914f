"""
Snapshot Integrity Checks

The engine is total: it never fails on business data. Several of its
policies are silent on purpose:

- transactions pointing at an unknown customer/supplier are left out of
  every aggregate
- negative stock is clamped to zero
- a foreign-currency transaction on a day without a published rate is
  converted at the current rate

This validator makes those cases visible. It only REPORTS - it never
changes what the engine computes.
"""

from typing import Optional
from zoneinfo import ZoneInfo

from agency_ledger.engine.currency import CurrencyNormalizer
from agency_ledger.engine.inventory import inventory_levels
from agency_ledger.models.integrity import IntegrityIssue, IntegrityReport
from agency_ledger.models.money import BASE_CURRENCY
from agency_ledger.models.records import EntityType
from agency_ledger.models.snapshot import LedgerSnapshot


class SnapshotValidator:
    """
    Checks a snapshot for orphaned records, hidden negative stock and
    missing historical rates.
    """

    def __init__(self, tz: Optional[ZoneInfo] = None):
        """
        Args:
            tz: Reporting timezone used to find a transaction's calendar day.
        """
        self._tz = tz

    def validate(self, snapshot: LedgerSnapshot) -> IntegrityReport:
        issues = []
        issues.extend(self._check_orphans(snapshot))
        issues.extend(self._check_negative_stock(snapshot))
        issues.extend(self._check_missing_rates(snapshot))
        return IntegrityReport(snapshot_version=snapshot.version, issues=issues)

    def _check_orphans(self, snapshot: LedgerSnapshot) -> list[IntegrityIssue]:
        """Transactions whose entity id matches no known entity."""
        issues = []
        customer_ids = {c.id for c in snapshot.customers}
        supplier_ids = {s.id for s in snapshot.suppliers}

        # Sales without a customer id are walk-in sales, not orphans
        for sale in snapshot.sales:
            if sale.customer_id and sale.customer_id not in customer_ids:
                issues.append(IntegrityIssue(
                    field="sales",
                    issue_type="orphaned",
                    message=f"Sale {sale.id} references unknown customer {sale.customer_id}",
                    severity="warning",
                    record_id=sale.id,
                ))

        for purchase in snapshot.purchases:
            if purchase.supplier_id and purchase.supplier_id not in supplier_ids:
                issues.append(IntegrityIssue(
                    field="purchases",
                    issue_type="orphaned",
                    message=f"Purchase {purchase.id} references unknown supplier {purchase.supplier_id}",
                    severity="warning",
                    record_id=purchase.id,
                ))

        for voucher in snapshot.vouchers:
            known = customer_ids if voucher.entity_type == EntityType.CUSTOMER else supplier_ids
            if voucher.entity_id not in known:
                issues.append(IntegrityIssue(
                    field="vouchers",
                    issue_type="orphaned",
                    message=(
                        f"Voucher {voucher.id} references unknown "
                        f"{voucher.entity_type.value} {voucher.entity_id}"
                    ),
                    severity="warning",
                    record_id=voucher.id,
                ))

        return issues

    def _check_negative_stock(self, snapshot: LedgerSnapshot) -> list[IntegrityIssue]:
        """Item types whose outflow exceeds their inflow."""
        issues = []
        levels = inventory_levels(snapshot.item_types, snapshot.sales, snapshot.purchases)
        for level in levels:
            if level.raw_balance < 0:
                issues.append(IntegrityIssue(
                    field="inventory",
                    issue_type="negative_stock",
                    message=(
                        f"{level.item_type}: {level.outbound} out vs {level.inbound} in; "
                        f"reported stock clamped to 0"
                    ),
                    severity="warning",
                    record_id=level.item_type,
                ))
        return issues

    def _check_missing_rates(self, snapshot: LedgerSnapshot) -> list[IntegrityIssue]:
        """Calendar days with foreign-currency activity but no published rate."""
        normalizer = CurrencyNormalizer(snapshot.rate_history, tz=self._tz)
        missing_days = set()
        transactions = (
            *snapshot.sales, *snapshot.purchases, *snapshot.vouchers, *snapshot.expenses,
        )
        for record in transactions:
            if record.currency == BASE_CURRENCY:
                continue
            if not normalizer.has_rate_on(record.timestamp):
                missing_days.add(normalizer.civil_date(record.timestamp))

        return [
            IntegrityIssue(
                field="rate_history",
                issue_type="missing_rate",
                message=f"No rate published on {day.isoformat()}; current rate used",
                severity="info",
                record_id=day.isoformat(),
            )
            for day in sorted(missing_days)
        ]
