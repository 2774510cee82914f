"""
Main Orchestrator for Agency Ledger

Ties the snapshot source, the pure engine and the engine logger together.

DESIGN DECISION: Every call pulls a fresh snapshot from the source and
computes from it. Results are memoised against the snapshot VERSION, so a
repeated call on an unchanged snapshot is free, and any change to any
collection invalidates every cached figure at once. Nothing is ever cached
by entity id alone. The memo holds at most `result_cache_size` results and
evicts the least recently used one when full.
"""

from collections import OrderedDict
from datetime import date
from typing import Any, Callable, Optional
from uuid import UUID

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from agency_ledger.audit import EngineLogger, create_correlation_id
from agency_ledger.config import LedgerSettings, get_settings
from agency_ledger.engine import (
    CurrencyNormalizer,
    build_statement,
    classify_aging,
    daily_closing,
    debt_board,
    inventory_levels,
    period_report,
    stock_movements,
)
from agency_ledger.models.integrity import IntegrityReport
from agency_ledger.models.ledger import (
    AgingStatus,
    DailyClosing,
    DebtBoard,
    DebtVector,
    InventoryLevel,
    PeriodReport,
    Statement,
    StockMovement,
)
from agency_ledger.models.money import BASE_CURRENCY
from agency_ledger.models.records import EntityType
from agency_ledger.models.snapshot import LedgerSnapshot
from agency_ledger.services.storage import (
    ConnectionError,
    InMemorySnapshotSource,
    LedgerSnapshotSource,
    NotFoundError,
)
from agency_ledger.validation import SnapshotValidator


class LedgerService:
    """
    Entry point for the presentation layer.

    Flow for every query:
    1. Load snapshot → retried on connection failures
    2. Look up (version, query) in the memo → return if present
    3. Compute with the pure engine
    4. Log the result
    """

    def __init__(
        self,
        source: LedgerSnapshotSource,
        settings: Optional[LedgerSettings] = None,
        logger: Optional[EngineLogger] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self._source = source
        self._settings = settings or get_settings()
        self._logger = logger or EngineLogger()
        self._today = today or date.today
        self._validator = SnapshotValidator(tz=self._settings.timezone)

        self._snapshot: Optional[LedgerSnapshot] = None
        self._memo: OrderedDict[tuple, Any] = OrderedDict()

    @property
    def logger(self) -> EngineLogger:
        return self._logger

    @property
    def snapshot(self) -> Optional[LedgerSnapshot]:
        """The snapshot used by the last query."""
        return self._snapshot

    # -------------------------------------------------------------------------
    # Snapshot handling
    # -------------------------------------------------------------------------

    async def refresh(self, correlation_id: Optional[UUID] = None) -> LedgerSnapshot:
        """
        Load the current snapshot from the source.

        Raises:
            ConnectionError: If the source stays unreachable after all retries
            StorageError: For any other storage failure (not retried)
        """
        attempts = self._settings.snapshot_retry_attempts
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(attempts),
                wait=wait_exponential(
                    multiplier=1,
                    min=self._settings.snapshot_retry_min_wait,
                    max=self._settings.snapshot_retry_max_wait,
                ),
                retry=retry_if_exception_type(ConnectionError),
                reraise=True,
            ):
                with attempt:
                    snapshot = await self._source.load_snapshot()
        except ConnectionError as e:
            self._logger.log_snapshot_load_failed(str(e), attempts, correlation_id)
            raise

        if self._snapshot is None or snapshot.version != self._snapshot.version:
            self._memo.clear()
            self._logger.log_snapshot_loaded(
                snapshot.version, snapshot.record_count, correlation_id
            )
        self._snapshot = snapshot
        return snapshot

    def _normalizer(self, snapshot: LedgerSnapshot) -> CurrencyNormalizer:
        return CurrencyNormalizer(
            snapshot.rate_history,
            fallback=self._settings.fallback_rates(self._today()),
            tz=self._settings.timezone,
        )

    def _memoised(self, snapshot: LedgerSnapshot, key: tuple, compute: Callable[[], Any]) -> Any:
        full_key = (snapshot.version, *key)
        if full_key in self._memo:
            self._memo.move_to_end(full_key)
            return self._memo[full_key]

        result = compute()
        self._memo[full_key] = result
        if len(self._memo) > self._settings.result_cache_size:
            self._memo.popitem(last=False)
        return result

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    async def statement(
        self,
        entity_id: str,
        entity_type: EntityType,
        correlation_id: Optional[UUID] = None,
    ) -> Statement:
        """
        Running-balance statement for one customer or supplier.

        Raises:
            NotFoundError: If the entity is not in the snapshot
        """
        correlation_id = correlation_id or create_correlation_id()
        snapshot = await self.refresh(correlation_id)

        entity = snapshot.entity(entity_id, entity_type)
        if entity is None:
            raise NotFoundError(f"{entity_type.value} {entity_id} not found")

        def compute() -> Statement:
            normalizer = self._normalizer(snapshot)
            result = build_statement(
                entity,
                entity_type,
                normalizer,
                sales=snapshot.sales,
                purchases=snapshot.purchases,
                vouchers=snapshot.vouchers,
                default_currency=self._settings.default_currency,
            )
            self._logger.log_statement_built(
                entity_type=entity_type.value,
                entity_id=entity_id,
                rows=len(result.entries),
                final_balance=str(result.final_balance),
                correlation_id=correlation_id,
            )
            fallback_days = sorted({
                entry.entry_date.isoformat()
                for entry in result.entries
                if entry.debit.currency != BASE_CURRENCY
                and not normalizer.has_rate_on(entry.when)
            })
            if fallback_days:
                self._logger.log_rate_fallback(fallback_days, correlation_id)
            return result

        return self._memoised(snapshot, ("statement", entity_type, entity_id), compute)

    # -------------------------------------------------------------------------
    # Debts
    # -------------------------------------------------------------------------

    async def debts(
        self,
        entity_type: EntityType,
        name_filter: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> DebtBoard:
        """Debt board for all customers or all suppliers."""
        correlation_id = correlation_id or create_correlation_id()
        snapshot = await self.refresh(correlation_id)

        def compute() -> DebtBoard:
            board = debt_board(
                snapshot.entities(entity_type),
                entity_type,
                self._normalizer(snapshot),
                sales=snapshot.sales,
                purchases=snapshot.purchases,
                vouchers=snapshot.vouchers,
                name_filter=name_filter,
                default_currency=self._settings.default_currency,
            )
            self._logger.log_debts_aggregated(
                entity_type=entity_type.value,
                entities=len(board.vectors),
                grand_total=str(board.grand_total),
                correlation_id=correlation_id,
            )
            return board

        return self._memoised(snapshot, ("debts", entity_type, name_filter), compute)

    async def customer_debts(self, name_filter: Optional[str] = None) -> DebtBoard:
        return await self.debts(EntityType.CUSTOMER, name_filter)

    async def supplier_debts(self, name_filter: Optional[str] = None) -> DebtBoard:
        return await self.debts(EntityType.SUPPLIER, name_filter)

    def aging(self, vector: DebtVector, today: Optional[date] = None) -> AgingStatus:
        """Aging bucket of a debt vector, using the configured thresholds."""
        return classify_aging(
            vector.last_activity_date,
            today or self._today(),
            self._settings.aging_thresholds,
        )

    # -------------------------------------------------------------------------
    # Inventory
    # -------------------------------------------------------------------------

    async def inventory(self, correlation_id: Optional[UUID] = None) -> list[InventoryLevel]:
        """Stock level of every item type."""
        correlation_id = correlation_id or create_correlation_id()
        snapshot = await self.refresh(correlation_id)

        def compute() -> list[InventoryLevel]:
            levels = inventory_levels(
                snapshot.item_types,
                snapshot.sales,
                snapshot.purchases,
                self._settings.low_stock_threshold,
            )
            self._logger.log_inventory_computed(
                item_types=len(levels),
                low_stock=[level.item_type for level in levels if level.is_low_stock],
                correlation_id=correlation_id,
            )
            return levels

        return list(self._memoised(snapshot, ("inventory",), compute))

    async def stock_movements(self, item_type: str) -> list[StockMovement]:
        """Movement log of one item type, newest first."""
        snapshot = await self.refresh()
        return list(self._memoised(
            snapshot,
            ("movements", item_type),
            lambda: stock_movements(item_type, snapshot.sales, snapshot.purchases),
        ))

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    async def period_report(
        self,
        date_from: date,
        date_to: date,
        correlation_id: Optional[UUID] = None,
    ) -> PeriodReport:
        """Profit and loss for a civil-date range (inclusive)."""
        correlation_id = correlation_id or create_correlation_id()
        snapshot = await self.refresh(correlation_id)

        def compute() -> PeriodReport:
            report = period_report(
                self._normalizer(snapshot),
                date_from,
                date_to,
                sales=snapshot.sales,
                purchases=snapshot.purchases,
                expenses=snapshot.expenses,
                item_types=snapshot.item_types,
            )
            self._logger.log_report_built(
                "period",
                {
                    "date_from": date_from.isoformat(),
                    "date_to": date_to.isoformat(),
                    "net_profit": str(report.net_profit),
                },
                correlation_id,
            )
            return report

        return self._memoised(snapshot, ("period", date_from, date_to), compute)

    async def daily_closing(
        self,
        day: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> DailyClosing:
        """Expected cash position for `day` (default: today)."""
        correlation_id = correlation_id or create_correlation_id()
        day = day or self._today()
        snapshot = await self.refresh(correlation_id)

        def compute() -> DailyClosing:
            closing = daily_closing(
                self._normalizer(snapshot),
                day,
                sales=snapshot.sales,
                purchases=snapshot.purchases,
                expenses=snapshot.expenses,
                vouchers=snapshot.vouchers,
            )
            self._logger.log_report_built(
                "daily_closing",
                {"day": day.isoformat(), "expected_cash": str(closing.expected_cash)},
                correlation_id,
            )
            return closing

        return self._memoised(snapshot, ("closing", day), compute)

    # -------------------------------------------------------------------------
    # Integrity
    # -------------------------------------------------------------------------

    async def check_integrity(self, correlation_id: Optional[UUID] = None) -> IntegrityReport:
        """Report orphans, hidden negative stock and missing rates."""
        correlation_id = correlation_id or create_correlation_id()
        snapshot = await self.refresh(correlation_id)

        def compute() -> IntegrityReport:
            report = self._validator.validate(snapshot)
            if not report.is_clean:
                self._logger.log_integrity_issues(
                    snapshot.version,
                    [issue.model_dump() for issue in report.issues],
                    correlation_id,
                )
            return report

        return self._memoised(snapshot, ("integrity",), compute)


def create_ledger_service(
    source: Optional[LedgerSnapshotSource] = None,
    settings: Optional[LedgerSettings] = None,
) -> LedgerService:
    """
    Factory function to create a ledger service.

    Args:
        source: Snapshot source. Defaults to an empty in-memory source,
                useful for wiring tests.
        settings: Settings to use instead of the environment.
    """
    return LedgerService(
        source=source or InMemorySnapshotSource(),
        settings=settings,
        logger=EngineLogger(),
    )
