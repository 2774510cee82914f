"""
Engine Logger

DESIGN DECISION: Every significant engine action is logged as a structured
event. This provides:
1. Traceability of which snapshot version produced which figures
2. Visibility of silent policies (rate fallback, stock clamping)
3. Debugging capability

The logger writes to the local structured log only. Shipping events to
any other store is left to the surrounding system.
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from agency_ledger.models.events import (
    EngineEvent,
    EngineEventBuilder,
    EngineEventSeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class EngineLogger:
    """
    Central engine logging service.

    Keeps the last events in memory so callers (and tests) can inspect what
    was reported for a computation.
    """

    def __init__(self, history_size: int = 100):
        self._logger = structlog.get_logger("agency_ledger")
        self._history_size = history_size
        self._recent: list[EngineEvent] = []

    @property
    def recent_events(self) -> list[EngineEvent]:
        """Most recent events, oldest first."""
        return list(self._recent)

    def log(self, event: EngineEvent) -> None:
        """Log an engine event at its severity's level."""
        log_dict = event.to_log_dict()

        if event.severity == EngineEventSeverity.ERROR:
            self._logger.error("engine_event", **log_dict)
        elif event.severity == EngineEventSeverity.WARNING:
            self._logger.warning("engine_event", **log_dict)
        elif event.severity == EngineEventSeverity.DEBUG:
            self._logger.debug("engine_event", **log_dict)
        else:
            self._logger.info("engine_event", **log_dict)

        self._recent.append(event)
        if len(self._recent) > self._history_size:
            del self._recent[0]

    def log_snapshot_loaded(
        self,
        version: str,
        records: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(EngineEventBuilder.snapshot_loaded(version, records, correlation_id))

    def log_snapshot_load_failed(
        self,
        error_message: str,
        attempts: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(EngineEventBuilder.snapshot_load_failed(error_message, attempts, correlation_id))

    def log_statement_built(
        self,
        entity_type: str,
        entity_id: str,
        rows: int,
        final_balance: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(EngineEventBuilder.statement_built(
            entity_type=entity_type,
            entity_id=entity_id,
            rows=rows,
            final_balance=final_balance,
            correlation_id=correlation_id,
        ))

    def log_debts_aggregated(
        self,
        entity_type: str,
        entities: int,
        grand_total: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(EngineEventBuilder.debts_aggregated(
            entity_type=entity_type,
            entities=entities,
            grand_total=grand_total,
            correlation_id=correlation_id,
        ))

    def log_inventory_computed(
        self,
        item_types: int,
        low_stock: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(EngineEventBuilder.inventory_computed(item_types, low_stock, correlation_id))

    def log_report_built(
        self,
        report: str,
        details: dict,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(EngineEventBuilder.report_built(report, details, correlation_id))

    def log_rate_fallback(
        self,
        days: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(EngineEventBuilder.rate_fallback_used(days, correlation_id))

    def log_integrity_issues(
        self,
        version: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(EngineEventBuilder.integrity_issues_found(version, issues, correlation_id))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use one per caller request and pass it through every service call.
    """
    return uuid4()
