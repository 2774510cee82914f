"""
Engine Event Models

Significant engine actions are described as structured events and written
to the local structured log.

DESIGN DECISION: Events are plain data. How they are shipped anywhere
beyond the local log is the surrounding system's business.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class EngineEventType(str, Enum):
    """Types of events the engine reports."""
    # Snapshot handling
    SNAPSHOT_LOADED = "snapshot_loaded"
    SNAPSHOT_LOAD_FAILED = "snapshot_load_failed"

    # Computations
    STATEMENT_BUILT = "statement_built"
    DEBTS_AGGREGATED = "debts_aggregated"
    INVENTORY_COMPUTED = "inventory_computed"
    REPORT_BUILT = "report_built"

    # Data quality
    RATE_FALLBACK_USED = "rate_fallback_used"
    INTEGRITY_ISSUES_FOUND = "integrity_issues_found"


class EngineEventSeverity(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class EngineEvent(BaseModel):
    """A single engine event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: EngineEventType
    severity: EngineEventSeverity = EngineEventSeverity.INFO

    # What the event is about
    entity_type: Optional[str] = Field(
        default=None,
        description="Kind of subject (e.g. 'customer', 'item', 'snapshot')"
    )
    entity_id: Optional[str] = None
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class EngineEventBuilder:
    """
    Helper class to build engine events with common patterns.

    Usage:
        event = EngineEventBuilder.snapshot_loaded(version="v3", records=120)
    """

    @staticmethod
    def snapshot_loaded(
        version: str,
        records: int,
        correlation_id: Optional[UUID] = None,
    ) -> EngineEvent:
        return EngineEvent(
            event_type=EngineEventType.SNAPSHOT_LOADED,
            entity_type="snapshot",
            entity_id=version,
            correlation_id=correlation_id,
            description=f"Loaded ledger snapshot {version}",
            details={"records": records},
        )

    @staticmethod
    def snapshot_load_failed(
        error_message: str,
        attempts: int,
        correlation_id: Optional[UUID] = None,
    ) -> EngineEvent:
        return EngineEvent(
            event_type=EngineEventType.SNAPSHOT_LOAD_FAILED,
            severity=EngineEventSeverity.ERROR,
            entity_type="snapshot",
            correlation_id=correlation_id,
            description="Could not load ledger snapshot",
            details={"attempts": attempts},
            error_message=error_message,
        )

    @staticmethod
    def statement_built(
        entity_type: str,
        entity_id: str,
        rows: int,
        final_balance: str,
        correlation_id: Optional[UUID] = None,
    ) -> EngineEvent:
        return EngineEvent(
            event_type=EngineEventType.STATEMENT_BUILT,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Built statement with {rows} rows",
            details={"rows": rows, "final_balance": final_balance},
        )

    @staticmethod
    def debts_aggregated(
        entity_type: str,
        entities: int,
        grand_total: str,
        correlation_id: Optional[UUID] = None,
    ) -> EngineEvent:
        return EngineEvent(
            event_type=EngineEventType.DEBTS_AGGREGATED,
            entity_type=entity_type,
            correlation_id=correlation_id,
            description=f"Aggregated debts for {entities} {entity_type}s",
            details={"entities": entities, "grand_total": grand_total},
        )

    @staticmethod
    def inventory_computed(
        item_types: int,
        low_stock: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> EngineEvent:
        return EngineEvent(
            event_type=EngineEventType.INVENTORY_COMPUTED,
            severity=EngineEventSeverity.WARNING if low_stock else EngineEventSeverity.INFO,
            entity_type="item",
            correlation_id=correlation_id,
            description=f"Computed stock for {item_types} item types",
            details={"item_types": item_types, "low_stock": low_stock},
        )

    @staticmethod
    def report_built(
        report: str,
        details: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> EngineEvent:
        return EngineEvent(
            event_type=EngineEventType.REPORT_BUILT,
            entity_type="report",
            entity_id=report,
            correlation_id=correlation_id,
            description=f"Built {report} report",
            details=details,
        )

    @staticmethod
    def rate_fallback_used(
        days: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> EngineEvent:
        return EngineEvent(
            event_type=EngineEventType.RATE_FALLBACK_USED,
            severity=EngineEventSeverity.WARNING,
            entity_type="rate",
            correlation_id=correlation_id,
            description="No rate published on some transaction days; current rate used",
            details={"days": days},
        )

    @staticmethod
    def integrity_issues_found(
        version: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> EngineEvent:
        return EngineEvent(
            event_type=EngineEventType.INTEGRITY_ISSUES_FOUND,
            severity=EngineEventSeverity.WARNING,
            entity_type="snapshot",
            entity_id=version,
            correlation_id=correlation_id,
            description=f"Found {len(issues)} integrity issues",
            details={"issues": issues},
        )
