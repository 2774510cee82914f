"""
Integrity Report Models

Results of checking a snapshot for data the engine silently tolerates.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class IntegrityIssue(BaseModel):
    """A single issue found in a snapshot."""

    field: str = Field(
        ...,
        description="Collection or field with the issue (e.g. 'sales', 'inventory')"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g. 'orphaned', 'negative_stock', 'missing_rate')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
    )
    record_id: Optional[str] = None


class IntegrityReport(BaseModel):
    """Everything found when validating one snapshot version."""

    snapshot_version: str
    checked_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    issues: list[IntegrityIssue] = Field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.issues

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "warning")

    def by_type(self, issue_type: str) -> list[IntegrityIssue]:
        return [issue for issue in self.issues if issue.issue_type == issue_type]
