"""Snapshot validation package."""

from agency_ledger.validation.validator import SnapshotValidator

__all__ = ["SnapshotValidator"]
