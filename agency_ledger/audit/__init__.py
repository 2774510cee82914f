"""Engine logging package."""

from agency_ledger.audit.logger import EngineLogger, create_correlation_id

__all__ = ["EngineLogger", "create_correlation_id"]
