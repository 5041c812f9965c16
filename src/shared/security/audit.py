"""Audit sinks - where resource access decisions are recorded.

Sinks receive an event name and a flat dict of fields. The default sink writes
to structlog; the in-memory sink keeps records for test assertions.
"""

from typing import Any, Protocol

import structlog

logger = structlog.get_logger("security.audit")


class AuditSink(Protocol):
    """Anything that can record an audit event."""

    def record(self, event: str, fields: dict[str, Any]) -> None: ...


class StructlogAuditSink:
    """Writes audit events to the structured log.

    Unauthorized access is logged at warning level so log aggregation can
    alert on bursts of denied attempts.
    """

    def record(self, event: str, fields: dict[str, Any]) -> None:
        if event == "unauthorized_access":
            logger.warning("Unauthorized resource access attempt", audit_event=event, **fields)
        else:
            logger.info("Authorized resource access", audit_event=event, **fields)


class InMemoryAuditSink:
    """Audit sink that keeps records in memory."""

    def __init__(self):
        self.records: list[dict[str, Any]] = []

    def record(self, event: str, fields: dict[str, Any]) -> None:
        self.records.append({"event": event, **fields})

    def events(self) -> list[str]:
        return [r["event"] for r in self.records]

    def reset(self):
        self.records.clear()
