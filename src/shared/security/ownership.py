"""Resource ownership validation.

Decides whether an authenticated principal may see a resource by comparing
the requesting user id with the owner id recorded on the resource. Every
decision on a well-formed resource produces an audit record; records carry
ids only, never resource content.

Callers must turn any denial into the same response they use for a missing
resource. Denied and nonexistent resources are indistinguishable to clients,
which keeps resource identifiers from being enumerated.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

import structlog

from shared.security.audit import AuditSink, StructlogAuditSink

logger = structlog.get_logger(__name__)


class DenialReason(Enum):
    NOT_OWNER = "not-owner"
    MALFORMED_RESOURCE = "malformed-resource"


class AuditEvent(Enum):
    AUTHORIZED_ACCESS = "authorized_access"
    UNAUTHORIZED_ACCESS = "unauthorized_access"


@dataclass(frozen=True)
class OwnershipDecision:
    """Outcome of an ownership check. Never carries the resource itself."""

    granted: bool
    reason: DenialReason | None = None


@dataclass(frozen=True)
class AuditRecord:
    timestamp: str
    event: AuditEvent
    requesting_user_id: int
    resource_id: str
    resource_type: str
    actual_owner_id: int | None = None

    def to_fields(self) -> dict[str, Any]:
        """Flatten into sink fields. `actual_owner_id` appears only on denials."""
        fields = {
            "timestamp": self.timestamp,
            "requesting_user_id": self.requesting_user_id,
            "resource_id": self.resource_id,
            "resource_type": self.resource_type,
        }
        if self.event is AuditEvent.UNAUTHORIZED_ACCESS:
            fields["actual_owner_id"] = self.actual_owner_id
        return fields


def _is_integer(value: Any) -> bool:
    # bool is an int subclass; True must not pass for owner 1
    return isinstance(value, int) and not isinstance(value, bool)


def _read_owner_id(resource: Any) -> Any:
    if isinstance(resource, Mapping):
        return resource.get("owner_id")
    return getattr(resource, "owner_id", None)


def has_owner_id(resource: Any) -> bool:
    """True if the resource carries an integer owner id."""
    if resource is None or isinstance(resource, (str, bytes, list, tuple)):
        return False
    return _is_integer(_read_owner_id(resource))


def decision_summary(decision: OwnershipDecision) -> dict[str, bool]:
    """Monitoring-safe view of a decision."""
    return {
        "granted": decision.granted,
        "has_reason": decision.reason is not None,
    }


class OwnershipValidator:
    """Checks that a requesting user owns a resource."""

    def __init__(self, audit_sink: AuditSink | None = None, resource_type: str = "order"):
        self.audit_sink = audit_sink or StructlogAuditSink()
        self.resource_type = resource_type

    def validate(self, requesting_user_id: int, resource: Any, resource_id: str) -> OwnershipDecision:
        """Grant access iff the resource's owner id equals `requesting_user_id`.

        `resource` is a mapping or object exposing `owner_id`. A missing or
        non-integer owner id is an upstream data defect: it is logged at
        error level and denied as `malformed-resource`.
        """
        if not has_owner_id(resource):
            logger.error(
                "Resource has no valid owner id, ownership cannot be verified",
                resource_id=resource_id,
                resource_type=self.resource_type,
            )
            return OwnershipDecision(granted=False, reason=DenialReason.MALFORMED_RESOURCE)

        owner_id = _read_owner_id(resource)
        granted = _is_integer(requesting_user_id) and owner_id == requesting_user_id

        record = AuditRecord(
            timestamp=datetime.now(UTC).isoformat(),
            event=AuditEvent.AUTHORIZED_ACCESS if granted else AuditEvent.UNAUTHORIZED_ACCESS,
            requesting_user_id=requesting_user_id,
            resource_id=resource_id,
            resource_type=self.resource_type,
            actual_owner_id=None if granted else owner_id,
        )
        self.audit_sink.record(record.event.value, record.to_fields())

        if granted:
            return OwnershipDecision(granted=True)
        return OwnershipDecision(granted=False, reason=DenialReason.NOT_OWNER)
