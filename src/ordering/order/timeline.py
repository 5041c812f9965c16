"""Status timeline - where an order sits in its status progression.

For each status in the progression an entry is completed when the status
appears in the order's history or precedes the current status, and current
when it is the current status. Anything else is pending.

Off-path statuses (cancelled, refunded, cancellation requested) have no
position in the progression. When current, they mark the timeline as an
error state and carry a standalone message for display instead of a
position. Only explicit history entries complete steps in that case.
"""

from dataclasses import dataclass
from datetime import datetime

from ordering.order.status import (
    PROGRESSION,
    OrderStatus,
    describe_status,
    is_error_status,
    parse_status,
    progression_index,
)


@dataclass(frozen=True)
class TimelineEntry:
    status: OrderStatus
    label: str
    completed: bool
    current: bool
    timestamp: datetime | str | None = None

    @property
    def pending(self) -> bool:
        return not (self.completed or self.current)


@dataclass(frozen=True)
class StatusTimeline:
    current_status: OrderStatus
    entries: tuple[TimelineEntry, ...]
    is_error_state: bool
    message: str | None = None

    def to_dict(self) -> dict:
        return {
            "current_status": self.current_status.value,
            "is_error_state": self.is_error_state,
            "message": self.message,
            "steps": [
                {
                    "status": entry.status.value,
                    "label": entry.label,
                    "completed": entry.completed,
                    "current": entry.current,
                    "timestamp": entry.timestamp.isoformat()
                    if isinstance(entry.timestamp, datetime)
                    else entry.timestamp,
                }
                for entry in self.entries
            ],
        }


def _read_change(change) -> tuple[OrderStatus | None, datetime | str | None]:
    if isinstance(change, dict):
        status, timestamp = change.get("status"), change.get("timestamp", change.get("changed_at"))
    else:
        status = getattr(change, "status", None)
        timestamp = getattr(change, "timestamp", getattr(change, "changed_at", None))
    return parse_status(status), timestamp


def classify_timeline(current_status, status_history=()) -> StatusTimeline:
    """Classify every progression status relative to the current status.

    Args:
        current_status: An OrderStatus or its string value.
        status_history: Iterable of ``{status, timestamp}`` mappings or objects
            with ``status`` and ``changed_at``. Unknown statuses are ignored.

    Raises:
        ValueError: If ``current_status`` is not a known status.
    """
    current = parse_status(current_status)
    if current is None:
        raise ValueError(f"Unknown order status: {current_status!r}")

    # First observation of each status wins
    seen: dict[OrderStatus, datetime | str | None] = {}
    for change in status_history or ():
        status, timestamp = _read_change(change)
        if status is not None and status not in seen:
            seen[status] = timestamp

    current_index = progression_index(current)
    entries = []
    for index, status in enumerate(PROGRESSION):
        reached_by_index = current_index != -1 and index < current_index
        entries.append(
            TimelineEntry(
                status=status,
                label=describe_status(status).label,
                completed=status in seen or reached_by_index,
                current=status is current,
                timestamp=seen.get(status),
            )
        )

    error_state = is_error_status(current)
    return StatusTimeline(
        current_status=current,
        entries=tuple(entries),
        is_error_state=error_state,
        message=describe_status(current).description if error_state else None,
    )
