"""Delivery estimate from shipment events.

A delivered order reports its exact delivery date. A shipped order gets a
window of ``MIN_DAYS`` to ``MAX_DAYS`` calendar days after shipment. Without
either timestamp there is no estimate, which is not an error.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

MIN_DAYS = 3
MAX_DAYS = 4

MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


@dataclass(frozen=True)
class DeliveryEstimate:
    status: str  # "estimated" | "delivered"
    min_date: date
    max_date: date
    formatted_text: str

    @property
    def is_delivered(self) -> bool:
        return self.status == "delivered"

    def to_dict(self) -> dict:
        data = {"status": self.status, "formatted_text": self.formatted_text}
        if self.is_delivered:
            data["date"] = self.min_date.isoformat()
        else:
            data["range"] = [self.min_date.isoformat(), self.max_date.isoformat()]
        return data


def _to_date(value: datetime | date | str) -> date:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date()
    return value


def format_date(day: date, with_year: bool = True) -> str:
    text = f"{day.day} {MONTH_ABBREVIATIONS[day.month - 1]}"
    return f"{text} {day.year}" if with_year else text


def format_date_range(start: date, end: date) -> str:
    """Render a date range as compactly as the dates allow.

    ``3 Mar 2025``, ``3-4 Mar 2025``, ``31 Mar - 1 Apr 2025`` or
    ``31 Dec 2025 - 1 Jan 2026``.
    """
    if start == end:
        return format_date(start)
    if start.year != end.year:
        return f"{format_date(start)} - {format_date(end)}"
    if start.month != end.month:
        return f"{format_date(start, with_year=False)} - {format_date(end)}"
    return f"{start.day}-{format_date(end)}"


def get_delivery_estimate(shipped_at=None, delivered_at=None) -> DeliveryEstimate | None:
    """Estimate delivery from optional shipment and delivery timestamps.

    ``delivered_at`` takes precedence over ``shipped_at``. Timestamps may be
    datetimes, dates or ISO-8601 strings; aware values are read in UTC.
    Returns None when neither timestamp is present.
    """
    if delivered_at:
        delivered = _to_date(delivered_at)
        return DeliveryEstimate(
            status="delivered",
            min_date=delivered,
            max_date=delivered,
            formatted_text=format_date(delivered),
        )

    if shipped_at:
        shipped = _to_date(shipped_at)
        earliest = shipped + timedelta(days=MIN_DAYS)
        latest = shipped + timedelta(days=MAX_DAYS)
        return DeliveryEstimate(
            status="estimated",
            min_date=earliest,
            max_date=latest,
            formatted_text=format_date_range(earliest, latest),
        )

    return None
