"""Order status lifecycle.

Progression (linear, used for timeline display):
    PENDING → PAID → PROCESSING → SHIPPED → DELIVERED

Off-path statuses (never part of the progression):
    CANCELLATION_REQUESTED, CANCELLED, REFUNDED

Transitions:
    PENDING/PAID/PROCESSING → CANCELLATION_REQUESTED → CANCELLED | PROCESSING
    PENDING/PAID/PROCESSING → CANCELLED
    SHIPPED/DELIVERED → REFUNDED
    CANCELLED, REFUNDED are terminal
"""

from dataclasses import dataclass
from enum import Enum
from typing import assert_never


class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    CANCELLATION_REQUESTED = "cancellation_requested"


PROGRESSION: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.PAID,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)

ERROR_ORDER_STATUSES: tuple[OrderStatus, ...] = (
    OrderStatus.CANCELLED,
    OrderStatus.REFUNDED,
    OrderStatus.CANCELLATION_REQUESTED,
)

ACTIVE_ORDER_STATUSES: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.PAID,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
)

_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {
        OrderStatus.PAID,
        OrderStatus.CANCELLED,
        OrderStatus.CANCELLATION_REQUESTED,
    },
    OrderStatus.PAID: {
        OrderStatus.PROCESSING,
        OrderStatus.CANCELLED,
        OrderStatus.CANCELLATION_REQUESTED,
    },
    OrderStatus.PROCESSING: {
        OrderStatus.SHIPPED,
        OrderStatus.CANCELLED,
        OrderStatus.CANCELLATION_REQUESTED,
    },
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.REFUNDED},
    OrderStatus.DELIVERED: {OrderStatus.REFUNDED},
    OrderStatus.CANCELLATION_REQUESTED: {
        OrderStatus.CANCELLED,
        OrderStatus.PROCESSING,  # Request rejected, fulfilment resumes
    },
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.REFUNDED: set(),  # Terminal
}


def parse_status(value) -> OrderStatus | None:
    """Coerce a raw status value into an OrderStatus, or None if unknown."""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        return None


def progression_index(status: OrderStatus) -> int:
    """Position in the progression, or -1 for off-path statuses."""
    try:
        return PROGRESSION.index(status)
    except ValueError:
        return -1


def is_error_status(status: OrderStatus) -> bool:
    return status in ERROR_ORDER_STATUSES


def is_active_status(status: OrderStatus) -> bool:
    return status in ACTIVE_ORDER_STATUSES


def is_valid_transition(current: OrderStatus, new: OrderStatus) -> bool:
    return new in _VALID_TRANSITIONS[current]


def allowed_transitions(status: OrderStatus) -> frozenset[OrderStatus]:
    return frozenset(_VALID_TRANSITIONS[status])


@dataclass(frozen=True)
class StatusDisplay:
    label: str
    color: str
    icon: str
    description: str


def describe_status(status: OrderStatus) -> StatusDisplay:
    """Customer-facing presentation of a status."""
    match status:
        case OrderStatus.PENDING:
            return StatusDisplay(
                label="Payment Pending",
                color="gray",
                icon="⏳",
                description="We are waiting for your payment to be confirmed.",
            )
        case OrderStatus.PAID:
            return StatusDisplay(
                label="Payment Confirmed",
                color="blue",
                icon="💳",
                description="Your payment has been received.",
            )
        case OrderStatus.PROCESSING:
            return StatusDisplay(
                label="Processing",
                color="yellow",
                icon="📦",
                description="Your order is being prepared for shipment.",
            )
        case OrderStatus.SHIPPED:
            return StatusDisplay(
                label="Shipped",
                color="orange",
                icon="🚚",
                description="Your order is on its way.",
            )
        case OrderStatus.DELIVERED:
            return StatusDisplay(
                label="Delivered",
                color="green",
                icon="✅",
                description="Your order has been delivered.",
            )
        case OrderStatus.CANCELLED:
            return StatusDisplay(
                label="Cancelled",
                color="red",
                icon="❌",
                description="This order has been cancelled.",
            )
        case OrderStatus.REFUNDED:
            return StatusDisplay(
                label="Refunded",
                color="purple",
                icon="↩",
                description="This order has been refunded.",
            )
        case OrderStatus.CANCELLATION_REQUESTED:
            return StatusDisplay(
                label="Cancellation Requested",
                color="red",
                icon="🕓",
                description="Your cancellation request is being reviewed.",
            )
        case _:
            assert_never(status)
