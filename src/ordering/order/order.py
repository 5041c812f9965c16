"""Order aggregate - read model of an order owned by the upstream commerce store.

Orders are created at checkout and their status is changed by the upstream
store; this context never mutates them. The aggregate exists to validate the
data it is handed and to give the access handlers a typed view of it.

Invariants:
    total == subtotal + shipping (to the cent)
    every line has quantity > 0 and unit_price > 0
    delivered_at implies shipped_at, and shipped_at <= delivered_at
    payment last4 is exactly four digits (dropped otherwise at build time)
"""

import re
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from ordering.domain import ordering
from ordering.order.payment_display import format_payment_method
from ordering.order.status import OrderStatus

_LAST4_PATTERN = re.compile(r"^\d{4}$")


def _is_valid_last4(value) -> bool:
    return isinstance(value, str) and bool(_LAST4_PATTERN.match(value))


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class PaymentDetails:
    """How the order was paid: method, card brand and the last four digits."""

    method = String(max_length=50)
    brand = String(max_length=50)
    last4 = String(max_length=4)

    @invariant.post
    def last4_must_be_four_digits(self):
        if self.last4 is not None and not _is_valid_last4(self.last4):
            raise ValidationError({"last4": ["Last four digits must be exactly 4 digits"]})

    @classmethod
    def build(cls, method=None, brand=None, last4=None):
        """Build from raw store data, dropping a malformed last4."""
        return cls(
            method=method,
            brand=brand,
            last4=last4 if _is_valid_last4(last4) else None,
        )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderLine:
    """A purchased product with the unit price captured at checkout."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True)
    quantity = Integer(required=True, min_value=1)

    @invariant.post
    def unit_price_must_be_positive(self):
        if self.unit_price is not None and self.unit_price <= 0:
            raise ValidationError({"unit_price": ["Unit price must be greater than zero"]})


@ordering.entity(part_of="Order")
class StatusChange:
    """One observed status transition. History is append-only."""

    status = String(choices=OrderStatus, required=True)
    changed_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, max_length=50)  # ORD-<epoch>-<suffix>
    owner_id = Integer()
    customer_email = String(max_length=254)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    status_history = HasMany(StatusChange)
    items = HasMany(OrderLine)
    subtotal = Float(required=True, min_value=0.0)
    shipping = Float(default=0.0, min_value=0.0)
    total = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="EUR")
    payment = ValueObject(PaymentDetails)
    shipped_at = DateTime()
    delivered_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_equal_subtotal_plus_shipping(self):
        if self.subtotal is None or self.total is None:
            return
        expected = round(self.subtotal + (self.shipping or 0.0), 2)
        if abs(round(self.total, 2) - expected) >= 0.005:
            raise ValidationError({"total": [f"Total must equal subtotal + shipping ({expected:.2f})"]})

    @invariant.post
    def lines_must_have_positive_price(self):
        for line in self.items or []:
            if line.unit_price is None or line.unit_price <= 0:
                raise ValidationError({"items": ["Unit price must be greater than zero"]})

    @invariant.post
    def delivery_cannot_precede_shipment(self):
        if self.delivered_at is None:
            return
        if self.shipped_at is None:
            raise ValidationError({"delivered_at": ["A delivered order must have a shipment date"]})
        if self.shipped_at > self.delivered_at:
            raise ValidationError({"delivered_at": ["Delivery cannot precede shipment"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_number: str,
        owner_id: int | None,
        items_data: list[dict],
        subtotal: float,
        shipping: float,
        total: float,
        status: str = OrderStatus.PENDING.value,
        status_history: list[dict] | None = None,
        payment: dict | None = None,
        customer_email: str | None = None,
        shipped_at: datetime | None = None,
        delivered_at: datetime | None = None,
        created_at: datetime | None = None,
    ):
        """Build an order from commerce store data.

        Args:
            items_data: List of dicts with product_id, name, unit_price, quantity.
            status_history: List of dicts with status and changed_at, oldest first.
            payment: Dict with method, brand, last4.
        """
        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            owner_id=owner_id,
            customer_email=customer_email,
            status=status,
            subtotal=subtotal,
            shipping=shipping,
            total=total,
            payment=PaymentDetails.build(**payment) if payment else None,
            shipped_at=shipped_at,
            delivered_at=delivered_at,
            created_at=created_at or now,
            updated_at=now,
        )
        for item_data in items_data:
            order.add_items(OrderLine(**item_data))
        for change in status_history or []:
            order.add_status_history(StatusChange(**change))
        return order

    # -------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------
    def history(self) -> list[StatusChange]:
        """Status history, oldest first."""
        return sorted(self.status_history or [], key=lambda change: change.changed_at)

    def to_payload(self) -> dict:
        """Full order data as returned to its owner."""
        return {
            "order_id": self.order_number,
            "status": self.status,
            "status_history": [
                {"status": change.status, "timestamp": _iso(change.changed_at)} for change in self.history()
            ],
            "items": [
                {
                    "product_id": str(line.product_id),
                    "name": line.name,
                    "unit_price": line.unit_price,
                    "quantity": line.quantity,
                    "line_total": round(line.unit_price * line.quantity, 2),
                }
                for line in self.items
            ],
            "subtotal": self.subtotal,
            "shipping": self.shipping,
            "total": self.total,
            "currency": self.currency,
            "payment": (
                {
                    "method": self.payment.method,
                    "brand": self.payment.brand,
                    "last4": self.payment.last4,
                    "display": format_payment_method(self.payment),
                }
                if self.payment
                else None
            ),
            "shipped_at": _iso(self.shipped_at),
            "delivered_at": _iso(self.delivered_at),
            "created_at": _iso(self.created_at),
        }
