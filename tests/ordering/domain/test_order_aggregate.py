"""Tests for the Order read model."""

from datetime import UTC, datetime, timedelta

import pytest
import ordering.order.order as order_module
from ordering.order.order import Order, PaymentDetails
from ordering.order.payment_display import format_payment_method
from ordering.order.status import OrderStatus
from protean.exceptions import ValidationError

SHIPPED_AT = datetime(2025, 3, 10, 9, 0, tzinfo=UTC)


def _make_order(**overrides):
    defaults = {
        "order_number": "ORD-1741600000-AB12",
        "owner_id": 2,
        "items_data": [
            {"product_id": "prod-001", "name": "Chronograph", "unit_price": 150.0, "quantity": 1},
        ],
        "subtotal": 150.0,
        "shipping": 5.95,
        "total": 155.95,
    }
    defaults.update(overrides)
    return Order.create(**defaults)


class TestOrderCreation:
    def test_create_sets_owner(self):
        order = _make_order()
        assert order.owner_id == 2

    def test_default_status_is_pending(self):
        assert _make_order().status == OrderStatus.PENDING.value

    def test_create_populates_items(self):
        order = _make_order()
        assert len(order.items) == 1
        assert order.items[0].name == "Chronograph"

    def test_create_populates_history(self):
        order = _make_order(
            status="paid",
            status_history=[
                {"status": "pending", "changed_at": SHIPPED_AT - timedelta(days=1)},
                {"status": "paid", "changed_at": SHIPPED_AT},
            ],
        )
        assert [change.status for change in order.history()] == ["pending", "paid"]

    def test_history_is_sorted_oldest_first(self):
        order = _make_order(
            status="paid",
            status_history=[
                {"status": "paid", "changed_at": SHIPPED_AT},
                {"status": "pending", "changed_at": SHIPPED_AT - timedelta(days=1)},
            ],
        )
        assert [change.status for change in order.history()] == ["pending", "paid"]

    def test_owner_may_be_missing(self):
        assert _make_order(owner_id=None).owner_id is None


class TestOrderInvariants:
    def test_total_must_equal_subtotal_plus_shipping(self):
        with pytest.raises(ValidationError) as exc:
            _make_order(total=160.0)
        assert "total" in exc.value.messages

    def test_total_matches_to_the_cent(self):
        order = _make_order(subtotal=0.1, shipping=0.2, total=0.3)
        assert order.total == 0.3

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            _make_order(items_data=[{"product_id": "p", "name": "Strap", "unit_price": 10.0, "quantity": 0}])

    def test_unit_price_must_be_positive(self):
        with pytest.raises(ValidationError):
            _make_order(
                items_data=[{"product_id": "p", "name": "Strap", "unit_price": 0.0, "quantity": 1}],
            )

    def test_delivered_requires_shipped(self):
        with pytest.raises(ValidationError) as exc:
            _make_order(delivered_at=SHIPPED_AT)
        assert "delivered_at" in exc.value.messages

    def test_delivery_cannot_precede_shipment(self):
        with pytest.raises(ValidationError):
            _make_order(shipped_at=SHIPPED_AT, delivered_at=SHIPPED_AT - timedelta(hours=1))

    def test_delivery_after_shipment(self):
        order = _make_order(shipped_at=SHIPPED_AT, delivered_at=SHIPPED_AT + timedelta(days=3))
        assert order.delivered_at > order.shipped_at

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            _make_order(status="teleported")


class TestPaymentDetails:
    def test_build_keeps_valid_last4(self):
        details = PaymentDetails.build(method="card", brand="visa", last4="4242")
        assert details.last4 == "4242"

    @pytest.mark.parametrize("last4", ["424", "42424", "42a2", "", None])
    def test_build_drops_invalid_last4(self, last4):
        details = PaymentDetails.build(method="card", brand="visa", last4=last4)
        assert details.last4 is None
        assert details.brand == "visa"

    def test_direct_construction_rejects_invalid_last4(self):
        with pytest.raises(ValidationError):
            PaymentDetails(method="card", brand="visa", last4="12ab")

    def test_order_payment_from_dict(self):
        order = _make_order(payment={"method": "card", "brand": "mastercard", "last4": "123"})
        assert order.payment.brand == "mastercard"
        assert order.payment.last4 is None


class TestPayload:
    def test_payload_fields(self):
        order = _make_order(
            status="shipped",
            shipped_at=SHIPPED_AT,
            payment={"method": "card", "brand": "visa", "last4": "4242"},
        )
        payload = order.to_payload()

        assert payload["order_id"] == "ORD-1741600000-AB12"
        assert payload["status"] == "shipped"
        assert payload["total"] == 155.95
        assert payload["items"][0]["line_total"] == 150.0
        assert payload["payment"]["display"] == "Visa ****4242"
        assert payload["shipped_at"] == SHIPPED_AT.isoformat()
        assert payload["delivered_at"] is None

    def test_payload_has_no_owner_id(self):
        assert "owner_id" not in _make_order().to_payload()

    def test_payload_without_payment(self):
        assert _make_order().to_payload()["payment"] is None

    def test_payload_display_after_dropped_last4(self):
        order = _make_order(payment={"method": "card", "brand": "visa", "last4": "42"})
        assert order.to_payload()["payment"]["display"] == format_payment_method({"method": "card", "brand": "visa"})

    def test_display_formatter_is_a_module_import(self):
        assert order_module.format_payment_method is format_payment_method
