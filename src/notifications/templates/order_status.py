"""Order status template - sent when an order's status changes."""

from typing import assert_never

from ordering.order.status import OrderStatus, describe_status, parse_status

CURRENCY_SYMBOL = "€"
SUPPORT_EMAIL = "orders@storefront.example"


def format_price(amount: float) -> str:
    return f"{CURRENCY_SYMBOL}{amount:,.2f}"


def next_steps(status: OrderStatus) -> str:
    match status:
        case OrderStatus.PENDING:
            return "We are waiting for your payment to be confirmed. We will let you know as soon as it is."
        case OrderStatus.PAID:
            return "We have received your payment and will start preparing your order shortly."
        case OrderStatus.PROCESSING:
            return "We are packing your products with care. We will let you know when your order leaves our warehouse."
        case OrderStatus.SHIPPED:
            return "Your order has left our warehouse and should arrive within 3-4 business days."
        case OrderStatus.DELIVERED:
            return "We hope you enjoy your purchase. If anything is wrong, please get in touch."
        case OrderStatus.CANCELLED:
            return "Your order has been cancelled. If you did not request this, please contact us."
        case OrderStatus.REFUNDED:
            return "Your refund has been processed. The money should reach your account within 5-10 business days."
        case OrderStatus.CANCELLATION_REQUESTED:
            return "We have received your cancellation request and will review it within 24 hours."
        case _:
            assert_never(status)


class OrderStatusTemplate:
    """Plain-text order status email.

    Context keys: order_id, status, items (name, quantity, price), subtotal,
    shipping, total; optionally customer_name, previous_status and
    status_change_note.
    """

    @staticmethod
    def subject(order_id: str, status: OrderStatus) -> str:
        display = describe_status(status)
        return f"{display.icon} Order {order_id} update - {display.label}"

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        status = parse_status(context["status"])
        if status is None:
            raise ValueError(f"Unknown order status: {context['status']!r}")
        display = describe_status(status)
        customer_name = context.get("customer_name")

        lines = [
            f"Hello {customer_name}," if customer_name else "Hello,",
            "",
            f"Your order {order_id} has been updated.",
            "",
            f"Status: {display.label}",
            display.description,
        ]

        previous = parse_status(context.get("previous_status"))
        if previous is not None and previous is not status:
            lines.append(f"Previous status: {describe_status(previous).label}")

        note = context.get("status_change_note")
        if note:
            lines += ["", f"Note: {note}"]

        lines += ["", "Order details:"]
        for item in context.get("items", []):
            quantity = item.get("quantity", 1)
            line_total = item.get("price", 0.0) * quantity
            lines.append(f"  {item.get('name', 'Item')} x {quantity}  {format_price(line_total)}")

        shipping = context.get("shipping", 0.0)
        lines += [
            "",
            f"Subtotal: {format_price(context.get('subtotal', 0.0))}",
            f"Shipping: {'Free' if shipping == 0 else format_price(shipping)}",
            f"Total: {format_price(context.get('total', 0.0))}",
            "",
            next_steps(status),
            "",
            f"Questions? Write to us at {SUPPORT_EMAIL}.",
        ]

        return {
            "subject": OrderStatusTemplate.subject(order_id, status),
            "body": "\n".join(lines),
        }
