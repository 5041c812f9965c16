"""Pydantic request/response models for the Notifications API.

API schemas are separate from the dispatcher's types (anti-corruption
pattern). The webhook body uses the upstream store's camelCase names.
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ordering.order.status import OrderStatus

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------
class OrderItemPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str | int | None = Field(default=None, alias="id")
    name: str
    price: float = Field(gt=0)
    quantity: int = Field(gt=0)


class OrderDataPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: list[OrderItemPayload]
    subtotal: float = Field(ge=0)
    shipping: float = Field(ge=0)
    total: float = Field(ge=0)
    created_at: str | None = Field(default=None, alias="createdAt")

    @model_validator(mode="after")
    def total_matches_subtotal_plus_shipping(self):
        expected = round(self.subtotal + self.shipping, 2)
        if abs(round(self.total, 2) - expected) >= 0.005:
            raise ValueError(f"total must equal subtotal + shipping ({expected:.2f})")
        return self


class OrderStatusWebhookPayload(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "orderId": "ORD-1735689600-K3Z9",
                    "customerEmail": "customer@example.com",
                    "customerName": "Ana",
                    "orderStatus": "shipped",
                    "orderData": {
                        "items": [{"id": 7, "name": "Chronograph", "price": 150.0, "quantity": 1}],
                        "subtotal": 150.0,
                        "shipping": 5.95,
                        "total": 155.95,
                    },
                    "previousOrderStatus": "processing",
                }
            ]
        },
    )

    order_id: str = Field(alias="orderId", min_length=1)
    customer_email: str = Field(alias="customerEmail")
    customer_name: str | None = Field(default=None, alias="customerName")
    order_status: OrderStatus = Field(alias="orderStatus")
    order_data: OrderDataPayload = Field(alias="orderData")
    previous_order_status: OrderStatus | None = Field(default=None, alias="previousOrderStatus")
    status_change_note: str | None = Field(default=None, alias="statusChangeNote")

    @field_validator("customer_email")
    @classmethod
    def email_must_look_like_an_address(cls, value: str) -> str:
        if not EMAIL_PATTERN.match(value):
            raise ValueError("invalid email format")
        return value

    def to_template_context(self) -> dict:
        return {
            "order_id": self.order_id,
            "customer_name": self.customer_name,
            "status": self.order_status,
            "previous_status": self.previous_order_status,
            "status_change_note": self.status_change_note,
            "items": [
                {"name": item.name, "price": item.price, "quantity": item.quantity} for item in self.order_data.items
            ],
            "subtotal": self.order_data.subtotal,
            "shipping": self.order_data.shipping,
            "total": self.order_data.total,
        }


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------
class WebhookResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    provider_message_id: str | None = Field(default=None, alias="providerMessageId")
    error: str | None = None
    message: str


class ErrorResponse(BaseModel):
    error: str
