"""Pydantic response schemas for the Ordering API.

These are external contracts (anti-corruption layer), kept separate from
the Order aggregate. Order data itself is produced by ``Order.to_payload()``.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    error: str


class OrderResponse(BaseModel):
    data: dict

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "data": {
                        "order_id": "ORD-1735689600-K3Z9",
                        "status": "shipped",
                        "total": 155.95,
                    }
                }
            ]
        }
    }


class OrderSummarySchema(BaseModel):
    order_id: str
    status: str
    total: float
    currency: str
    item_count: int = Field(ge=0)
    created_at: str | None = None


class OrderListResponse(BaseModel):
    data: list[OrderSummarySchema]
    page: int = Field(ge=1)
    page_size: int
    total: int
    has_next: bool


class TrackingStepSchema(BaseModel):
    status: str
    label: str
    completed: bool
    current: bool
    timestamp: str | None = None


class DeliveryEstimateSchema(BaseModel):
    status: str
    formatted_text: str
    date: str | None = None
    range: list[str] | None = None


class TrackingResponse(BaseModel):
    order_id: str
    current_status: str
    is_error_state: bool
    message: str | None = None
    steps: list[TrackingStepSchema]
    delivery_estimate: DeliveryEstimateSchema | None = None
