"""FastAPI routes for the Notifications domain.

``POST /notifications/order-status`` is called by the upstream commerce
store after it has committed an order status change. Callers authenticate
with the shared secret in ``X-Webhook-Secret``.

Once the secret and payload are accepted the route always answers 200. The
status change is already committed upstream, so a failed email must not make
the store retry or roll back; the outcome is reported only through the
``success`` flag in the body.
"""

import hmac

import structlog
from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from notifications.api.dependencies import (
    get_dispatcher,
    get_email_settings,
    get_order_status_renderer,
)
from notifications.api.schemas import ErrorResponse, OrderStatusWebhookPayload, WebhookResponse
from notifications.config import EmailSettings
from notifications.notification.dispatch import NotificationDispatcher, NotificationRequest
from notifications.templates import ORDER_STATUS_CATEGORY

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])

INVALID_SECRET = "Unauthorized - Invalid webhook secret"
INVALID_JSON = "Invalid JSON body"
MISSING_FIELDS = "Missing required fields: orderId, customerEmail, orderStatus, orderData"
INVALID_EMAIL = "Invalid email format"
INVALID_STATUS = "Invalid order status"
INVALID_ORDER_DATA = "Invalid order data"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def secret_matches(presented: str | None, expected: str | None) -> bool:
    """Constant-time comparison. An unconfigured secret rejects everything."""
    if not presented or not expected:
        return False
    return hmac.compare_digest(presented.encode(), expected.encode())


def describe_validation_error(exc: ValidationError) -> str:
    """Map pydantic errors onto one of the fixed validation messages."""
    errors = exc.errors()
    if any(error["type"] == "missing" and len(error["loc"]) == 1 for error in errors):
        return MISSING_FIELDS

    first_fields = {error["loc"][0] for error in errors if error["loc"]}
    if "customerEmail" in first_fields:
        return INVALID_EMAIL
    if "orderStatus" in first_fields or "previousOrderStatus" in first_fields:
        return INVALID_STATUS
    if "orderData" in first_fields:
        return INVALID_ORDER_DATA
    return MISSING_FIELDS


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _respond(response: WebhookResponse) -> JSONResponse:
    return JSONResponse(status_code=200, content=response.model_dump(by_alias=True, exclude_none=True))


# ---------------------------------------------------------------------------
# Order status webhook
# ---------------------------------------------------------------------------
@router.post(
    "/order-status",
    response_model=WebhookResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def order_status_webhook(
    request: Request,
    x_webhook_secret: str | None = Header(default=None),
    settings: EmailSettings = Depends(get_email_settings),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    renderer=Depends(get_order_status_renderer),
):
    if not settings.webhook_secret:
        logger.error("Order status webhook called but ORDER_WEBHOOK_SECRET is not configured")
    if not secret_matches(x_webhook_secret, settings.webhook_secret):
        logger.warning("Order status webhook rejected", secret_present=bool(x_webhook_secret))
        return _error(401, INVALID_SECRET)

    try:
        raw = await request.json()
    except ValueError:
        logger.warning("Order status webhook body is not valid JSON")
        return _error(400, INVALID_JSON)

    try:
        payload = OrderStatusWebhookPayload.model_validate(raw)
    except ValidationError as exc:
        message = describe_validation_error(exc)
        logger.warning("Order status webhook payload rejected", reason=message)
        return _error(400, message)

    log = logger.bind(order_id=payload.order_id, order_status=payload.order_status.value)
    log.info("Order status webhook accepted")

    async def caller_connected() -> bool:
        return not await request.is_disconnected()

    try:
        rendered = renderer.render(payload.to_template_context())
        notification = NotificationRequest.to(
            payload.customer_email,
            subject=rendered["subject"],
            body=rendered["body"],
            html_body=rendered.get("html"),
            tags={
                "category": ORDER_STATUS_CATEGORY,
                "orderId": payload.order_id,
                "status": payload.order_status.value,
            },
        )
        result = await dispatcher.dispatch(notification, should_continue=caller_connected)
    except Exception as exc:
        log.exception("Unexpected error while sending order status notification", error_type=type(exc).__name__)
        return _respond(
            WebhookResponse(
                success=False,
                error="Unexpected error while sending notification",
                message="Unexpected error, but the order was updated successfully",
            )
        )

    if result.success:
        log.info("Order status notification sent", provider_message_id=result.provider_message_id)
        return _respond(
            WebhookResponse(
                success=True,
                provider_message_id=result.provider_message_id,
                message=f"Email sent to {payload.customer_email}",
            )
        )

    log.error("Order status notification failed", attempts=result.attempt_number)
    return _respond(
        WebhookResponse(
            success=False,
            error=result.error,
            message="Email sending failed, but the order was updated successfully",
        )
    )
