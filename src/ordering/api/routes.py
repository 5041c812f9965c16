"""FastAPI routes for the Ordering domain - customer access to their orders.

Every route authenticates the caller with a bearer token and only ever
returns orders the caller owns. An order owned by someone else gets exactly
the same 404 as an order that does not exist, so order ids cannot be enumerated.
Lookup failures in the identity service or the order store share one
generic 500 body that does not say which of the two failed.
"""

import structlog
from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse

from ordering.api.dependencies import (
    get_identity_provider,
    get_order_store,
    get_ownership_validator,
)
from ordering.api.schemas import (
    ErrorResponse,
    OrderListResponse,
    OrderResponse,
    OrderSummarySchema,
    TrackingResponse,
)
from ordering.identity import IdentityProvider, Principal
from ordering.order.delivery import get_delivery_estimate
from ordering.order.order import Order
from ordering.order.timeline import classify_timeline
from ordering.store.port import OrderStore
from shared.errors import (
    AuthenticationError,
    IdentityLookupError,
    OrderNotFoundError,
    OrderStoreError,
    OwnershipError,
    RequestValidationError,
)
from shared.security.ownership import OwnershipValidator, decision_summary

logger = structlog.get_logger(__name__)

UNAUTHORIZED = "Unauthorized"
ORDER_NOT_FOUND = "Order not found"
INTERNAL_ERROR = "Internal server error"
INVALID_PAGE = "Invalid page"

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _error_for(exc: Exception) -> JSONResponse:
    """Map an internal error onto one of the fixed public responses."""
    if isinstance(exc, AuthenticationError):
        return _error(401, UNAUTHORIZED)
    if isinstance(exc, RequestValidationError):
        return _error(400, INVALID_PAGE)
    if isinstance(exc, OrderNotFoundError):
        return _error(404, ORDER_NOT_FOUND)
    if isinstance(exc, (IdentityLookupError, OrderStoreError)):
        return _error(500, INTERNAL_ERROR)
    logger.exception("Unexpected error while serving order", error_type=type(exc).__name__)
    return _error(500, INTERNAL_ERROR)


def parse_bearer_token(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise AuthenticationError("Missing authorization header")
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        raise AuthenticationError("Malformed authorization header")
    return token


def _parse_page(page: str | None) -> int:
    if page is None:
        return 1
    try:
        value = int(page)
    except ValueError as exc:
        raise RequestValidationError("Page is not an integer") from exc
    if value < 1:
        raise RequestValidationError("Page must be positive")
    return value


async def _authenticate(authorization: str | None, identity: IdentityProvider) -> Principal:
    token = parse_bearer_token(authorization)
    principal = await identity.resolve(token)
    if principal is None:
        raise AuthenticationError("Token rejected by identity service")
    return principal


def _load_owned_order(
    principal: Principal,
    order_id: str,
    store: OrderStore,
    validator: OwnershipValidator,
) -> Order:
    order = store.get_by_order_number(order_id)
    decision = validator.validate(principal.user_id, order, order_id)
    if not decision.granted:
        logger.info("Order access denied", order_id=order_id, **decision_summary(decision))
        raise OwnershipError(order_id)
    return order


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=OrderListResponse, responses=_ERROR_RESPONSES)
async def list_orders(
    page: str | None = None,
    authorization: str | None = Header(default=None),
    identity: IdentityProvider = Depends(get_identity_provider),
    store: OrderStore = Depends(get_order_store),
):
    try:
        principal = await _authenticate(authorization, identity)
        page_number = _parse_page(page)
        result = store.list_for_owner(principal.user_id, page=page_number)
    except Exception as exc:
        return _error_for(exc)

    return OrderListResponse(
        data=[
            OrderSummarySchema(
                order_id=order.order_number,
                status=order.status,
                total=order.total,
                currency=order.currency,
                item_count=sum(line.quantity for line in order.items),
                created_at=order.created_at.isoformat() if order.created_at else None,
            )
            for order in result.orders
        ],
        page=result.page,
        page_size=result.page_size,
        total=result.total,
        has_next=result.has_next,
    )


@order_router.get("/{order_id}", response_model=OrderResponse, responses=_ERROR_RESPONSES)
async def get_order(
    order_id: str,
    authorization: str | None = Header(default=None),
    identity: IdentityProvider = Depends(get_identity_provider),
    store: OrderStore = Depends(get_order_store),
    validator: OwnershipValidator = Depends(get_ownership_validator),
):
    try:
        principal = await _authenticate(authorization, identity)
        order = _load_owned_order(principal, order_id, store, validator)
        payload = order.to_payload()
    except Exception as exc:
        return _error_for(exc)

    return OrderResponse(data=payload)


@order_router.get("/{order_id}/tracking", response_model=TrackingResponse, responses=_ERROR_RESPONSES)
async def get_order_tracking(
    order_id: str,
    authorization: str | None = Header(default=None),
    identity: IdentityProvider = Depends(get_identity_provider),
    store: OrderStore = Depends(get_order_store),
    validator: OwnershipValidator = Depends(get_ownership_validator),
):
    try:
        principal = await _authenticate(authorization, identity)
        order = _load_owned_order(principal, order_id, store, validator)
        timeline = classify_timeline(order.status, order.history())
        estimate = get_delivery_estimate(order.shipped_at, order.delivered_at)
    except Exception as exc:
        return _error_for(exc)

    return TrackingResponse(
        order_id=order.order_number,
        delivery_estimate=estimate.to_dict() if estimate else None,
        **timeline.to_dict(),
    )
