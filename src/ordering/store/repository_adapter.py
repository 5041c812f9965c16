"""Order store backed by the ordering domain's repository."""

from datetime import UTC, datetime

import structlog
from protean.utils.globals import current_domain

from ordering.order.order import Order
from ordering.store.port import PAGE_SIZE, OrderPage, OrderStore
from shared.errors import OrderNotFoundError, OrderStoreError

logger = structlog.get_logger(__name__)

_EPOCH = datetime.min.replace(tzinfo=UTC)


def _newest_first(order: Order):
    created = order.created_at
    if created is None:
        return _EPOCH
    return created if created.tzinfo else created.replace(tzinfo=UTC)


class RepositoryOrderStore(OrderStore):
    """Reads orders through `current_domain.repository_for(Order)`.

    Must be used inside an active ordering domain context.
    """

    def get_by_order_number(self, order_number: str) -> Order:
        try:
            repo = current_domain.repository_for(Order)
            results = repo._dao.query.filter(order_number=order_number).all().items
        except Exception as exc:
            logger.error("Order store query failed", order_id=order_number, error_type=type(exc).__name__)
            raise OrderStoreError("Order store query failed") from exc

        if not results:
            raise OrderNotFoundError(order_number)
        return results[0]

    def list_for_owner(self, owner_id: int, page: int = 1) -> OrderPage:
        page = max(page, 1)
        try:
            repo = current_domain.repository_for(Order)
            results = repo._dao.query.filter(owner_id=owner_id).all().items
        except Exception as exc:
            logger.error("Order store query failed", owner_id=owner_id, error_type=type(exc).__name__)
            raise OrderStoreError("Order store query failed") from exc

        ordered = sorted(results, key=_newest_first, reverse=True)
        start = (page - 1) * PAGE_SIZE
        return OrderPage(
            orders=ordered[start : start + PAGE_SIZE],
            page=page,
            page_size=PAGE_SIZE,
            total=len(ordered),
        )

    def save(self, order: Order) -> Order:
        """Persist an order; used to seed the store in development and tests."""
        current_domain.repository_for(Order).add(order)
        return order
