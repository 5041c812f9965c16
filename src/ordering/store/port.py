"""Order store port - read-only access to orders kept by the commerce store.

Adapters raise OrderNotFoundError for a missing order and OrderStoreError
when the store itself cannot be queried.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

PAGE_SIZE = 10


@dataclass(frozen=True)
class OrderPage:
    """One page of a principal's orders, newest first."""

    orders: list = field(default_factory=list)
    page: int = 1
    page_size: int = PAGE_SIZE
    total: int = 0

    @property
    def has_next(self) -> bool:
        return self.page * self.page_size < self.total


class OrderStore(ABC):
    """Abstract order store interface."""

    @abstractmethod
    def get_by_order_number(self, order_number: str):
        """Return the Order with this order number."""
        ...

    @abstractmethod
    def list_for_owner(self, owner_id: int, page: int = 1) -> OrderPage:
        """Return a page of orders owned by `owner_id`, newest first."""
        ...
