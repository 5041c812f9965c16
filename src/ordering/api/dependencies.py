"""FastAPI dependencies for the Ordering API.

Every collaborator is injected; tests swap them with
``app.dependency_overrides``.
"""

from functools import lru_cache

from ordering.identity import IdentityProvider, build_identity_provider
from ordering.store.port import OrderStore
from ordering.store.repository_adapter import RepositoryOrderStore
from shared.security.audit import StructlogAuditSink
from shared.security.ownership import OwnershipValidator


@lru_cache
def get_identity_provider() -> IdentityProvider:
    return build_identity_provider()


def get_order_store() -> OrderStore:
    return RepositoryOrderStore()


@lru_cache
def get_ownership_validator() -> OwnershipValidator:
    return OwnershipValidator(audit_sink=StructlogAuditSink(), resource_type="order")
