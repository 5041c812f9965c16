"""Ordering bounded context - order read model, status lifecycle and access.

Orders are created and mutated by the upstream commerce store; this context
only reads them. It classifies an order's position in its status lifecycle,
estimates delivery dates, and serves orders to their owners.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
