"""Error taxonomy shared by the ordering and notifications contexts.

HTTP adapters translate these into a small, fixed set of generic response
bodies. Exception messages are for logs only and never reach end users.
"""


class AuthenticationError(Exception):
    """Missing, malformed or rejected credential. Not retried."""


class RequestValidationError(Exception):
    """Inbound request does not match the expected shape. Not retried."""


class OrderNotFoundError(Exception):
    """The requested order does not exist (or must look as if it doesn't)."""


class OwnershipError(OrderNotFoundError):
    """The order exists but belongs to someone else.

    Subclasses OrderNotFoundError so both failures share one handler and one
    response body.
    """


class TransientDeliveryError(Exception):
    """A notification transport attempt failed and may be retried."""


class ConfigurationError(Exception):
    """The notification subsystem is misconfigured."""


class IdentityLookupError(Exception):
    """The identity service could not resolve a principal."""


class OrderStoreError(Exception):
    """The order store could not be queried."""
