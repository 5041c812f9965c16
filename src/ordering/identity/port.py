"""Identity provider port - resolves a bearer token to a principal."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Principal:
    """An authenticated end user."""

    user_id: int
    email: str | None = None


class IdentityProvider(ABC):
    """Abstract identity provider interface."""

    @abstractmethod
    async def resolve(self, token: str) -> Principal | None:
        """Resolve a bearer token.

        Returns:
            The principal, or None if the token was rejected.

        Raises:
            IdentityLookupError: If the identity service could not be queried.
        """
        ...
