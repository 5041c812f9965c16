"""In-memory identity provider for development and testing."""

from ordering.identity.port import IdentityProvider, Principal
from shared.errors import IdentityLookupError


class FakeIdentityProvider(IdentityProvider):
    """Resolves tokens from a fixed token -> principal map."""

    def __init__(self, tokens: dict[str, Principal] | None = None) -> None:
        self.tokens: dict[str, Principal] = dict(tokens or {})
        self.should_fail: bool = False
        self.calls: list[str] = []

    def register(self, token: str, user_id: int, email: str | None = None) -> Principal:
        principal = Principal(user_id=user_id, email=email)
        self.tokens[token] = principal
        return principal

    def configure(self, should_fail: bool) -> None:
        """Make every lookup raise IdentityLookupError."""
        self.should_fail = should_fail

    async def resolve(self, token: str) -> Principal | None:
        self.calls.append(token)
        if self.should_fail:
            raise IdentityLookupError("Identity service unavailable")
        return self.tokens.get(token)

    def reset(self) -> None:
        self.tokens.clear()
        self.calls.clear()
        self.should_fail = False
