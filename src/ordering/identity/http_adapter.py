"""Identity provider backed by the storefront's user service.

Calls ``GET {base_url}/api/users/me`` with the caller's bearer token. A 401
or 403 means the token was rejected; any other failure is a lookup error.
"""

import httpx
import structlog

from ordering.identity.port import IdentityProvider, Principal
from shared.errors import IdentityLookupError

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class HttpIdentityProvider(IdentityProvider):
    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def resolve(self, token: str) -> Principal | None:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    "/api/users/me",
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as exc:
            logger.error("Identity service unreachable", error_type=type(exc).__name__)
            raise IdentityLookupError("Identity service unreachable") from exc

        if response.status_code in (401, 403):
            logger.info("Identity service rejected token", status_code=response.status_code)
            return None
        if response.status_code != 200:
            logger.error("Identity service error", status_code=response.status_code)
            raise IdentityLookupError(f"Identity service returned {response.status_code}")

        try:
            data = response.json()
            user_id = data["id"]
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("Identity service returned an unreadable user")
            raise IdentityLookupError("Unreadable identity response") from exc

        if not isinstance(user_id, int) or isinstance(user_id, bool):
            logger.error("Identity service returned a non-integer user id")
            raise IdentityLookupError("Non-integer user id")

        return Principal(user_id=user_id, email=data.get("email"))
