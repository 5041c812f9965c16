"""Identity provider factory.

Uses HttpIdentityProvider when IDENTITY_API_URL is set and FakeIdentityProvider
otherwise. Routes receive the provider through FastAPI dependency injection,
so tests replace it with ``app.dependency_overrides``.
"""

import os

from ordering.identity.fake_adapter import FakeIdentityProvider
from ordering.identity.http_adapter import HttpIdentityProvider
from ordering.identity.port import IdentityProvider, Principal

__all__ = ["IdentityProvider", "Principal", "build_identity_provider"]


def build_identity_provider(environ=None) -> IdentityProvider:
    environ = os.environ if environ is None else environ
    base_url = environ.get("IDENTITY_API_URL")
    if base_url:
        return HttpIdentityProvider(base_url)
    return FakeIdentityProvider()
