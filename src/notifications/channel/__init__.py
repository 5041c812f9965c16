"""Email transport factory.

Builds the transport the dispatcher is constructed with: ResendEmailAdapter
when an API key is configured, FakeEmailAdapter otherwise. There is no
module-level singleton; the FastAPI dependency layer caches the instance.
"""

import structlog

from notifications.channel.email_port import EmailPort
from notifications.channel.fake_email import FakeEmailAdapter
from notifications.channel.resend_email import ResendEmailAdapter

logger = structlog.get_logger(__name__)


def build_email_transport(settings) -> EmailPort:
    """Return an email transport for the given EmailSettings."""
    if settings.api_key:
        return ResendEmailAdapter(api_key=settings.api_key, sender=settings.sender)

    logger.warning("RESEND_API_KEY not set, emails are recorded in memory and not delivered")
    return FakeEmailAdapter()
