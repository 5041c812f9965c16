"""FastAPI dependencies for the Notifications API.

Settings and the email transport are built once per process. Tests replace
any of these with ``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends

from notifications.channel import build_email_transport
from notifications.channel.email_port import EmailPort
from notifications.config import EmailSettings
from notifications.notification.dispatch import NotificationDispatcher
from notifications.templates import ORDER_STATUS_CATEGORY, get_template


@lru_cache
def get_email_settings() -> EmailSettings:
    return EmailSettings.from_env()


@lru_cache
def get_email_transport() -> EmailPort:
    return build_email_transport(get_email_settings())


def get_dispatcher(
    transport: EmailPort = Depends(get_email_transport),
    settings: EmailSettings = Depends(get_email_settings),
) -> NotificationDispatcher:
    return NotificationDispatcher(transport=transport, recipient_override=settings.effective_recipient_override)


def get_order_status_renderer():
    """Renderer turning template context into ``{"subject", "body"}``."""
    return get_template(ORDER_STATUS_CATEGORY)
