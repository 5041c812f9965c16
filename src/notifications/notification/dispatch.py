"""Notification dispatcher - sends notifications through an email transport.

Delivery is attempted up to ``BackoffPolicy.max_attempts`` times with capped
exponential backoff between attempts. A configured recipient override
replaces the recipients before the first attempt and the substitution is
logged. ``dispatch`` never raises: every failure ends up in the returned
NotificationResult.

There is no deduplication. Two dispatches of the same request each make
their own attempts (at-least-once delivery).
"""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field

import structlog

from notifications.channel.email_port import EmailPort
from notifications.notification.retry import BackoffPolicy, retry_with_policy
from shared.errors import TransientDeliveryError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NotificationRequest:
    recipients: tuple[str, ...]
    subject: str
    body: str
    html_body: str | None = None
    reply_to: str | None = None
    tags: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def to(cls, recipient: str | list[str], subject: str, body: str, **kwargs) -> "NotificationRequest":
        recipients = (recipient,) if isinstance(recipient, str) else tuple(recipient)
        return cls(recipients=recipients, subject=subject, body=body, **kwargs)


@dataclass(frozen=True)
class NotificationResult:
    success: bool
    attempt_number: int
    provider_message_id: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        data = {"success": self.success, "attempt_number": self.attempt_number}
        if self.provider_message_id:
            data["provider_message_id"] = self.provider_message_id
        if self.error:
            data["error"] = self.error
        return data


class NotificationDispatcher:
    """Delivers notifications with bounded retries."""

    def __init__(
        self,
        transport: EmailPort,
        recipient_override: str | None = None,
        policy: BackoffPolicy | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ):
        self.transport = transport
        self.recipient_override = recipient_override
        self.policy = policy or BackoffPolicy()
        self.sleep = sleep

    def _resolve_recipients(self, request: NotificationRequest) -> tuple[str, ...]:
        if not self.recipient_override:
            return request.recipients
        logger.warning(
            "Recipient override active, notification redirected",
            original_recipients=list(request.recipients),
            override=self.recipient_override,
            subject=request.subject,
        )
        return (self.recipient_override,)

    async def dispatch(
        self,
        request: NotificationRequest,
        should_continue: Callable[[], object] | None = None,
    ) -> NotificationResult:
        """Send `request`, retrying transport failures.

        Args:
            should_continue: Optional callable (sync or async) checked before
                every retry. Returning False stops further attempts, e.g. when
                the caller has gone away.
        """
        try:
            recipients = self._resolve_recipients(request)
            recipient_text = ", ".join(recipients)
            max_attempts = self.policy.max_attempts

            async def attempt(attempt_number: int) -> dict:
                logger.info(
                    "Sending notification",
                    attempt=attempt_number,
                    max_attempts=max_attempts,
                    recipient=recipient_text,
                    subject=request.subject,
                )
                response = await self.transport.send(
                    to=list(recipients),
                    subject=request.subject,
                    body=request.body,
                    html_body=request.html_body,
                    reply_to=request.reply_to,
                    tags=dict(request.tags),
                )
                if response.get("status") != "sent":
                    raise TransientDeliveryError(response.get("error") or "Provider reported a failed send")
                return response

            def on_failure(attempt_number: int, exc: Exception) -> None:
                logger.warning(
                    "Notification attempt failed",
                    attempt=attempt_number,
                    max_attempts=max_attempts,
                    recipient=recipient_text,
                    subject=request.subject,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )

            outcome = await retry_with_policy(
                attempt,
                self.policy,
                sleep=self.sleep,
                should_continue=should_continue,
                on_failure=on_failure,
            )
        except Exception as exc:
            logger.exception("Notification dispatch failed unexpectedly", subject=request.subject)
            return NotificationResult(success=False, attempt_number=0, error=str(exc) or type(exc).__name__)

        if outcome.succeeded:
            message_id = outcome.value.get("message_id")
            logger.info(
                "Notification sent",
                attempt=outcome.attempts,
                recipient=recipient_text,
                provider_message_id=message_id,
            )
            return NotificationResult(success=True, attempt_number=outcome.attempts, provider_message_id=message_id)

        if outcome.abandoned:
            logger.warning(
                "Notification retries abandoned, caller no longer waiting",
                attempt=outcome.attempts,
                recipient=recipient_text,
            )
        else:
            logger.error(
                "All notification attempts failed",
                attempts=outcome.attempts,
                recipient=recipient_text,
                subject=request.subject,
            )
        return NotificationResult(
            success=False,
            attempt_number=outcome.attempts,
            error=str(outcome.error) or type(outcome.error).__name__,
        )


async def send_test_email(dispatcher: NotificationDispatcher, to: str, environment: str = "development"):
    """Send a short message to check that email delivery works end to end."""
    request = NotificationRequest.to(
        to,
        subject="Test email from the storefront notification service",
        body=(
            "This is a test email from the storefront notification service.\n\n"
            f"Environment: {environment}\n"
            f"Recipient override: {'active' if dispatcher.recipient_override else 'inactive'}\n\n"
            "If you received this, email delivery is working."
        ),
        tags={"category": "test"},
    )
    return await dispatcher.dispatch(request)
