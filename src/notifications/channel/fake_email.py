"""Fake email adapter - records sent emails for testing."""

from uuid import uuid4

from notifications.channel.email_port import EmailPort


class FakeEmailAdapter(EmailPort):
    """Email adapter that records messages in memory for test assertions.

    ``configure`` controls outcomes: every call can succeed or fail, the first
    ``fail_times`` calls can fail before it recovers, and ``raise_error``
    makes calls raise instead of reporting a failure.
    """

    def __init__(self):
        self.sent_emails: list[dict] = []
        self.call_count = 0
        self.should_succeed = True
        self.failure_reason = "Email delivery failed"
        self.fail_times = 0
        self.raise_error: Exception | None = None

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Email delivery failed",
        fail_times: int = 0,
        raise_error: Exception | None = None,
    ):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.fail_times = fail_times
        self.raise_error = raise_error

    async def send(
        self,
        to: list[str],
        subject: str,
        body: str,
        html_body: str | None = None,
        reply_to: str | None = None,
        tags: dict[str, str] | None = None,
    ) -> dict:
        self.call_count += 1

        if self.call_count <= self.fail_times or not self.should_succeed:
            if self.raise_error is not None:
                raise self.raise_error
            return {
                "message_id": None,
                "status": "failed",
                "error": self.failure_reason,
            }

        message_id = f"email-{uuid4().hex[:12]}"
        record = {
            "message_id": message_id,
            "to": list(to),
            "subject": subject,
            "body": body,
            "html_body": html_body,
            "reply_to": reply_to,
            "tags": dict(tags or {}),
        }
        self.sent_emails.append(record)

        return {"message_id": message_id, "status": "sent"}

    def reset(self):
        """Clear sent emails (useful between tests)."""
        self.sent_emails.clear()
        self.call_count = 0
        self.should_succeed = True
        self.failure_reason = "Email delivery failed"
        self.fail_times = 0
        self.raise_error = None
