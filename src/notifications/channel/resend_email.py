"""Resend email adapter - sends through the Resend REST API with httpx."""

import httpx
import structlog

from notifications.channel.email_port import EmailPort

logger = structlog.get_logger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
DEFAULT_TIMEOUT_SECONDS = 10.0


class ResendEmailAdapter(EmailPort):
    """Email adapter for Resend.

    Network errors propagate as ``httpx.HTTPError`` so the caller can retry.
    A non-2xx answer from Resend is returned as a failed send carrying the
    provider's error message.
    """

    def __init__(
        self,
        api_key: str,
        sender: str,
        api_url: str = RESEND_API_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.sender = sender
        self.api_url = api_url
        self.timeout = timeout
        self._transport = transport

    def _build_payload(self, to, subject, body, html_body, reply_to, tags) -> dict:
        payload = {
            "from": self.sender,
            "to": list(to),
            "subject": subject,
            "text": body,
        }
        if html_body:
            payload["html"] = html_body
        if reply_to:
            payload["reply_to"] = reply_to
        if tags:
            payload["tags"] = [{"name": name, "value": value} for name, value in tags.items()]
        return payload

    async def send(
        self,
        to: list[str],
        subject: str,
        body: str,
        html_body: str | None = None,
        reply_to: str | None = None,
        tags: dict[str, str] | None = None,
    ) -> dict:
        payload = self._build_payload(to, subject, body, html_body, reply_to, tags)
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )

        if response.is_success:
            try:
                message_id = response.json().get("id")
            except ValueError:
                logger.warning("Resend accepted email with an unreadable body", status_code=response.status_code)
                message_id = None
            return {"message_id": message_id, "status": "sent"}

        try:
            error = response.json().get("message") or response.reason_phrase
        except ValueError:
            error = response.reason_phrase
        logger.warning("Resend rejected email", status_code=response.status_code)
        return {"message_id": None, "status": "failed", "error": f"Resend error {response.status_code}: {error}"}
