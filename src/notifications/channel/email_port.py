"""Email channel port - abstract interface for email dispatch."""

from abc import ABC, abstractmethod


class EmailPort(ABC):
    """Abstract interface for email dispatch adapters."""

    @abstractmethod
    async def send(
        self,
        to: list[str],
        subject: str,
        body: str,
        html_body: str | None = None,
        reply_to: str | None = None,
        tags: dict[str, str] | None = None,
    ) -> dict:
        """Send an email message.

        Adapters may raise on transport failures; a provider that accepts the
        request but refuses the message is reported as ``status="failed"``.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
