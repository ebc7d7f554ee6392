"""Async client for the transactional email API."""

from __future__ import annotations

import httpx
import structlog

from pictoria.errors import UpstreamError

logger = structlog.get_logger(__name__)


class EmailClient:
    """Sends HTML emails through the provider's ``/emails`` endpoint."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        base_url: str = "https://api.resend.com",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.sender = sender
        self.session = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout_seconds),
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )

    async def send(self, to: list[str], subject: str, html: str) -> str:
        """Send one message and return the provider's message id."""
        try:
            response = await self.session.post(
                "/emails",
                json={"from": self.sender, "to": to, "subject": subject, "html": html},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("email.send_failed", subject=subject, error=str(exc))
            raise UpstreamError.from_httpx("email.send", exc) from exc

        message_id = str(response.json().get("id", ""))
        logger.info("email.sent", subject=subject, message_id=message_id)
        return message_id

    async def close(self) -> None:
        await self.session.aclose()
