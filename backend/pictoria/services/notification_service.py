"""Training notification emails."""

from __future__ import annotations

from html import escape

from pictoria.clients.email_client import EmailClient
from pictoria.clients.identity_client import UserProfile

EMAIL_TEMPLATE = """\
<div style="font-family: sans-serif; line-height: 1.5">
  <h1>Welcome, {user_name}!</h1>
  <p>{message}</p>
  <p>The Pictoria AI team</p>
</div>
"""


def render_email(user_name: str, message: str) -> str:
    return EMAIL_TEMPLATE.format(user_name=escape(user_name), message=escape(message))


class NotificationService:
    def __init__(self, email: EmailClient) -> None:
        self.email = email

    async def training_succeeded(self, user: UserProfile) -> None:
        await self.email.send(
            to=[user.email],
            subject="Model training completed",
            html=render_email(user.full_name, "Your model training has been completed."),
        )

    async def training_ended(self, user: UserProfile, status: str) -> None:
        """Failed or canceled runs."""
        await self.email.send(
            to=[user.email],
            subject=f"Model training {status}",
            html=render_email(user.full_name, f"Your model has been {status}."),
        )
