"""Magic-link email construction and dispatch.

The email provider is an external collaborator (clients/email_client.py);
this module owns the message itself and turns provider failures into
DispatchError for the caller.
"""

import html
import logging
from dataclasses import dataclass
from urllib.parse import quote

from auth.config import AuthConfig
from clients.email_client import EmailDeliveryError, LogOnlyEmailClient, ResendEmailClient
from core.exceptions import DispatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailMessage:
    """A rendered transactional email."""

    to: str
    subject: str
    text: str
    html: str


def build_access_url(base_url: str, token: str) -> str:
    """Deep link that carries the token as a query parameter."""
    return f"{base_url.rstrip('/')}/access?token={quote(token, safe='')}"


def build_magic_link_email(
    email: str,
    token: str,
    video_title: str,
    config: AuthConfig,
) -> EmailMessage:
    """Render the access email for one magic link."""
    access_url = build_access_url(config.app_base_url, token)
    app_name = config.app_name

    text = f"""Your secure access link for "{video_title}" is ready.

Click here to access your training video: {access_url}

Important:
- This link expires in 24 hours
- The link can only be used once
- Your viewing activity will be tracked for compliance

If you didn't request this access link, please ignore this email.

{app_name} Security Team
"""

    safe_title = html.escape(video_title)
    safe_url = html.escape(access_url, quote=True)
    safe_app = html.escape(app_name)
    body_html = f"""<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"><title>{safe_app} Access Link</title></head>
<body style="font-family: Arial, sans-serif; background-color: #f8fafc;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px; background-color: white;">
    <h1 style="color: #3b82f6;">{safe_app}</h1>
    <h2>Your Training Video is Ready</h2>
    <p>Your secure access link for <strong>"{safe_title}"</strong> is ready for viewing.</p>
    <p style="text-align: center;">
      <a href="{safe_url}" style="background-color: #3b82f6; color: white; padding: 12px 24px; text-decoration: none;">Access Training Video</a>
    </p>
    <ul>
      <li>This link expires in <strong>24 hours</strong></li>
      <li>The link can only be used <strong>once</strong></li>
      <li>Your viewing activity will be <strong>tracked for compliance</strong></li>
    </ul>
    <p style="color: #9ca3af; font-size: 12px;">If you didn't request this access link, please ignore this email.</p>
  </div>
</body>
</html>
"""

    return EmailMessage(
        to=email,
        subject=f'{app_name}: Access Link for "{video_title}"',
        text=text,
        html=body_html,
    )


class MagicLinkDispatcher:
    """Sends magic-link emails through the configured provider client."""

    def __init__(self, email_client: ResendEmailClient | LogOnlyEmailClient, config: AuthConfig):
        self._email_client = email_client
        self._config = config

    def dispatch(self, email: str, token: str, video_title: str) -> None:
        """Send the access email.

        Raises:
            DispatchError: If the provider could not deliver it.
        """
        message = build_magic_link_email(email, token, video_title, self._config)
        try:
            self._email_client.send_email(
                to=message.to,
                subject=message.subject,
                text=message.text,
                html=message.html,
            )
        except EmailDeliveryError as e:
            raise DispatchError(f"Failed to send access email to {email}") from e
