"""
Email provider clients for transactional mail.

ResendEmailClient talks to the Resend HTTP API. LogOnlyEmailClient is the
local-development stand-in used when no API key is configured: it writes
the message to the log and reports success so the access flow can be
exercised end to end without a provider account.
"""

import json
import logging

import requests

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class EmailDeliveryError(Exception):
    """Raised when the email provider rejects or fails a send."""


class ResendEmailClient:
    """Send emails through the Resend API."""

    def __init__(self, api_key: str, from_address: str, api_url: str = RESEND_API_URL):
        """
        Initialize with provider credentials.

        Raises:
            ValueError: If api_key or from_address is empty
        """
        if not api_key:
            raise ValueError("api_key is required")
        if not from_address:
            raise ValueError("from_address is required")

        self.api_key = api_key
        self.from_address = from_address
        self.api_url = api_url

    def send_email(self, to: str, subject: str, text: str, html: str | None = None) -> str:
        """
        Send one message.

        Returns:
            Provider message id.

        Raises:
            EmailDeliveryError: On connection failure or a non-success response
        """
        payload = {
            "from": self.from_address,
            "to": [to],
            "subject": subject,
            "text": text,
        }
        if html is not None:
            payload["html"] = html

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(
                self.api_url,
                data=json.dumps(payload),
                headers=headers,
                timeout=10,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Email provider connection failed: {e}")
            raise EmailDeliveryError(f"Connection failed: {e}")

        try:
            response_data = response.json()
        except ValueError:
            logger.error(f"Email provider returned invalid JSON: {response.text}")
            raise EmailDeliveryError("Invalid response from email provider")

        if response.status_code != 200 or "id" not in response_data:
            error_msg = response_data.get("message", "Unknown error")
            logger.error(f"Email provider error ({response.status_code}): {error_msg}")
            raise EmailDeliveryError(f"Provider error: {error_msg}")

        logger.info(f"Email sent to {to}: {subject} (id={response_data['id']})")
        return response_data["id"]


class LogOnlyEmailClient:
    """Writes messages to the log instead of sending them."""

    def __init__(self, from_address: str):
        self.from_address = from_address

    def send_email(self, to: str, subject: str, text: str, html: str | None = None) -> str:
        logger.info(
            "Email delivery disabled (no API key configured)\n"
            f"To: {to}\nFrom: {self.from_address}\nSubject: {subject}\n\n{text}"
        )
        return "logged"


def create_email_client(api_key: str | None, from_address: str) -> ResendEmailClient | LogOnlyEmailClient:
    """Pick the provider client, or the log-only client when no key is set."""
    if api_key:
        return ResendEmailClient(api_key=api_key, from_address=from_address)
    logger.warning("No email API key configured; magic links will only be logged")
    return LogOnlyEmailClient(from_address=from_address)
