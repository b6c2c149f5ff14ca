"""
HTTP email client for a Postmark-compatible transactional email API.

POST {base_url}/email with the server token in X-Postmark-Server-Token
and a JSON body of From/To/Subject/HtmlBody/TextBody. Non-2xx responses
and timeouts become FAILED results. Nothing is retried.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import SecretStr

from newsletter_service.domain.subscriber_email import SubscriberEmail
from newsletter_service.ports.email import EmailResult

logger = logging.getLogger(__name__)


class PostmarkEmailClient:
    def __init__(
        self,
        base_url: str,
        sender: SubscriberEmail,
        authorization_token: SecretStr,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.sender = sender
        self._authorization_token = authorization_token
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def send_email(
        self,
        recipient: SubscriberEmail,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> EmailResult:
        payload = {
            "From": self.sender.as_ref(),
            "To": recipient.as_ref(),
            "Subject": subject,
            "HtmlBody": html_body,
            "TextBody": text_body,
        }
        try:
            response = self._client.post(
                f"{self.base_url}/email",
                headers={"X-Postmark-Server-Token": self._authorization_token.get_secret_value()},
                json=payload,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Email API request failed for %s: %s", recipient, e)
            return EmailResult.failed(recipient.as_ref(), f"{type(e).__name__}: {e}")

        return EmailResult.success(recipient.as_ref())

    def close(self) -> None:
        self._client.close()
