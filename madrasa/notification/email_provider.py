"""Resend transactional email client.

Thin wrapper over ``POST /emails`` of the Resend REST API using
``httpx.AsyncClient``.  One message per call, one recipient per
message.  Every failure surfaces as ``EmailProviderError`` so callers
only have one exception type to isolate.
"""
from __future__ import annotations

import httpx

from madrasa.core.settings import Settings


class EmailProviderError(RuntimeError):
    """Raised when the provider rejects a message or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResendClient:
    """Send single-recipient emails through Resend.

    Parameters
    ----------
    api_key:
        Resend API key, sent as a bearer token.
    base_url:
        API root, ``https://api.resend.com`` unless overridden.
    timeout:
        Per-request HTTP timeout in seconds.
    transport:
        Optional ``httpx`` transport; tests pass an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.resend.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> ResendClient:
        return cls(
            api_key=settings.resend_api_key or "",
            base_url=settings.resend_api_url,
            timeout=settings.email_send_timeout_seconds,
        )

    async def send(
        self,
        from_address: str,
        to: str,
        subject: str,
        html: str,
        text: str,
    ) -> str:
        """Deliver one message and return the provider's message id."""
        payload = {
            "from": from_address,
            "to": [to],
            "subject": subject,
            "html": html,
            "text": text,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post("/emails", json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            raise EmailProviderError(f"Resend request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise EmailProviderError(f"Resend request failed: {exc}") from exc

        if response.status_code >= 400:
            raise EmailProviderError(
                f"Resend returned HTTP {response.status_code}: {_error_message(response)}",
                status_code=response.status_code,
            )

        try:
            return str(response.json()["id"])
        except (ValueError, KeyError, TypeError) as exc:
            raise EmailProviderError("Resend response did not include a message id") from exc


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("message") or body.get("name") or body)
    return str(body)
