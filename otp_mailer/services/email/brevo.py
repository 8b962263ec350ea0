"""Brevo transactional email API client."""

import logging
from typing import Any

import httpx

from otp_mailer.config import EmailConfig, get_settings
from otp_mailer.services.email.http import post_with_retry, status_of
from otp_mailer.services.email.smtp import SendResult

logger = logging.getLogger(__name__)


class BrevoService:
    """Service for sending emails via the Brevo HTTP API."""

    provider = "brevo"

    def __init__(
        self,
        config: EmailConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize Brevo service.

        Args:
            config: Email configuration (defaults to settings).
            client: Optional HTTP client, mainly for tests.
        """
        self.config = config or EmailConfig.from_settings(get_settings())
        self.client = client

    @property
    def is_configured(self) -> bool:
        return self.config.brevo_configured

    def build_payload(
        self,
        to_email: str,
        subject: str,
        body_text: str,
        body_html: str,
    ) -> dict[str, Any]:
        """Build the Brevo request body."""
        return {
            "sender": self.config.sender.to_dict(),
            "to": [{"email": to_email}],
            "subject": subject,
            "textContent": body_text,
            "htmlContent": body_html,
        }

    def build_headers(self) -> dict[str, str]:
        return {
            "api-key": self.config.brevo_api_key or "",
            "Content-Type": "application/json",
        }

    async def send(
        self,
        to_email: str,
        subject: str,
        body_text: str,
        body_html: str,
    ) -> SendResult:
        """Send an email through Brevo.

        Args:
            to_email: Recipient email address.
            subject: Email subject.
            body_text: Plain text body content.
            body_html: HTML body content.

        Returns:
            SendResult with the Brevo message ID when available.
        """
        if not self.is_configured:
            return SendResult(
                success=False,
                error="BREVO_API_KEY not configured",
                provider=self.provider,
            )

        payload = self.build_payload(to_email, subject, body_text, body_html)

        try:
            response = await post_with_retry(
                self.config.brevo_api_url,
                payload,
                headers=self.build_headers(),
                timeout=self.config.http_timeout,
                max_attempts=self.config.max_attempts,
                backoff=self.config.backoff_seconds,
                client=self.client,
            )
        except httpx.HTTPStatusError as e:
            detail = e.response.text or str(e)
            logger.error("Brevo send failed (status %d): %s", e.response.status_code, detail)
            return SendResult(
                success=False,
                error=f"Brevo API error {e.response.status_code}: {detail}",
                provider=self.provider,
                status_code=status_of(e),
            )
        except httpx.RequestError as e:
            logger.error("Brevo send failed: %s", e)
            return SendResult(
                success=False,
                error=f"Brevo request failed: {str(e) or type(e).__name__}",
                provider=self.provider,
            )

        return SendResult(
            success=True,
            message_id=self._extract_message_id(response),
            provider=self.provider,
            status_code=response.status_code,
        )

    def _extract_message_id(self, response: httpx.Response) -> str | None:
        """Get messageId from the response body, if present."""
        try:
            data = response.json()
        except ValueError:
            return None

        if isinstance(data, dict):
            return data.get("messageId") or None
        return None
