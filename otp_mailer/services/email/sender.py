"""Email sender with primary provider and SMTP fallback."""

import enum
import logging
from dataclasses import dataclass
from typing import Any

from otp_mailer.config import EmailConfig, get_settings
from otp_mailer.services.email.brevo import BrevoService
from otp_mailer.services.email.smtp import SMTP_NOT_CONFIGURED, SendResult, SMTPService

logger = logging.getLogger(__name__)

DEFAULT_FAILURE = "Email delivery failed"


def default_html(text: str) -> str:
    """Wrap plain text in a single paragraph."""
    return f"<p>{text}</p>"


@dataclass(frozen=True)
class EmailMessage:
    """Message to deliver."""

    to_email: str
    subject: str
    text: str
    html: str | None = None

    @property
    def body_html(self) -> str:
        return self.html or default_html(self.text)


class DeliveryStage(str, enum.Enum):
    """Where in the pipeline a delivery ended."""

    PRIMARY = "primary"
    FALLBACK = "fallback"
    FAILED = "failed"


@dataclass
class DeliveryResult:
    """Result of delivering an email.

    ``success``, ``message_id`` and ``error`` form the caller-facing result
    (see ``to_dict``). ``stage``, ``provider`` and ``primary_error`` are
    diagnostics only.
    """

    success: bool
    stage: DeliveryStage
    message_id: str | None = None
    error: str | None = None
    provider: str | None = None
    primary_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the caller-facing result shape."""
        if self.success:
            return {"success": True, "messageId": self.message_id}
        return {"success": False, "error": self.error}


def resolve_delivery(primary: SendResult | None, fallback: SendResult | None) -> DeliveryResult:
    """Decide the delivery outcome from the two stage results.

    The SMTP error wins over the primary error; the primary error is used
    only when the SMTP error is empty.

    Args:
        primary: Primary provider result, or None if it was skipped.
        fallback: SMTP result, or None if it was not reached.

    Returns:
        DeliveryResult for the caller.
    """
    primary_error = primary.error if primary is not None and not primary.success else None

    if primary is not None and primary.success:
        return DeliveryResult(
            success=True,
            stage=DeliveryStage.PRIMARY,
            message_id=primary.message_id,
            provider=primary.provider,
        )

    if fallback is not None and fallback.success:
        return DeliveryResult(
            success=True,
            stage=DeliveryStage.FALLBACK,
            message_id=fallback.message_id,
            provider=fallback.provider,
            primary_error=primary_error,
        )

    fallback_error = fallback.error if fallback is not None else None
    if fallback_error == SMTP_NOT_CONFIGURED and primary_error:
        error = f"{SMTP_NOT_CONFIGURED} (primary provider error: {primary_error})"
    else:
        error = fallback_error or primary_error or DEFAULT_FAILURE

    return DeliveryResult(
        success=False,
        stage=DeliveryStage.FAILED,
        error=error,
        primary_error=primary_error,
    )


class EmailSender:
    """Service for delivering emails with retries and fallback."""

    def __init__(
        self,
        config: EmailConfig | None = None,
        brevo: BrevoService | None = None,
        smtp: SMTPService | None = None,
    ) -> None:
        """Initialize email sender.

        Args:
            config: Email configuration (defaults to settings).
            brevo: Primary provider service.
            smtp: SMTP fallback service.
        """
        self.config = config or EmailConfig.from_settings(get_settings())
        self.brevo = brevo or BrevoService(self.config)
        self.smtp = smtp or SMTPService(self.config)

    async def send_email(
        self,
        to_email: str,
        subject: str,
        text: str,
        html: str | None = None,
    ) -> DeliveryResult:
        """Send an email, falling back to SMTP when Brevo is unavailable.

        Never raises; every failure is reported in the result.

        Args:
            to_email: Recipient email address.
            subject: Email subject.
            text: Plain text body.
            html: HTML body (defaults to the text wrapped in a paragraph).

        Returns:
            DeliveryResult with status.
        """
        message = EmailMessage(to_email=to_email, subject=subject, text=text, html=html)

        primary: SendResult | None = None
        if self.brevo.is_configured:
            primary = await self._send_primary(message)
            if primary.success:
                result = resolve_delivery(primary, None)
                logger.info("Email to %s delivered via %s", to_email, result.provider)
                return result
        else:
            logger.warning("BREVO_API_KEY not set, attempting SMTP fallback")

        fallback = await self._send_fallback(message)
        result = resolve_delivery(primary, fallback)

        if result.success:
            logger.info("Email to %s delivered via %s", to_email, result.provider)
        else:
            logger.error("Email to %s not delivered: %s", to_email, result.error)

        return result

    async def _send_primary(self, message: EmailMessage) -> SendResult:
        try:
            return await self.brevo.send(
                to_email=message.to_email,
                subject=message.subject,
                body_text=message.text,
                body_html=message.body_html,
            )
        except Exception as e:
            logger.exception("Brevo send raised unexpectedly")
            return SendResult(success=False, error=str(e) or type(e).__name__, provider=BrevoService.provider)

    async def _send_fallback(self, message: EmailMessage) -> SendResult:
        try:
            return await self.smtp.send(
                to_email=message.to_email,
                subject=message.subject,
                body_html=message.body_html,
                body_text=message.text,
            )
        except Exception as e:
            logger.exception("SMTP send raised unexpectedly")
            return SendResult(success=False, error=str(e) or None, provider=SMTPService.provider)


async def send_email(
    to_email: str,
    subject: str,
    text: str,
    html: str | None = None,
) -> DeliveryResult:
    """Send an email using configuration from the environment."""
    return await EmailSender().send_email(to_email, subject, text, html)
