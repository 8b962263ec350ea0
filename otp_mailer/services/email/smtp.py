"""SMTP service for the fallback delivery path."""

import logging
import uuid
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from otp_mailer.config import EmailConfig, get_settings

logger = logging.getLogger(__name__)

SMTP_NOT_CONFIGURED = "SMTP credentials not configured"


@dataclass
class SendResult:
    """Result of one delivery mechanism."""

    success: bool
    message_id: str | None = None
    error: str | None = None
    provider: str | None = None
    status_code: int | None = None
    smtp_response: str | None = None


class SMTPService:
    """Service for sending emails via SMTP."""

    provider = "smtp"

    def __init__(self, config: EmailConfig | None = None) -> None:
        """Initialize SMTP service.

        Args:
            config: Email configuration (defaults to settings).
        """
        self.config = config or EmailConfig.from_settings(get_settings())

    @property
    def is_configured(self) -> bool:
        return self.config.smtp_configured

    def _create_message(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: str,
        message_id: str,
    ) -> MIMEMultipart:
        """Create MIME message.

        Args:
            to_email: Recipient email address.
            subject: Email subject.
            body_html: HTML body content.
            body_text: Plain text body content.
            message_id: Message-ID header value.

        Returns:
            MIME multipart message.
        """
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.config.sender.formatted
        msg["To"] = to_email
        msg["Message-ID"] = message_id

        # Attach plain text and HTML parts
        msg.attach(MIMEText(body_text, "plain", "utf-8"))
        msg.attach(MIMEText(body_html, "html", "utf-8"))

        return msg

    async def send(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: str,
    ) -> SendResult:
        """Send an email over a freshly opened SMTP connection.

        Args:
            to_email: Recipient email address.
            subject: Email subject.
            body_html: HTML body content.
            body_text: Plain text body content.

        Returns:
            SendResult with success status and message ID.
        """
        if not self.is_configured:
            return SendResult(
                success=False,
                error=SMTP_NOT_CONFIGURED,
                provider=self.provider,
            )

        try:
            transport = self.config.resolve_smtp_transport()
        except ValueError as e:
            logger.error("SMTP fallback failed: %s", e)
            return SendResult(success=False, error=str(e), provider=self.provider)

        message_id = f"<{uuid.uuid4()}@{transport.host}>"
        msg = self._create_message(
            to_email=to_email,
            subject=subject,
            body_html=body_html,
            body_text=body_text,
            message_id=message_id,
        )

        # Implicit TLS when secure, otherwise STARTTLS if the server offers it
        smtp = aiosmtplib.SMTP(
            hostname=transport.host,
            port=transport.port,
            timeout=self.config.smtp_timeout,
            use_tls=transport.secure,
        )

        try:
            await smtp.connect()
            await smtp.login(self.config.smtp_user, self.config.smtp_password)
            response = await smtp.send_message(msg)
            await smtp.quit()

        except aiosmtplib.SMTPAuthenticationError as e:
            return self._failure(f"Authentication failed: {e}")
        except aiosmtplib.SMTPConnectError as e:
            return self._failure(f"Connection failed: {e}")
        except aiosmtplib.SMTPRecipientsRefused as e:
            return self._failure(f"Recipient refused: {e}")
        except Exception as e:
            return self._failure(f"SMTP send failed: {e}" if str(e) else "SMTP send failed")
        finally:
            if smtp.is_connected:
                smtp.close()

        return SendResult(
            success=True,
            message_id=message_id,
            provider=self.provider,
            smtp_response=str(response),
        )

    def _failure(self, error: str) -> SendResult:
        logger.error("SMTP fallback failed: %s", error)
        return SendResult(success=False, error=error, provider=self.provider)
