"""Transactional OTP email delivery with Brevo and SMTP fallback."""

from otp_mailer.config import EmailConfig, Settings, get_settings
from otp_mailer.services.email import (
    DeliveryResult,
    EmailSender,
    generate_otp,
    send_email,
    send_otp_email,
)

__all__ = [
    "DeliveryResult",
    "EmailConfig",
    "EmailSender",
    "Settings",
    "generate_otp",
    "get_settings",
    "send_email",
    "send_otp_email",
]
