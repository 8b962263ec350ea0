"""Email services package."""

from otp_mailer.services.email.brevo import BrevoService
from otp_mailer.services.email.http import is_retryable, post_with_retry
from otp_mailer.services.email.otp import generate_otp, send_otp_email
from otp_mailer.services.email.sender import (
    DeliveryResult,
    DeliveryStage,
    EmailMessage,
    EmailSender,
    resolve_delivery,
    send_email,
)
from otp_mailer.services.email.smtp import SMTPService, SendResult

__all__ = [
    "BrevoService",
    "DeliveryResult",
    "DeliveryStage",
    "EmailMessage",
    "EmailSender",
    "SMTPService",
    "SendResult",
    "generate_otp",
    "is_retryable",
    "post_with_retry",
    "resolve_delivery",
    "send_email",
    "send_otp_email",
]
