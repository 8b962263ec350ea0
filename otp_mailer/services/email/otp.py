"""One-time passcode generation and delivery."""

import secrets
from dataclasses import dataclass

from otp_mailer.services.email.sender import DeliveryResult, EmailSender

OTP_MIN = 100000
OTP_MAX = 999999
OTP_VALIDITY_MINUTES = 5


@dataclass(frozen=True)
class OtpTemplate:
    """Subject and body template for an OTP email."""

    subject: str
    purpose: str

    def render(self, otp: str) -> str:
        return (
            f"Your OTP for {self.purpose} is: {otp}. "
            f"This OTP will expire in {OTP_VALIDITY_MINUTES} minutes."
        )


VERIFICATION_TEMPLATE = OtpTemplate(subject="Email Verification OTP", purpose="email verification")
PASSWORD_RESET_TEMPLATE = OtpTemplate(subject="Password Reset OTP", purpose="password reset")


def generate_otp() -> str:
    """Generate a random 6-digit OTP in [100000, 999999]."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


async def send_otp_email(
    email: str,
    otp: str,
    is_password_reset: bool = False,
    sender: EmailSender | None = None,
) -> DeliveryResult:
    """Send a verification or password-reset OTP.

    Args:
        email: Recipient email address.
        otp: Passcode to embed.
        is_password_reset: Use the password reset template.
        sender: Email sender (defaults to one built from settings).

    Returns:
        DeliveryResult with status.
    """
    template = PASSWORD_RESET_TEMPLATE if is_password_reset else VERIFICATION_TEMPLATE
    sender = sender or EmailSender()
    return await sender.send_email(email, template.subject, template.render(otp))
