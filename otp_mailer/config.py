from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SENDER_EMAIL = "no-reply@yourdomain.com"
DEFAULT_SENDER_NAME = "Car Rental"


class Settings(BaseSettings):
    """Email delivery settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Brevo
    brevo_api_url: str = Field(default="https://api.brevo.com/v3/smtp/email", validation_alias="BREVO_API_URL")
    brevo_api_key: str = Field(default="", validation_alias="BREVO_API_KEY")

    # SMTP fallback
    smtp_user: str = Field(default="", validation_alias="EMAIL_USER")
    smtp_password: str = Field(default="", validation_alias="EMAIL_PASS")
    smtp_host: str = Field(default="", validation_alias="SMTP_HOST")
    smtp_port: int = Field(default=587, validation_alias="SMTP_PORT")
    smtp_secure: bool = Field(default=False, validation_alias="SMTP_SECURE")
    email_service: str = Field(default="gmail", validation_alias="EMAIL_SERVICE")
    smtp_timeout: float = Field(default=30.0, validation_alias="SMTP_TIMEOUT")

    # Sender identity
    email_from: str = Field(default="", validation_alias="EMAIL_FROM")
    email_from_name: str = Field(default=DEFAULT_SENDER_NAME, validation_alias="EMAIL_FROM_NAME")

    # Retry policy
    email_http_timeout: float = Field(default=15.0, validation_alias="EMAIL_HTTP_TIMEOUT")
    email_max_attempts: int = Field(default=3, validation_alias="EMAIL_MAX_ATTEMPTS")
    email_backoff_seconds: float = Field(default=0.5, validation_alias="EMAIL_BACKOFF_SECONDS")

    @field_validator("smtp_secure", mode="before")
    @classmethod
    def _parse_secure(cls, value: object) -> bool:
        # Only the literal "true" turns implicit TLS on
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() == "true"

    @field_validator("smtp_port", mode="before")
    @classmethod
    def _default_port(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return 587
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@dataclass(frozen=True)
class SenderIdentity:
    """Display name and address used in the "from" field."""

    email: str
    name: str

    @property
    def formatted(self) -> str:
        """Get RFC 5322 style "Name <email>" string."""
        return f"{self.name} <{self.email}>"

    def to_dict(self) -> dict[str, str]:
        return {"email": self.email, "name": self.name}


@dataclass(frozen=True)
class SMTPTransport:
    """Resolved SMTP connection target."""

    host: str
    port: int
    secure: bool


# Named-service shorthands: service -> (host, port, implicit TLS)
WELL_KNOWN_SMTP_SERVICES: dict[str, tuple[str, int, bool]] = {
    "gmail": ("smtp.gmail.com", 465, True),
    "googlemail": ("smtp.gmail.com", 465, True),
    "outlook365": ("smtp.office365.com", 587, False),
    "hotmail": ("smtp-mail.outlook.com", 587, False),
    "outlook": ("smtp-mail.outlook.com", 587, False),
    "yahoo": ("smtp.mail.yahoo.com", 465, True),
    "zoho": ("smtp.zoho.com", 465, True),
    "icloud": ("smtp.mail.me.com", 587, False),
    "sendinblue": ("smtp-relay.brevo.com", 587, False),
    "brevo": ("smtp-relay.brevo.com", 587, False),
    "mailgun": ("smtp.mailgun.org", 465, True),
    "sendgrid": ("smtp.sendgrid.net", 587, False),
}


@dataclass(frozen=True)
class EmailConfig:
    """Explicit configuration for the email delivery pipeline.

    Missing API key skips the primary provider, missing SMTP credentials make
    the fallback fail gracefully, and a missing SMTP host selects the named
    service shorthand.
    """

    sender: SenderIdentity
    brevo_api_url: str = "https://api.brevo.com/v3/smtp/email"
    brevo_api_key: str | None = None
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_secure: bool = False
    email_service: str = "gmail"
    smtp_timeout: float = 30.0
    http_timeout: float = 15.0
    max_attempts: int = 3
    backoff_seconds: float = 0.5

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "EmailConfig":
        """Build config from settings, applying sender fallbacks.

        Args:
            settings: Settings instance (defaults to cached settings).

        Returns:
            EmailConfig instance.
        """
        settings = settings or get_settings()
        sender = SenderIdentity(
            email=settings.email_from or settings.smtp_user or DEFAULT_SENDER_EMAIL,
            name=settings.email_from_name or DEFAULT_SENDER_NAME,
        )
        return cls(
            sender=sender,
            brevo_api_url=settings.brevo_api_url,
            brevo_api_key=settings.brevo_api_key or None,
            smtp_user=settings.smtp_user or None,
            smtp_password=settings.smtp_password or None,
            smtp_host=settings.smtp_host or None,
            smtp_port=settings.smtp_port,
            smtp_secure=settings.smtp_secure,
            email_service=settings.email_service or "gmail",
            smtp_timeout=settings.smtp_timeout,
            http_timeout=settings.email_http_timeout,
            max_attempts=settings.email_max_attempts,
            backoff_seconds=settings.email_backoff_seconds,
        )

    @property
    def brevo_configured(self) -> bool:
        return bool(self.brevo_api_key)

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_user and self.smtp_password)

    def resolve_smtp_transport(self) -> SMTPTransport:
        """Resolve the SMTP host to connect to.

        Returns:
            SMTPTransport from the explicit host, or from the named service.

        Raises:
            ValueError: If no host is set and the service name is unknown.
        """
        if self.smtp_host:
            return SMTPTransport(host=self.smtp_host, port=self.smtp_port, secure=self.smtp_secure)

        service = self.email_service.strip().lower()
        if service not in WELL_KNOWN_SMTP_SERVICES:
            raise ValueError(f"Unknown email service: {self.email_service}")

        host, port, secure = WELL_KNOWN_SMTP_SERVICES[service]
        return SMTPTransport(host=host, port=port, secure=secure)
