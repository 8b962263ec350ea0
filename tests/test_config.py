"""Tests for settings and email configuration."""

from collections.abc import Iterator

import pytest

from otp_mailer.config import EmailConfig, SenderIdentity, Settings, get_settings

ENV_VARS = (
    "BREVO_API_URL",
    "BREVO_API_KEY",
    "EMAIL_USER",
    "EMAIL_PASS",
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_SECURE",
    "EMAIL_SERVICE",
    "EMAIL_FROM",
    "EMAIL_FROM_NAME",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    """Remove email variables from the environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test defaults without environment."""
        settings = Settings(_env_file=None)

        assert settings.brevo_api_url == "https://api.brevo.com/v3/smtp/email"
        assert settings.brevo_api_key == ""
        assert settings.smtp_port == 587
        assert settings.smtp_secure is False
        assert settings.email_service == "gmail"
        assert settings.email_max_attempts == 3
        assert settings.email_backoff_seconds == 0.5
        assert settings.email_http_timeout == 15.0

    def test_reads_environment(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test environment variable names."""
        clean_env.setenv("BREVO_API_KEY", "xkeysib-123")
        clean_env.setenv("EMAIL_USER", "me@gmail.com")
        clean_env.setenv("EMAIL_PASS", "app-password")
        clean_env.setenv("SMTP_HOST", "mail.example.com")
        clean_env.setenv("SMTP_PORT", "465")
        clean_env.setenv("SMTP_SECURE", "true")

        settings = Settings(_env_file=None)

        assert settings.brevo_api_key == "xkeysib-123"
        assert settings.smtp_user == "me@gmail.com"
        assert settings.smtp_password == "app-password"
        assert settings.smtp_host == "mail.example.com"
        assert settings.smtp_port == 465
        assert settings.smtp_secure is True

    @pytest.mark.parametrize("value", ["1", "yes", "TRUEISH", ""])
    def test_secure_requires_literal_true(self, clean_env: pytest.MonkeyPatch, value: str) -> None:
        """Test only "true" enables implicit TLS."""
        clean_env.setenv("SMTP_SECURE", value)

        assert Settings(_env_file=None).smtp_secure is False

    def test_empty_port_uses_default(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test an empty SMTP_PORT falls back to 587."""
        clean_env.setenv("SMTP_PORT", "")

        assert Settings(_env_file=None).smtp_port == 587


class TestEmailConfig:
    """Tests for EmailConfig."""

    def test_sender_prefers_email_from(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test EMAIL_FROM wins over EMAIL_USER."""
        settings = Settings(_env_file=None, EMAIL_FROM="from@example.com", EMAIL_USER="user@example.com")

        config = EmailConfig.from_settings(settings)

        assert config.sender == SenderIdentity(email="from@example.com", name="Car Rental")

    def test_sender_falls_back_to_smtp_user(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test EMAIL_USER is used when EMAIL_FROM is unset."""
        settings = Settings(_env_file=None, EMAIL_FROM="", EMAIL_USER="user@example.com")

        assert EmailConfig.from_settings(settings).sender.email == "user@example.com"

    def test_sender_fixed_fallback(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test the fixed sender when nothing is configured."""
        config = EmailConfig.from_settings(Settings(_env_file=None))

        assert config.sender.email == "no-reply@yourdomain.com"
        assert config.sender.formatted == "Car Rental <no-reply@yourdomain.com>"

    def test_empty_strings_become_none(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test unset credentials mark both paths unconfigured."""
        config = EmailConfig.from_settings(Settings(_env_file=None))

        assert config.brevo_api_key is None
        assert config.brevo_configured is False
        assert config.smtp_configured is False

    def test_smtp_configured_needs_user_and_password(self) -> None:
        """Test both SMTP credentials are required."""
        sender = SenderIdentity(email="a@b.com", name="A")

        assert EmailConfig(sender=sender, smtp_user="u").smtp_configured is False
        assert EmailConfig(sender=sender, smtp_user="u", smtp_password="p").smtp_configured is True

    def test_resolve_transport_explicit_host(self) -> None:
        """Test an explicit host uses host, port and secure flag."""
        config = EmailConfig(
            sender=SenderIdentity(email="a@b.com", name="A"),
            smtp_host="mail.example.com",
            smtp_port=2525,
            smtp_secure=True,
        )

        transport = config.resolve_smtp_transport()

        assert (transport.host, transport.port, transport.secure) == ("mail.example.com", 2525, True)

    def test_resolve_transport_named_service(self) -> None:
        """Test the service shorthand is case-insensitive."""
        config = EmailConfig(sender=SenderIdentity(email="a@b.com", name="A"), email_service="Outlook365")

        transport = config.resolve_smtp_transport()

        assert transport.host == "smtp.office365.com"
        assert transport.port == 587
        assert transport.secure is False

    def test_resolve_transport_unknown_service(self) -> None:
        """Test unknown service names are rejected."""
        config = EmailConfig(sender=SenderIdentity(email="a@b.com", name="A"), email_service="nope")

        with pytest.raises(ValueError):
            config.resolve_smtp_transport()
