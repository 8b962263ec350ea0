from collections.abc import Callable
from typing import Any

import httpx
import pytest

from otp_mailer.config import EmailConfig, SenderIdentity


def make_config(**overrides: Any) -> EmailConfig:
    """Build an EmailConfig with both delivery paths configured."""
    values = {
        "sender": SenderIdentity(email="noreply@test.com", name="Test App"),
        "brevo_api_url": "https://api.brevo.test/v3/smtp/email",
        "brevo_api_key": "brevo-test-key",
        "smtp_user": "user@test.com",
        "smtp_password": "password123",
        "smtp_host": "smtp.test.com",
        "smtp_port": 587,
        "backoff_seconds": 0.5,
    }
    values.update(overrides)
    return EmailConfig(**values)


@pytest.fixture
def email_config() -> EmailConfig:
    """Config with Brevo and SMTP configured."""
    return make_config()


@pytest.fixture
def mock_http() -> Callable[[list[httpx.Response]], tuple[httpx.AsyncClient, list[httpx.Request]]]:
    """Build an AsyncClient that replays responses and records requests."""

    def factory(responses: list[httpx.Response]) -> tuple[httpx.AsyncClient, list[httpx.Request]]:
        requests: list[httpx.Request] = []
        queue = list(responses)

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            # Repeat the last response once the queue is drained
            return queue.pop(0) if len(queue) > 1 else queue[0]

        return httpx.AsyncClient(transport=httpx.MockTransport(handler)), requests

    return factory


@pytest.fixture
def config_factory() -> Callable[..., EmailConfig]:
    """Build configs with selected fields overridden."""
    return make_config
