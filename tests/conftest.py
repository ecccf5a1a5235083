from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from app.api.v1.contact import get_contact_service, get_honeypot
from app.core.config import ContactConfig
from app.core.email import SendResult
from app.core.honeypot import Honeypot
from app.main import app
from app.services.contact_service import ContactService

TEST_SEED = "test-honeypot-seed"


# -----------------------------------------------------------------------------
# Transport doubles
# -----------------------------------------------------------------------------


class SpyTransport:
    """Records every send; answers with ``result`` or raises ``error``."""

    __test__ = False

    def __init__(
        self,
        result: Optional[SendResult] = None,
        error: Optional[Exception] = None,
    ):
        self.result = result
        self.error = error
        self.calls: List[dict] = []

    def send(self, sender: str, to: str, subject: str, body: str) -> SendResult:
        self.calls.append(
            {"sender": sender, "to": to, "subject": subject, "body": body}
        )
        if self.error is not None:
            raise self.error
        if self.result is not None:
            return self.result
        return SendResult(accepted=[to])


# -----------------------------------------------------------------------------
# Contact fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def contact_config() -> ContactConfig:
    return ContactConfig(
        sender="Contact Me <contact@example.com>",
        recipient="owner+contact@example.com",
        transport_host="smtp.test",
        transport_port=465,
        transport_user="user@test",
        transport_pass="pass",
        transport_secure=True,
        transport_timeout=5.0,
        honeypot_seed=TEST_SEED,
        honeypot_name_field="name__confirm",
        honeypot_valid_from_field="form__confirm",
        honeypot_max_age_seconds=None,
        log_form_data="redact",
    )


@pytest.fixture
def honeypot(contact_config) -> Honeypot:
    return Honeypot(contact_config)


@pytest.fixture
def make_transport():
    return SpyTransport


@pytest.fixture
def transport() -> SpyTransport:
    return SpyTransport()


@pytest.fixture
def service(contact_config, honeypot, transport) -> ContactService:
    return ContactService(config=contact_config, honeypot=honeypot, transport=transport)


@pytest.fixture
def valid_form(honeypot):
    """Field set exactly as the rendered form would post it."""
    return {
        "name": "Jane",
        "email": "jane@x.com",
        "message": "hi",
        "name__confirm": "",
        "form__confirm": honeypot.issue_token(),
    }


# -----------------------------------------------------------------------------
# Client Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="function")
def client(service, honeypot):
    """
    TestClient with the contact service swapped for one using a spy transport.
    """
    app.dependency_overrides[get_contact_service] = lambda: service
    app.dependency_overrides[get_honeypot] = lambda: honeypot

    # Using 'with' context manager to trigger lifespan events (startup/shutdown)
    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
