import json
import logging

import pytest
from fastapi.testclient import TestClient

from push_gateway.config import Settings
from push_gateway.main import create_app

SERVICE_ACCOUNT = {
    "type": "service_account",
    "project_id": "push-gateway-test",
    "client_email": "firebase-adminsdk@push-gateway-test.iam.gserviceaccount.com",
}


class FakeMessagingClient:
    """Stands in for MessagingClient, answering sends from a script."""

    def __init__(self, results=None):
        # Each item is a message id to return or an exception to raise
        self.results = list(results or ["projects/push-gateway-test/messages/1"])
        self.sent = []

    def send(self, message):
        self.sent.append(message)
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException):
            raise result
        return result


class FakeProvider:
    def __init__(self, client=None, last_error=None):
        self.client = client
        self.last_error = last_error
        self.calls = 0

    @property
    def is_ready(self):
        return self.get_client() is not None

    def get_client(self):
        self.calls += 1
        return self.client


@pytest.fixture
def service_account_json():
    return json.dumps(SERVICE_ACCOUNT)


@pytest.fixture
def fake_client_factory():
    return FakeMessagingClient


@pytest.fixture
def fake_provider_factory():
    return FakeProvider


@pytest.fixture
def restore_root_logger():
    root_logger = logging.getLogger()
    handlers, level = list(root_logger.handlers), root_logger.level
    yield root_logger
    for h in list(root_logger.handlers):
        root_logger.removeHandler(h)
    for h in handlers:
        root_logger.addHandler(h)
    root_logger.setLevel(level)


@pytest.fixture
def make_api_client():
    def _make(provider):
        app = create_app(Settings(firebase_service_account=None, log_json=False), provider=provider,
                         configure_logging=False)
        return TestClient(app)
    return _make
