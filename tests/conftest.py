import pytest
import requests
from fastapi.testclient import TestClient

import notifier
from config import get_settings

SECRET = "s3cret"


class FakeResponse:
    def __init__(self, status_code=200, text='{"messages": [{"id": "wamid.1"}]}'):
        self.status_code = status_code
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error", response=self)


class WhatsAppRecorder:
    """Stands in for requests.post and remembers every call."""

    def __init__(self):
        self.calls = []
        self.status_code = 200
        self.error = None

    def __call__(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return FakeResponse(self.status_code)

    @property
    def message_types(self):
        return [c["json"]["type"] for c in self.calls]


@pytest.fixture
def whatsapp(monkeypatch):
    recorder = WhatsAppRecorder()
    monkeypatch.setattr(notifier.requests, "post", recorder)
    return recorder


@pytest.fixture
def env(tmp_path, monkeypatch):
    monkeypatch.setenv("ORDERS_FILE", str(tmp_path / "orders.json"))
    monkeypatch.setenv("IMAGES_DIR", str(tmp_path / "images"))
    monkeypatch.setenv("ORDER_SECRET", "")
    monkeypatch.setenv("PHONE_NUMBER_ID", "1234567890")
    monkeypatch.setenv("ACCESS_TOKEN", "test-token")
    monkeypatch.setenv("ADMIN_NUMBER", "250700000001")
    monkeypatch.setenv("RATE_LIMIT_MAX", "1000")
    monkeypatch.setenv("ADMIN_RATE_LIMIT_MAX", "1000")
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


@pytest.fixture
def make_client(env, whatsapp):
    """Build a client after the test has adjusted the environment."""
    from app import create_app

    def _make(**overrides):
        for key, value in overrides.items():
            env.setenv(key.upper(), str(value))
        get_settings.cache_clear()
        return TestClient(create_app(), raise_server_exceptions=False)

    return _make


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def secured_client(make_client):
    return make_client(order_secret=SECRET)
