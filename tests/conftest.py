from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from ivr_navigator.api.app import create_app
from ivr_navigator.config.settings import get_settings
from tests.helpers.fake_endpoint import FakeCallEndpoint

_ZERO_DELAYS = {
    "INTER_LEG_DELAY_SECONDS": "0",
    "BLANK_RECOVERY_DELAY_SECONDS": "0",
    "STEP_DELAY_SECONDS": "0",
}


@pytest.fixture()
def fake_endpoint() -> FakeCallEndpoint:
    return FakeCallEndpoint()


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch, fake_endpoint: FakeCallEndpoint):
    for name, value in _ZERO_DELAYS.items():
        monkeypatch.setenv(name, value)
    get_settings.cache_clear()
    app = create_app()
    app.state.call_endpoint_factory = lambda settings, http_client: fake_endpoint
    with TestClient(app) as test_client:
        yield test_client
    get_settings.cache_clear()
