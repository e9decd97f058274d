from datetime import date

import httpx
import pytest
from fastapi.testclient import TestClient

from app.clients import get_config, get_oura_client
from app.config import OuraConfig
from app.main import app
from app.services.oura_client import OuraClient

OURA_API_BASE = "https://api.ouraring.com"


class OuraStub:
    """Answers Oura requests with canned payloads keyed by endpoint name."""

    def __init__(self):
        self.responses: dict[str, tuple[int, object]] = {}
        self.requests: list[httpx.Request] = []

    def set(self, endpoint: str, payload: object, status_code: int = 200):
        self.responses[endpoint] = (status_code, payload)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        endpoint = request.url.path.rsplit("/", 1)[-1]
        status_code, payload = self.responses.get(endpoint, (200, {"data": []}))
        return httpx.Response(status_code=status_code, json=payload)


class MockDate(date):
    @classmethod
    def today(cls):
        return cls(2026, 3, 12)


@pytest.fixture
def frozen_today(monkeypatch: pytest.MonkeyPatch) -> date:
    monkeypatch.setattr("app.services.periods.date", MockDate)
    return date(2026, 3, 12)


@pytest.fixture
def oura_stub() -> OuraStub:
    return OuraStub()


@pytest.fixture
def oura_config() -> OuraConfig:
    return OuraConfig(
        oura_api_base=OURA_API_BASE,
        oura_api_token="test-token",
        fetch_timeout_seconds=2.0,
    )


@pytest.fixture
def client(oura_stub: OuraStub, oura_config: OuraConfig) -> TestClient:
    async def override_oura_client():
        transport = httpx.MockTransport(oura_stub)
        async with httpx.AsyncClient(transport=transport) as http:
            yield OuraClient(
                http,
                token=oura_config.oura_api_token,
                api_base=oura_config.oura_api_base,
            )

    app.dependency_overrides[get_config] = lambda: oura_config
    app.dependency_overrides[get_oura_client] = override_oura_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
