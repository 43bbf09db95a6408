import pytest
from httpx import ASGITransport, AsyncClient

from playground import api, tools
from playground.main import app
from tests.fakes import FakeGatewayClient, FakeValyuClient


@pytest.fixture
def fake_gateway(monkeypatch):
    fake = FakeGatewayClient()
    monkeypatch.setattr(api, "gateway", fake)
    return fake


@pytest.fixture
def fake_valyu(monkeypatch):
    fake = FakeValyuClient()
    monkeypatch.setattr(tools, "valyu", fake)
    return fake


@pytest.fixture
async def client(fake_gateway, fake_valyu):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
