import json

import httpx
import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis
from httpx import ASGITransport, AsyncClient

from cookite.server.core import redis_client as redis_module
from cookite.server.core.config import settings
from cookite.server.main import app
from cookite.server.services.email import ResendMailer, get_mailer


@pytest_asyncio.fixture
async def redis():
    client = FakeAsyncRedis(decode_responses=True)
    await client.flushall()
    redis_module.redis_client = client
    try:
        yield client
    finally:
        redis_module.redis_client = None
        await client.flushall()
        await client.aclose()


@pytest.fixture(autouse=True)
def fast_reminders(monkeypatch):
    monkeypatch.setattr(settings, "REMINDER_DELAY_SECONDS", 0)


def _install_mailer(handler) -> None:
    mailer = ResendMailer(
        api_key="re_test_key",
        sender=settings.EMAIL_FROM,
        api_url="https://resend.test",
        transport=httpx.MockTransport(handler),
    )
    app.dependency_overrides[get_mailer] = lambda: mailer


@pytest.fixture
def outbox():
    """Emails accepted by a fake Resend endpoint, as the JSON bodies posted to it."""
    sent = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(json.loads(request.content))
        return httpx.Response(200, json={"id": f"email-{len(sent)}"})

    _install_mailer(handler)
    yield sent
    app.dependency_overrides.pop(get_mailer, None)


@pytest.fixture
def broken_mail_provider():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "provider down"})

    _install_mailer(handler)
    yield
    app.dependency_overrides.pop(get_mailer, None)


@pytest_asyncio.fixture
async def client(redis):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def reservation_payload():
    return {
        "customer": {
            "name": "  Maria Souza ",
            "phone": "(11) 98888-7777",
            "email": " Maria@Cookite.com.br ",
            "notes": " sem nozes ",
        },
        "items": [
            {"productId": "cookie", "productName": "Cookie", "quantity": 2, "unitPrice": 7.0},
            {"productId": "cake-pop", "productName": "Cake Pop", "quantity": 1, "unitPrice": 4.5},
        ],
        "subtotal": 18.5,
        "discount": 3.7,
        "total": 14.8,
    }
