import json
import re

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport

from cookite.client.api import ReservationsClient
from cookite.client.errors import FormLocked, InvalidTransition
from cookite.client.queue import RequestQueue
from cookite.client.submission import FIX_ERRORS_MESSAGE, NO_ITEMS_MESSAGE, FormState, ReservationForm
from cookite.server.main import app


pytestmark = pytest.mark.asyncio


def _fill(form):
    form.update_quantity("cookie", 2)
    form.update_quantity("cake-pop", 1)
    form.update_customer(name="Maria Souza", phone="11988887777", email="Maria@Cookite.com.br")


def _client(handler, **kwargs):
    return ReservationsClient(
        "http://test/api/v1",
        queue=RequestQueue(min_interval=0),
        transport=httpx.MockTransport(handler),
        base_delay=0,
        **kwargs,
    )


@pytest_asyncio.fixture
async def api_client(redis, outbox):
    async with ReservationsClient(
        "http://test/api/v1",
        queue=RequestQueue(min_interval=0),
        transport=ASGITransport(app=app),
    ) as reservations_client:
        yield reservations_client


async def test_successful_submission_resets_the_form(api_client, outbox):
    form = ReservationForm(api_client)
    _fill(form)
    assert form.customer.phone == "(11) 98888-7777"
    assert (form.totals.subtotal, form.totals.discount, form.totals.total) == (18.5, 3.7, 14.8)

    outcome = await form.submit()

    assert outcome.state is FormState.SUCCEEDED
    assert re.fullmatch(r"CKJP\d{6}", outcome.reservation_id)
    assert outcome.email_status["success"] is True
    assert form.quantities == {}
    assert form.customer.name == ""
    assert form.field_errors == {}
    assert len(form.cache) == 0
    assert form.has_attempted_submit is False

    stored = await api_client.get_reservation(outcome.reservation_id)
    assert (stored["subtotal"], stored["discount"], stored["total"]) == (18.5, 3.7, 14.8)
    assert stored["customer"]["email"] == "maria@cookite.com.br"

    form.new_reservation()
    assert form.state is FormState.IDLE
    assert form.reservation_id is None


async def test_zero_items_is_rejected_before_any_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(201, json={})

    form = ReservationForm(_client(handler))
    form.update_customer(name="Maria Souza", phone="11988887777", email="maria@gmail.com")

    outcome = await form.submit()

    assert outcome.state is FormState.FAILED
    assert outcome.error == NO_ITEMS_MESSAGE
    assert calls == []


async def test_local_errors_block_submission():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(201, json={})

    form = ReservationForm(_client(handler))
    form.update_quantity("cookie", 1)
    form.update_customer(name="M", email="maria@", phone="1198")

    outcome = await form.submit()

    assert outcome.state is FormState.FAILED
    assert outcome.error == FIX_ERRORS_MESSAGE
    assert set(outcome.field_errors) == {"name", "email", "phone"}
    assert calls == []


async def test_server_rejection_keeps_form_state(api_client):
    form = ReservationForm(api_client)
    _fill(form)
    form.update_customer(email="maria@example.com")

    outcome = await form.submit()

    assert outcome.state is FormState.FAILED
    assert outcome.error == "Domínio do email inválido ou suspeito"
    assert form.quantities == {"cookie": 2, "cake-pop": 1}
    assert form.customer.email == "maria@example.com"

    form.update_customer(email="maria@gmail.com")
    retry = await form.submit()
    assert retry.state is FormState.SUCCEEDED


async def test_transient_errors_are_retried():
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) < 3:
            return httpx.Response(503, json={"error": "unavailable"})
        return httpx.Response(
            201,
            json={
                "success": True,
                "reservationId": "CKJP123456",
                "message": "Reserva confirmada com sucesso!",
                "emailStatus": {"success": False, "message": "API key não configurada"},
            },
        )

    form = ReservationForm(_client(handler))
    _fill(form)

    outcome = await form.submit()

    assert outcome.state is FormState.SUCCEEDED
    assert outcome.reservation_id == "CKJP123456"
    assert outcome.email_status == {"success": False, "message": "API key não configurada"}
    assert len(attempts) == 3


async def test_rate_limit_is_not_retried():
    attempts = []

    def handler(request):
        attempts.append(request)
        return httpx.Response(429, json={"error": "slow down"})

    form = ReservationForm(_client(handler))
    _fill(form)

    outcome = await form.submit()

    assert outcome.error == "Muitas tentativas. Aguarde alguns segundos e tente novamente."
    assert len(attempts) == 1


async def test_timeout_surfaces_a_distinct_message():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    form = ReservationForm(_client(handler))
    _fill(form)

    outcome = await form.submit()

    assert outcome.state is FormState.FAILED
    assert outcome.error == "Tempo limite excedido. Tente novamente."


async def test_form_is_locked_and_payload_frozen_while_submitting():
    form = None
    seen = {}

    async def handler(request):
        seen["locked"] = form.is_locked
        with pytest.raises(FormLocked):
            form.update_quantity("cookie", 5)
        seen["payload"] = json.loads(request.content)
        return httpx.Response(
            201,
            json={"success": True, "reservationId": "CKJP000042", "message": "ok", "emailStatus": None},
        )

    form = ReservationForm(_client(handler))
    _fill(form)

    await form.submit()

    assert seen["locked"] is True
    assert seen["payload"]["customer"]["email"] == "maria@cookite.com.br"
    assert (seen["payload"]["subtotal"], seen["payload"]["discount"], seen["payload"]["total"]) == (18.5, 3.7, 14.8)
    assert [item["productId"] for item in seen["payload"]["items"]] == ["cookie", "cake-pop"]


async def test_new_reservation_only_after_success():
    form = ReservationForm(_client(lambda request: httpx.Response(500, json={})))

    with pytest.raises(InvalidTransition):
        form.new_reservation()


async def test_blur_uses_validation_cache():
    calls = []

    def handler(request):
        body = json.loads(request.content)
        calls.append(body)
        if body.get("email") == "ana@test.com":
            return httpx.Response(
                200,
                json={"valid": False, "errors": [{"field": "email", "message": "Domínio do email inválido"}]},
            )
        return httpx.Response(200, json={"valid": True, "errors": []})

    form = ReservationForm(_client(handler))
    form.update_customer(email="ana@test.com")

    await form.blur_field("email")
    await form.blur_field("email")

    assert len(calls) == 1
    assert form.field_errors["email"] == "Domínio do email inválido"

    form.update_customer(email="ana@gmail.com")
    await form.blur_field("email")

    assert len(calls) == 2
    assert "email" not in form.field_errors


async def test_blank_fields_are_not_sent_for_validation():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"valid": True, "errors": []})

    form = ReservationForm(_client(handler))

    await form.blur_field("phone")

    assert calls == []


async def test_field_validation_is_debounced_after_first_attempt():
    form = ReservationForm(_client(lambda request: httpx.Response(500, json={})), debounce_delay=0.05)
    form.update_customer(name="M")
    assert not form.debouncer.pending

    await form.submit()
    form.update_customer(name="Ma")
    form.update_customer(name="Mar")
    form.update_customer(name="")
    assert form.debouncer.pending

    await form.debouncer.wait()

    assert form.field_errors["name"] == "Nome é obrigatório"
