"""Async HTTP client for the reservations API.

Every call goes through the same pipeline: the shared :class:`RequestQueue`
serializes it, :func:`with_retry` retries 5xx responses, and each individual
HTTP attempt is bounded by a 30 second timeout.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from cookite.client.errors import (
    ApiError,
    NotFound,
    RateLimited,
    RequestTimeout,
    TransientServerError,
    ValidationFailed,
)
from cookite.client.queue import RequestQueue
from cookite.client.retry import with_retry
from cookite.validation import FieldError


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
TIMEOUT_MESSAGE = "Tempo limite excedido. Tente novamente."
RATE_LIMIT_MESSAGE = "Muitas tentativas. Aguarde alguns segundos e tente novamente."
SERVER_ERROR_MESSAGE = "Erro interno do servidor. Tente novamente em alguns instantes."
UNAVAILABLE_MESSAGE = "Servidor temporariamente indisponível. Tente novamente em alguns instantes."


@dataclass
class ValidationResult:
    valid: bool
    errors: list[FieldError] = field(default_factory=list)


@dataclass
class CreateReservationResult:
    reservation_id: str
    message: str
    email_status: dict[str, Any] | None
    data: dict[str, Any] | None = None

    @property
    def email_sent(self) -> bool:
        return bool(self.email_status and self.email_status.get("success"))


def error_for_response(response: httpx.Response, body: Any) -> Exception:
    """Translate a non-2xx response into the client error taxonomy."""
    status = response.status_code
    body = body if isinstance(body, dict) else {}

    if status == 400:
        details = body.get("details")
        if isinstance(details, list) and details:
            return ValidationFailed(", ".join(str(d) for d in details), [str(d) for d in details])
        return ValidationFailed(body.get("error") or "Dados inválidos")
    if status == 404:
        return NotFound(body.get("error") or "Não encontrado", status)
    if status == 429:
        return RateLimited(RATE_LIMIT_MESSAGE, status)
    if status == 500:
        return TransientServerError(SERVER_ERROR_MESSAGE, status)
    if status in (502, 503):
        return TransientServerError(UNAVAILABLE_MESSAGE, status)
    return ApiError(f"Erro {status}: {response.reason_phrase or 'Unknown error'}", status)


class ReservationsClient:
    def __init__(
        self,
        base_url: str,
        queue: RequestQueue | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.queue = queue or RequestQueue()
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            transport=transport,
            timeout=timeout,
            headers=headers,
        )

    async def __aenter__(self) -> "ReservationsClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _send_once(self, method: str, path: str, json: Any = None) -> dict[str, Any]:
        try:
            response = await asyncio.wait_for(
                self._http.request(method, path, json=json),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise RequestTimeout(TIMEOUT_MESSAGE) from exc

        try:
            body = response.json()
        except ValueError as exc:
            if response.is_error:
                raise error_for_response(response, None) from exc
            logger.error("Unparseable response from %s %s (%s)", method, path, response.status_code)
            raise ApiError(f"Resposta inválida do servidor ({response.status_code})", response.status_code) from exc

        if response.is_error:
            raise error_for_response(response, body)
        return body

    async def _call(self, method: str, path: str, json: Any = None) -> dict[str, Any]:
        async def attempt() -> dict[str, Any]:
            return await self._send_once(method, path, json)

        async def retried() -> dict[str, Any]:
            return await with_retry(attempt, self.max_attempts, self.base_delay)

        return await self.queue.enqueue(retried)

    async def validate(self, email: str | None = None, phone: str | None = None) -> ValidationResult:
        body = await self._call("POST", "/validate", {"email": email, "phone": phone})
        errors = [FieldError(e.get("field", "general"), e.get("message", "")) for e in body.get("errors", [])]
        return ValidationResult(valid=bool(body.get("valid")), errors=errors)

    async def create_reservation(self, submission: dict[str, Any]) -> CreateReservationResult:
        customer = submission.get("customer", {})
        logger.info(
            "Sending reservation for %s: %s items, total %s",
            customer.get("name"), len(submission.get("items", [])), submission.get("total"),
        )
        body = await self._call("POST", "/reservations", submission)
        if not body.get("success"):
            raise ApiError(body.get("error") or body.get("message") or "Erro desconhecido")

        return CreateReservationResult(
            reservation_id=body["reservationId"],
            message=body.get("message") or "Reserva criada com sucesso!",
            email_status=body.get("emailStatus"),
            data=body.get("data"),
        )

    async def get_reservation(self, reservation_id: str) -> dict[str, Any]:
        body = await self._call("GET", f"/reservations/{reservation_id}")
        return body["data"]

    async def list_reservations(self) -> list[dict[str, Any]]:
        body = await self._call("GET", "/admin/reservations")
        return body.get("data", [])

    async def get_stats(self) -> dict[str, Any]:
        body = await self._call("GET", "/admin/stats")
        return body.get("data", {})

    async def health(self) -> dict[str, Any]:
        return await self._call("GET", "/health")
