"""Transactional email through the Resend HTTP API."""

import logging
from datetime import datetime, timezone
from html import escape

import httpx

from cookite.server.core.config import settings
from cookite.server.routers.schemas import Customer, EmailStatus, Reservation, ReservationItemIn


logger = logging.getLogger(__name__)

SEND_TIMEOUT_SECONDS = 15.0


class EmailDeliveryError(Exception):
    """The provider rejected the message or could not be reached."""


def _items_list(reservation: Reservation) -> str:
    lines = [
        f"• {item.quantity}x {escape(item.productName)} - R$ {item.quantity * item.unitPrice:.2f}"
        for item in reservation.items
    ]
    return "<br>".join(lines)


def _totals_block(reservation: Reservation) -> str:
    rows = []
    if reservation.discount > 0:
        rows.append(f"<p><strong>Subtotal:</strong> R$ {reservation.subtotal:.2f}</p>")
        rows.append(
            f'<p style="color: #e74c3c;"><strong>Desconto (20%):</strong> -R$ {reservation.discount:.2f}</p>'
        )
    rows.append(f'<p style="font-size: 20px; color: #27ae60;"><strong>Total: R$ {reservation.total:.2f}</strong></p>')
    return "\n".join(rows)


def render_confirmation(reservation: Reservation) -> str:
    name = escape(reservation.customer.name)
    return f"""<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"><title>Confirmação de Reserva - Cookite JEPP</title></head>
  <body style="font-family: 'Segoe UI', Tahoma, sans-serif; background-color: #f8f9fa;">
    <h1>🍪 Cookite JEPP</h1>
    <h2>Olá, {name}! 👋</h2>
    <p>Sua reserva foi confirmada com sucesso para o evento JEPP do Sebrae.</p>
    <div style="background: #A8D0E6; padding: 15px; font-size: 24px; font-weight: bold; text-align: center;">
      {reservation.id}
    </div>
    <p style="text-align: center; font-style: italic;">Este é seu código único de reserva. Guarde-o bem!</p>
    <h3>🛒 Itens reservados:</h3>
    <div style="font-family: monospace;">{_items_list(reservation)}</div>
    {_totals_block(reservation)}
    <h3>📅 Informações do evento:</h3>
    <p><strong>Data:</strong> {settings.EVENT_DATE_LABEL}</p>
    <p><strong>Local:</strong> {escape(reservation.eventLocation)}</p>
    <p><strong>Retirada:</strong> Apresente este código na hora da retirada</p>
    <p>Com carinho,<br><strong>Equipe Cookite</strong> 💙</p>
  </body>
</html>
"""


def _countdown(days_until_event: int) -> str:
    if days_until_event == 1:
        return "É amanhã!"
    return f"Faltam {days_until_event} dias!"


def render_reminder(reservation: Reservation, days_until_event: int) -> str:
    name = escape(reservation.customer.name)
    return f"""<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"><title>Lembrete - Sua reserva Cookite JEPP</title></head>
  <body style="font-family: 'Segoe UI', Tahoma, sans-serif; background-color: #f8f9fa;">
    <h1>🍪 Cookite JEPP</h1>
    <div style="background: #fff3cd; border: 2px solid #ffeaa7; padding: 20px; text-align: center;">
      <h2>{_countdown(days_until_event)}</h2>
    </div>
    <p>Olá, {name}! Este é um lembrete da sua reserva para o evento JEPP.</p>
    <div style="background: #A8D0E6; padding: 15px; font-size: 24px; font-weight: bold; text-align: center;">
      {reservation.id}
    </div>
    <h3>🛒 Seus itens:</h3>
    <div style="font-family: monospace;">{_items_list(reservation)}</div>
    {_totals_block(reservation)}
    <p><strong>Data:</strong> {settings.EVENT_DATE_LABEL}</p>
    <p><strong>Local:</strong> {escape(reservation.eventLocation)}</p>
    <p>Até lá!<br><strong>Equipe Cookite</strong> 💙</p>
  </body>
</html>
"""


def reminder_subject(reservation: Reservation, days_until_event: int) -> str:
    when = "amanhã" if days_until_event == 1 else f"em {days_until_event} dias"
    return f"⏰ Lembrete: seu pedido Cookite é {when} - Código {reservation.id}"


def sample_reservation(email: str) -> Reservation:
    """A throwaway reservation used to check the provider setup end to end."""
    return Reservation(
        id="TEST123",
        customer=Customer(name="Teste Usuario", phone="(11) 99999-9999", email=email),
        items=[ReservationItemIn(productId="cookie", productName="Cookie Teste", quantity=1, unitPrice=5.0)],
        subtotal=5.0,
        discount=1.0,
        total=4.0,
        createdAt=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        eventDate=settings.EVENT_DATE.isoformat(),
        eventLocation="Local de Teste",
    )


class ResendMailer:
    def __init__(
        self,
        api_key: str | None,
        sender: str,
        api_url: str = "https://api.resend.com",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.sender = sender
        self.api_url = api_url.rstrip("/")
        self.transport = transport

    async def _deliver(self, to: str, subject: str, html: str) -> str | None:
        async with httpx.AsyncClient(transport=self.transport, timeout=SEND_TIMEOUT_SECONDS) as client:
            try:
                response = await client.post(
                    f"{self.api_url}/emails",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={"from": self.sender, "to": [to], "subject": subject, "html": html},
                )
            except httpx.HTTPError as exc:
                raise EmailDeliveryError(f"Resend unreachable: {exc}") from exc

        if response.is_error:
            raise EmailDeliveryError(f"Resend returned {response.status_code}: {response.text[:200]}")
        try:
            return response.json().get("id")
        except ValueError:
            return None

    async def _send(self, to: str, subject: str, html: str, reservation_id: str) -> EmailStatus:
        if not self.api_key:
            logger.warning("RESEND_API_KEY not configured, skipping email for %s", reservation_id)
            return EmailStatus(success=False, message="API key não configurada")

        try:
            email_id = await self._deliver(to, subject, html)
        except EmailDeliveryError as exc:
            logger.error("Email for reservation %s failed: %s", reservation_id, exc)
            return EmailStatus(success=False, message="Erro ao enviar email")

        logger.info("Email sent to %s for reservation %s", to, reservation_id)
        return EmailStatus(success=True, message="Email enviado com sucesso", emailId=email_id)

    async def send_confirmation(self, reservation: Reservation) -> EmailStatus:
        return await self._send(
            reservation.customer.email,
            f"🍪 Reserva Confirmada - Código {reservation.id} | Cookite JEPP",
            render_confirmation(reservation),
            reservation.id,
        )

    async def send_reminder(self, reservation: Reservation, days_until_event: int) -> EmailStatus:
        return await self._send(
            reservation.customer.email,
            reminder_subject(reservation, days_until_event),
            render_reminder(reservation, days_until_event),
            reservation.id,
        )


def get_mailer() -> ResendMailer:
    return ResendMailer(
        api_key=settings.RESEND_API_KEY,
        sender=settings.EMAIL_FROM,
        api_url=settings.RESEND_API_URL,
    )
