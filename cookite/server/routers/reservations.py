import logging

from fastapi import APIRouter, Depends, status
from redis.exceptions import RedisError

from cookite.server.core.errors import INVALID_DATA, ApiException
from cookite.server.db.store import ReservationStore, get_store
from cookite.server.routers.schemas import (
    CreateReservationOut,
    EmailStatus,
    ReservationIn,
    ReservationOut,
)
from cookite.server.services.email import ResendMailer, get_mailer
from cookite.server.services.reservations import ReservationIdExhausted
from cookite.server.services.reservations import create_reservation as create_reservation_service
from cookite.server.services.validation import validate_submission


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/reservations", response_model=CreateReservationOut, status_code=status.HTTP_201_CREATED)
async def create_reservation_endpoint(
    payload: ReservationIn,
    store: ReservationStore = Depends(get_store),
    mailer: ResendMailer = Depends(get_mailer),
) -> CreateReservationOut:
    violations = validate_submission(payload)
    if violations:
        raise ApiException(status.HTTP_400_BAD_REQUEST, INVALID_DATA, violations)

    try:
        reservation = await create_reservation_service(store, payload)
    except (RedisError, ReservationIdExhausted) as exc:
        logger.exception("Failed to persist reservation")
        raise ApiException(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Erro interno do servidor ao processar reserva",
            type(exc).__name__,
        ) from exc

    logger.info(
        "Reservation %s created: %s items, total %.2f",
        reservation.id, len(reservation.items), reservation.total,
    )

    # The reservation is durable at this point; email problems are only reported.
    try:
        email_status = await mailer.send_confirmation(reservation)
    except Exception as exc:
        logger.exception("Confirmation email for %s crashed", reservation.id)
        email_status = EmailStatus(success=False, message=f"Erro no envio: {exc}")

    return CreateReservationOut(
        reservationId=reservation.id,
        message="Reserva confirmada com sucesso!",
        data=reservation,
        emailStatus=email_status,
    )


@router.get("/reservations/{reservation_id}", response_model=ReservationOut)
async def get_reservation_endpoint(
    reservation_id: str,
    store: ReservationStore = Depends(get_store),
) -> ReservationOut:
    reservation = await store.get(reservation_id)
    if reservation is None:
        raise ApiException(status.HTTP_404_NOT_FOUND, "Reserva não encontrada")
    return ReservationOut(data=reservation)
