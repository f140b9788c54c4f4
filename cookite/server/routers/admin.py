import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status

from cookite.server.core.config import settings
from cookite.server.core.errors import ApiException
from cookite.server.db.store import MILESTONES, ReservationStore, get_store
from cookite.server.routers.schemas import (
    EmailConfigOut,
    ManualReminderIn,
    ManualReminderOut,
    ReminderBatchOut,
    ReminderStatsOut,
    ReservationListOut,
    SampleEmailIn,
    SampleEmailOut,
    StatsOut,
)
from cookite.server.services.email import ResendMailer, get_mailer, sample_reservation
from cookite.server.services.reminders import (
    days_until_event,
    reminder_stats,
    send_milestone_reminders,
)
from cookite.server.services.reservations import compute_stats, list_reservations


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/reservations", response_model=ReservationListOut)
async def list_reservations_endpoint(store: ReservationStore = Depends(get_store)) -> ReservationListOut:
    reservations = await list_reservations(store)
    return ReservationListOut(total=len(reservations), data=reservations)


@router.get("/stats", response_model=StatsOut)
async def stats_endpoint(store: ReservationStore = Depends(get_store)) -> StatsOut:
    return StatsOut(data=await compute_stats(store))


@router.post("/send-reminders", response_model=ReminderBatchOut, response_model_exclude_none=True)
async def send_reminders_endpoint(
    store: ReservationStore = Depends(get_store),
    mailer: ResendMailer = Depends(get_mailer),
) -> ReminderBatchOut:
    days = days_until_event(settings.EVENT_DATE)
    logger.info("Days until event: %s", days)

    if days not in MILESTONES:
        return ReminderBatchOut(
            message=f"No reminders scheduled for {days} days before event",
            daysUntilEvent=days,
        )

    results = await send_milestone_reminders(store, mailer, days, settings.REMINDER_DELAY_SECONDS)
    return ReminderBatchOut(
        message=f"Reminder batch completed for {days} days before event",
        daysUntilEvent=days,
        results=results,
        timestamp=_now_iso(),
    )


@router.post("/send-reminder/{reservation_id}", response_model=ManualReminderOut)
async def send_reminder_endpoint(
    reservation_id: str,
    payload: ManualReminderIn,
    store: ReservationStore = Depends(get_store),
    mailer: ResendMailer = Depends(get_mailer),
) -> ManualReminderOut:
    if payload.daysUntilEvent is None or payload.daysUntilEvent < 1:
        raise ApiException(status.HTTP_400_BAD_REQUEST, "daysUntilEvent is required and must be >= 1")

    reservation = await store.get(reservation_id)
    if reservation is None:
        raise ApiException(status.HTTP_404_NOT_FOUND, "Reservation not found")

    result = await mailer.send_reminder(reservation, payload.daysUntilEvent)
    return ManualReminderOut(
        success=result.success,
        message=result.message,
        reservationId=reservation_id,
        daysUntilEvent=payload.daysUntilEvent,
        timestamp=_now_iso(),
    )


@router.get("/reminder-stats", response_model=ReminderStatsOut)
async def reminder_stats_endpoint(store: ReservationStore = Depends(get_store)) -> ReminderStatsOut:
    return ReminderStatsOut(
        data=await reminder_stats(store, settings.EVENT_DATE),
        timestamp=_now_iso(),
    )


@router.get("/email-config", response_model=EmailConfigOut)
async def email_config_endpoint(mailer: ResendMailer = Depends(get_mailer)) -> EmailConfigOut:
    return EmailConfigOut(hasApiKey=bool(mailer.api_key), timestamp=_now_iso())


@router.post("/test-email", response_model=SampleEmailOut)
async def send_sample_email_endpoint(
    payload: SampleEmailIn,
    mailer: ResendMailer = Depends(get_mailer),
) -> SampleEmailOut:
    email = payload.email.strip()
    if not email:
        raise ApiException(status.HTTP_400_BAD_REQUEST, "Email is required")

    logger.info("Sending sample confirmation to %s", email)
    result = await mailer.send_confirmation(sample_reservation(email))
    return SampleEmailOut(emailResult=result, timestamp=_now_iso())
