"""
Reminder emails sent 7, 3 and 1 days before the event.

Each milestone keeps its own list of reservation ids already reminded, so a
reservation gets at most one email per milestone. Two batches started at the
same time for the same milestone can both pass the "already sent" check and
double-send; the job is operator-triggered and must not be run concurrently.
"""

import asyncio
import logging
import math
from datetime import date, datetime, time, timezone

from cookite.server.db.store import MILESTONES, ReservationStore
from cookite.server.routers.schemas import (
    MilestoneReminders,
    ReminderFailure,
    ReminderResults,
    ReminderStatsData,
)
from cookite.server.services.email import ResendMailer


logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 3600


def days_until_event(event_date: date, now: datetime | None = None) -> int:
    """Whole days left until midnight UTC of ``event_date``, rounded up."""
    if now is None:
        now = datetime.now(timezone.utc)
    event_start = datetime.combine(event_date, time.min, tzinfo=timezone.utc)
    return math.ceil((event_start - now).total_seconds() / SECONDS_PER_DAY)


async def send_milestone_reminders(
    store: ReservationStore,
    mailer: ResendMailer,
    days: int,
    delay_seconds: float = 0.1,
) -> ReminderResults:
    results = ReminderResults()
    already_sent = set(await store.reminded(days))

    for reservation_id in await store.index():
        results.total += 1
        if reservation_id in already_sent:
            logger.debug("Reminder already sent for %s (%s days)", reservation_id, days)
            continue

        try:
            reservation = await store.get(reservation_id)
        except ValueError as exc:
            results.failed += 1
            results.errors.append(ReminderFailure(reservationId=reservation_id, error=f"Registro inválido: {exc}"))
            logger.error("Unreadable reservation record %s", reservation_id, exc_info=True)
            continue
        if reservation is None or reservation.status != "confirmed":
            continue

        status = await mailer.send_reminder(reservation, days)
        if status.success:
            results.sent += 1
            await store.mark_reminded(days, reservation_id)
            already_sent.add(reservation_id)
        else:
            results.failed += 1
            results.errors.append(
                ReminderFailure(
                    reservationId=reservation_id,
                    email=reservation.customer.email,
                    error=status.message,
                )
            )
            logger.error("Failed to send reminder for %s: %s", reservation_id, status.message)

        await asyncio.sleep(delay_seconds)

    logger.info(
        "Reminder batch for %s days: %s sent, %s failed of %s",
        days, results.sent, results.failed, results.total,
    )
    return results


async def reminder_stats(store: ReservationStore, event_date: date, now: datetime | None = None) -> ReminderStatsData:
    sent: dict[str, MilestoneReminders] = {}
    for days in MILESTONES:
        ids = await store.reminded(days)
        sent[f"{days}_days"] = MilestoneReminders(count=len(ids), reservationIds=ids)

    return ReminderStatsData(
        daysUntilEvent=days_until_event(event_date, now),
        eventDate=datetime.combine(event_date, time.min, tzinfo=timezone.utc).isoformat(),
        remindersSent=sent,
    )
