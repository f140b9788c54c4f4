import asyncio
import time
from collections import defaultdict
from datetime import datetime, timezone

from cookite.server.core.config import settings
from cookite.server.db.store import ReservationStore
from cookite.server.routers.schemas import Customer, Reservation, ReservationIn, StatsData


ID_PREFIX = "CKJP"
MAX_ID_ATTEMPTS = 5


class ReservationIdExhausted(Exception):
    """Every candidate id in the retry window was already taken."""


def generate_reservation_id(now_ms: int | None = None) -> str:
    """``CKJP`` plus the last six digits of the millisecond clock; unique only within ~16 minutes."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"{ID_PREFIX}{now_ms % 1_000_000:06d}"


async def _allocate_id(store: ReservationStore) -> str:
    for _ in range(MAX_ID_ATTEMPTS):
        reservation_id = generate_reservation_id()
        if not await store.exists(reservation_id):
            return reservation_id
        await asyncio.sleep(0.001)
    raise ReservationIdExhausted(f"No free reservation id after {MAX_ID_ATTEMPTS} attempts")


def build_reservation(reservation_id: str, payload: ReservationIn, created_at: datetime) -> Reservation:
    customer = payload.customer
    return Reservation(
        id=reservation_id,
        customer=Customer(
            name=customer.name.strip(),
            phone=customer.phone.strip(),
            email=customer.email.strip().lower(),
            notes=(customer.notes or "").strip(),
        ),
        items=payload.items,
        subtotal=payload.subtotal,
        discount=payload.discount,
        total=payload.total,
        status="confirmed",
        createdAt=created_at.isoformat().replace("+00:00", "Z"),
        eventDate=settings.EVENT_DATE.isoformat(),
        eventLocation=settings.EVENT_LOCATION,
    )


async def create_reservation(store: ReservationStore, payload: ReservationIn) -> Reservation:
    """Persist an already validated submission and return the stored record."""
    reservation_id = await _allocate_id(store)
    reservation = build_reservation(reservation_id, payload, datetime.now(timezone.utc))
    await store.save(reservation)
    return reservation


async def list_reservations(store: ReservationStore) -> list[Reservation]:
    reservations = await store.load_indexed()
    reservations.sort(key=lambda r: datetime.fromisoformat(r.createdAt.replace("Z", "+00:00")), reverse=True)
    return reservations


async def compute_stats(store: ReservationStore) -> StatsData:
    ids = await store.index()
    reservations = await store.load_indexed(ids)

    total_revenue = 0.0
    total_items = 0
    product_stats: dict[str, int] = defaultdict(int)
    for reservation in reservations:
        total_revenue += reservation.total
        for item in reservation.items:
            total_items += item.quantity
            product_stats[item.productName] += item.quantity

    return StatsData(
        totalReservations=len(ids),
        totalRevenue=round(total_revenue, 2),
        totalItems=total_items,
        productStats=dict(product_stats),
    )
