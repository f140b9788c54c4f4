from pydantic import BaseModel, ConfigDict, Field


class CustomerIn(BaseModel):
    # Presence and shape are checked by the reservation validator so that every
    # violation is reported in one response.
    name: str = ""
    phone: str = ""
    email: str = ""
    notes: str | None = Field(default=None, max_length=1024)


class ReservationItemIn(BaseModel):
    productId: str = Field(min_length=1)
    productName: str = Field(min_length=1, max_length=200)
    quantity: int = Field(ge=1)
    unitPrice: float = Field(ge=0)


class ReservationIn(BaseModel):
    customer: CustomerIn = Field(default_factory=CustomerIn)
    items: list[ReservationItemIn] = Field(default_factory=list)
    subtotal: float = Field(default=0, ge=0)
    discount: float = Field(default=0, ge=0)
    total: float = Field(default=0, ge=0)


class Customer(BaseModel):
    name: str
    phone: str
    email: str
    notes: str = ""


class Reservation(BaseModel):
    """A persisted reservation record, stored as JSON under ``reservation:{id}``."""

    id: str
    customer: Customer
    items: list[ReservationItemIn]
    subtotal: float
    discount: float
    total: float
    status: str = "confirmed"
    createdAt: str
    eventDate: str
    eventLocation: str


class EmailStatus(BaseModel):
    model_config = ConfigDict(extra="allow")

    success: bool
    message: str
    emailId: str | None = None


class ValidateIn(BaseModel):
    email: str | None = None
    phone: str | None = None


class FieldErrorOut(BaseModel):
    field: str
    message: str


class ValidateOut(BaseModel):
    valid: bool
    errors: list[FieldErrorOut]


class CreateReservationOut(BaseModel):
    success: bool = True
    reservationId: str
    message: str
    data: Reservation
    emailStatus: EmailStatus


class ReservationOut(BaseModel):
    success: bool = True
    data: Reservation


class ReservationListOut(BaseModel):
    success: bool = True
    total: int
    data: list[Reservation]


class StatsData(BaseModel):
    totalReservations: int
    totalRevenue: float
    totalItems: int
    productStats: dict[str, int]


class StatsOut(BaseModel):
    success: bool = True
    data: StatsData


class HealthOut(BaseModel):
    status: str
    timestamp: str
    service: str


class ManualReminderIn(BaseModel):
    daysUntilEvent: int | None = None


class ReminderFailure(BaseModel):
    reservationId: str
    email: str | None = None
    error: str


class ReminderResults(BaseModel):
    total: int = 0
    sent: int = 0
    failed: int = 0
    errors: list[ReminderFailure] = Field(default_factory=list)


class ReminderBatchOut(BaseModel):
    success: bool = True
    message: str
    daysUntilEvent: int
    results: ReminderResults | None = None
    timestamp: str | None = None


class ManualReminderOut(BaseModel):
    success: bool
    message: str
    reservationId: str
    daysUntilEvent: int
    timestamp: str


class MilestoneReminders(BaseModel):
    count: int
    reservationIds: list[str]


class ReminderStatsData(BaseModel):
    daysUntilEvent: int
    eventDate: str
    remindersSent: dict[str, MilestoneReminders]


class ReminderStatsOut(BaseModel):
    success: bool = True
    data: ReminderStatsData
    timestamp: str


class EmailConfigOut(BaseModel):
    hasApiKey: bool
    timestamp: str


class SampleEmailIn(BaseModel):
    email: str = ""


class SampleEmailOut(BaseModel):
    success: bool = True
    emailResult: EmailStatus
    timestamp: str
