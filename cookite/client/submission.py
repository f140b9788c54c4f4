"""
Reservation form state and the submission state machine.

    IDLE -> VALIDATING -> SUBMITTING -> SUCCEEDED | FAILED
    FAILED -> VALIDATING      (next submit)
    SUCCEEDED -> IDLE         (new_reservation)

While SUBMITTING the form is locked and the payload sent to the server is
frozen in ``pending_submission``. Field validation after the first submit
attempt is debounced and runs independently of these states.
"""

import enum
import logging
from dataclasses import dataclass, field, replace
from typing import Any

from cookite.catalog import PRODUCTS_BY_ID, ReservationItem, Totals, build_items, compute_totals
from cookite.client.api import ReservationsClient
from cookite.client.cache import ValidationCache
from cookite.client.debounce import Debouncer
from cookite.client.errors import ClientError, FormLocked, InvalidTransition
from cookite.validation import FieldError, format_phone, validate_local


logger = logging.getLogger(__name__)

NO_ITEMS_MESSAGE = "Adicione pelo menos um produto à sua reserva"
FIX_ERRORS_MESSAGE = "Por favor, corrija os erros no formulário"
VALIDATION_UNAVAILABLE_MESSAGE = "Erro na validação. Tente novamente."
UNEXPECTED_MESSAGE = "Erro inesperado. Tente novamente."

CUSTOMER_FIELDS = ("name", "phone", "email", "notes")


class FormState(enum.Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class CustomerDraft:
    name: str = ""
    phone: str = ""
    email: str = ""
    notes: str = ""

    def checked_fields(self) -> dict[str, str]:
        return {"name": self.name, "email": self.email, "phone": self.phone}


@dataclass(frozen=True)
class Submission:
    """The exact payload handed to the server for one submit."""

    customer: CustomerDraft
    items: tuple[ReservationItem, ...]
    totals: Totals

    def as_payload(self) -> dict[str, Any]:
        return {
            "customer": {
                "name": self.customer.name,
                "phone": self.customer.phone,
                "email": self.customer.email,
                "notes": self.customer.notes,
            },
            "items": [item.as_payload() for item in self.items],
            "subtotal": self.totals.subtotal,
            "discount": self.totals.discount,
            "total": self.totals.total,
        }


@dataclass
class SubmitOutcome:
    state: FormState
    reservation_id: str | None = None
    email_status: dict[str, Any] | None = None
    error: str | None = None
    field_errors: dict[str, str] = field(default_factory=dict)


class ReservationForm:
    def __init__(
        self,
        client: ReservationsClient,
        cache: ValidationCache | None = None,
        debounce_delay: float = 0.3,
    ) -> None:
        self.client = client
        self.cache = cache if cache is not None else ValidationCache()
        self.debouncer = Debouncer(debounce_delay)

        self.state = FormState.IDLE
        self.quantities: dict[str, int] = {}
        self.customer = CustomerDraft()
        self.field_errors: dict[str, str] = {}
        self.has_attempted_submit = False

        self.pending_submission: Submission | None = None
        self.reservation_id: str | None = None
        self.email_status: dict[str, Any] | None = None
        self.error: str | None = None

    @property
    def is_locked(self) -> bool:
        return self.state is FormState.SUBMITTING

    def _ensure_editable(self) -> None:
        if self.is_locked:
            raise FormLocked("A reservation is being submitted")

    @property
    def items(self) -> list[ReservationItem]:
        return build_items(self.quantities)

    @property
    def totals(self) -> Totals:
        return compute_totals(self.items)

    def update_quantity(self, product_id: str, delta: int) -> int:
        self._ensure_editable()
        if product_id not in PRODUCTS_BY_ID:
            raise KeyError(product_id)
        new_value = max(0, self.quantities.get(product_id, 0) + delta)
        self.quantities[product_id] = new_value
        return new_value

    def update_customer(self, **fields: str) -> CustomerDraft:
        self._ensure_editable()
        unknown = set(fields) - set(CUSTOMER_FIELDS)
        if unknown:
            raise TypeError(f"Unknown customer fields: {sorted(unknown)}")
        if "phone" in fields:
            fields["phone"] = format_phone(fields["phone"])

        self.customer = replace(self.customer, **fields)
        if self.has_attempted_submit:
            self.debouncer.schedule(self._revalidate)
        return self.customer

    def _revalidate(self) -> None:
        self.field_errors = {error.field: error.message for error in validate_local(self.customer.checked_fields())}

    async def blur_field(self, field_name: str) -> None:
        """Ask the server about ``email`` or ``phone`` unless this exact value was already checked."""
        if field_name not in ("email", "phone"):
            raise ValueError(f"Server validation is only available for email and phone, not {field_name!r}")

        value = getattr(self.customer, field_name)
        if not value.strip() or self.cache.contains(field_name, value):
            return

        try:
            if field_name == "email":
                result = await self.client.validate(email=value)
            else:
                result = await self.client.validate(phone=value)
        except ClientError as exc:
            logger.warning("Server validation of %s failed: %s", field_name, exc)
            self.field_errors["general"] = VALIDATION_UNAVAILABLE_MESSAGE
            return

        self.cache.set(field_name, value, result.valid)
        error = next((e for e in result.errors if e.field == field_name), None)
        if result.valid or error is None:
            self.field_errors.pop(field_name, None)
        else:
            self.field_errors[field_name] = error.message

    def _fail(self, message: str, field_errors: list[FieldError] | None = None) -> SubmitOutcome:
        self.state = FormState.FAILED
        self.error = message
        if field_errors is not None:
            self.field_errors = {e.field: e.message for e in field_errors}
        return SubmitOutcome(FormState.FAILED, error=message, field_errors=dict(self.field_errors))

    def _freeze(self) -> Submission:
        items = tuple(self.items)
        return Submission(
            customer=CustomerDraft(
                name=self.customer.name.strip(),
                phone=self.customer.phone.strip(),
                email=self.customer.email.strip().lower(),
                notes=self.customer.notes.strip(),
            ),
            items=items,
            totals=compute_totals(items),
        )

    async def submit(self) -> SubmitOutcome:
        if self.state in (FormState.SUBMITTING, FormState.SUCCEEDED):
            raise InvalidTransition(f"Cannot submit while {self.state.value}")

        self.has_attempted_submit = True
        self.state = FormState.VALIDATING
        self.error = None

        if self.totals.total_items == 0:
            return self._fail(NO_ITEMS_MESSAGE)

        local_errors = validate_local(self.customer.checked_fields())
        if local_errors:
            return self._fail(FIX_ERRORS_MESSAGE, local_errors)

        self.debouncer.cancel()
        self.pending_submission = self._freeze()
        self.state = FormState.SUBMITTING
        try:
            result = await self.client.create_reservation(self.pending_submission.as_payload())
        except ClientError as exc:
            logger.error("Reservation submission failed: %s", exc.message)
            return self._fail(exc.message)
        except Exception:
            logger.exception("Unexpected error submitting reservation")
            return self._fail(UNEXPECTED_MESSAGE)
        finally:
            self.pending_submission = None

        self._reset_form()
        self.state = FormState.SUCCEEDED
        self.reservation_id = result.reservation_id
        self.email_status = result.email_status
        logger.info("Reservation %s confirmed (email sent: %s)", result.reservation_id, result.email_sent)
        return SubmitOutcome(
            FormState.SUCCEEDED,
            reservation_id=result.reservation_id,
            email_status=result.email_status,
        )

    def _reset_form(self) -> None:
        self.debouncer.cancel()
        self.quantities = {}
        self.customer = CustomerDraft()
        self.field_errors = {}
        self.cache.clear()
        self.has_attempted_submit = False
        self.error = None

    def new_reservation(self) -> None:
        if self.state is not FormState.SUCCEEDED:
            raise InvalidTransition(f"Cannot start a new reservation from {self.state.value}")
        self.state = FormState.IDLE
        self.reservation_id = None
        self.email_status = None
