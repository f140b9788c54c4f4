"""Authoritative server-side validation.

The client runs the same shape checks while the user types, but nothing it
sends is trusted: every submission is re-checked here and all violations are
collected before anything is persisted.
"""

from cookite.server.routers.schemas import ReservationIn
from cookite.validation import FieldError, is_valid_brazilian_phone, is_valid_email


INVALID_EMAIL_DOMAINS = frozenset({"example.com", "test.com", "fake.com", "invalid.com"})

EMAIL_INVALID = "Email inválido"
EMAIL_DOMAIN_INVALID = "Domínio do email inválido"
PHONE_INVALID = "Número de telefone inválido. Use formato brasileiro (XX) XXXXX-XXXX"


def is_allowed_email_domain(email: str) -> bool:
    _, _, domain = email.partition("@")
    if not domain:
        return False
    return domain.strip().lower() not in INVALID_EMAIL_DOMAINS


def validate_fields(email: str | None, phone: str | None) -> list[FieldError]:
    """Validate the fields a visitor is editing; blank values are not checked."""
    errors: list[FieldError] = []

    if email:
        if not is_valid_email(email):
            errors.append(FieldError("email", EMAIL_INVALID))
        elif not is_allowed_email_domain(email):
            errors.append(FieldError("email", EMAIL_DOMAIN_INVALID))

    if phone and not is_valid_brazilian_phone(phone):
        errors.append(FieldError("phone", PHONE_INVALID))

    return errors


def validate_submission(payload: ReservationIn) -> list[str]:
    """Return every violation in ``payload``; an empty list means it may be persisted."""
    errors: list[str] = []
    customer = payload.customer

    if not customer.name.strip():
        errors.append("Nome é obrigatório")

    email = customer.email.strip()
    if not email:
        errors.append("Email é obrigatório")
    elif not is_valid_email(email):
        errors.append(EMAIL_INVALID)

    phone = customer.phone.strip()
    if not phone:
        errors.append("Telefone é obrigatório")
    elif not is_valid_brazilian_phone(phone):
        errors.append(PHONE_INVALID)

    if not payload.items:
        errors.append("Selecione pelo menos um produto")

    if email and is_valid_email(email) and not is_allowed_email_domain(email):
        errors.append("Domínio do email inválido ou suspeito")

    return errors
