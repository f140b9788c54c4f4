"""Field formatting and validation rules shared by the client and the server."""

import re
from dataclasses import dataclass
from typing import Mapping

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_NON_DIGITS = re.compile(r"[^0-9]")
_SHORT_MASK = re.compile(r"([0-9]{0,2})([0-9]{0,4})([0-9]{0,4})")
_LONG_MASK = re.compile(r"([0-9]{0,2})([0-9]{0,5})([0-9]{0,4})")

NAME_REQUIRED = "Nome é obrigatório"
NAME_TOO_SHORT = "Nome muito curto"
EMAIL_REQUIRED = "Email é obrigatório"
EMAIL_INVALID = "Email inválido"
PHONE_REQUIRED = "Telefone é obrigatório"
PHONE_INVALID = "Número inválido. Use formato (XX) XXXXX-XXXX"


@dataclass(frozen=True)
class FieldError:
    field: str  # name | email | phone | general
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


def digits_only(value: str) -> str:
    return _NON_DIGITS.sub("", value)


def format_phone(raw: str) -> str:
    """Mask a Brazilian phone number as the user types.

    Up to ten digits use the landline mask ``(XX) XXXX-XXXX``, eleven use the
    mobile mask ``(XX) XXXXX-XXXX``. Partial input is masked as far as it goes.
    """
    cleaned = digits_only(raw)
    mask = _SHORT_MASK if len(cleaned) <= 10 else _LONG_MASK
    match = mask.fullmatch(cleaned)
    if match is None:
        return raw

    area, first, last = match.groups()
    parts = [
        f"({area}" if area else "",
        ") " if len(area) == 2 else "",
        first,
        f"-{last}" if last else "",
    ]
    return "".join(parts)


def is_valid_email(value: str) -> bool:
    return EMAIL_RE.fullmatch(value) is not None


def is_valid_brazilian_phone(value: str) -> bool:
    cleaned = digits_only(value)
    return len(cleaned) in (10, 11) and cleaned[0] in "123456789"


def validate_local(data: Mapping[str, str | None]) -> list[FieldError]:
    """Check whichever of name/email/phone are present in ``data``.

    A key that is absent (or None) is skipped, which lets callers validate one
    field at a time while the user is still typing.
    """
    errors: list[FieldError] = []

    name = data.get("name")
    if name is not None:
        if not name.strip():
            errors.append(FieldError("name", NAME_REQUIRED))
        elif len(name.strip()) < 2:
            errors.append(FieldError("name", NAME_TOO_SHORT))

    email = data.get("email")
    if email is not None:
        if not email.strip():
            errors.append(FieldError("email", EMAIL_REQUIRED))
        elif not is_valid_email(email):
            errors.append(FieldError("email", EMAIL_INVALID))

    phone = data.get("phone")
    if phone is not None:
        if not phone.strip():
            errors.append(FieldError("phone", PHONE_REQUIRED))
        elif not is_valid_brazilian_phone(phone):
            errors.append(FieldError("phone", PHONE_INVALID))

    return errors
