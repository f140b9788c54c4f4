from fastapi import APIRouter

from cookite.server.routers.schemas import FieldErrorOut, ValidateIn, ValidateOut
from cookite.server.services.validation import validate_fields


router = APIRouter()


@router.post("/validate", response_model=ValidateOut)
async def validate_endpoint(payload: ValidateIn) -> ValidateOut:
    errors = validate_fields(payload.email, payload.phone)
    return ValidateOut(
        valid=not errors,
        errors=[FieldErrorOut(**error.as_dict()) for error in errors],
    )
