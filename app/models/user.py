"""
app/models/user.py

Purpose: User record model

- Field constraints (name, email, phone, address, active)
- Create / full-update payload and tri-state partial-update payload
- Stored record with store-assigned id
- Translation of pydantic errors into per-field messages
"""

from pydantic import BaseModel, EmailStr, Field, ConfigDict, ValidationError, field_validator
from pydantic_core import PydanticCustomError
from typing import Optional, Dict, Any, List, Tuple, Type, TypeVar

from app.core.exceptions import PayloadValidationError

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
PHONE_MAX_LENGTH = 15
ADDRESS_MAX_LENGTH = 200
# Ids are positive and must fit a signed 64-bit BSON integer
MAX_USER_ID = 2**63 - 1

# Mutable fields, in wire order
USER_FIELDS = ("name", "email", "phone", "address", "active")

_NAME_LENGTH = f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
_ACTIVE_BOOLEAN = "Active must be true or false"

FIELD_MESSAGES: Dict[str, Dict[str, str]] = {
    "name": {
        "missing": "Name is required",
        "blank": "Name is required",
        "string_too_short": _NAME_LENGTH,
        "string_too_long": _NAME_LENGTH,
    },
    "email": {
        "missing": "Email is required",
        "blank": "Email is required",
        "value_error": "Email should be valid",
    },
    "phone": {
        "string_too_long": f"Phone number cannot exceed {PHONE_MAX_LENGTH} characters",
    },
    "address": {
        "string_too_long": f"Address cannot exceed {ADDRESS_MAX_LENGTH} characters",
    },
    "active": {
        "bool_parsing": _ACTIVE_BOOLEAN,
        "bool_type": _ACTIVE_BOOLEAN,
    },
}


def _reject_blank(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        raise PydanticCustomError("blank", "must not be blank")
    return v


class UserBase(BaseModel):
    name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH, description="Display name")
    email: EmailStr = Field(..., description="Unique email address")
    phone: Optional[str] = Field(None, max_length=PHONE_MAX_LENGTH, description="Contact phone number")
    address: Optional[str] = Field(None, max_length=ADDRESS_MAX_LENGTH, description="Postal address")
    active: bool = Field(default=True, description="Whether the user is active")

    model_config = ConfigDict(
        from_attributes=True,
        extra="ignore",
    )

    @field_validator("name", "email", mode="before")
    @classmethod
    def reject_blank(cls, v):
        return _reject_blank(v)

    @field_validator("active", mode="before")
    @classmethod
    def default_active(cls, v):
        # An explicit null keeps the record's non-null invariant
        return True if v is None else v


class UserCreate(UserBase):
    """Payload for creation and full replacement. A client-sent id is ignored."""
    pass


class User(UserBase):
    """A persisted user record."""
    id: Optional[int] = Field(None, description="Store-assigned identifier")


class UserPatch(BaseModel):
    """
    Partial-update payload.

    Each field is tri-state: absent (not in model_fields_set),
    explicit null (present, None) or an explicit value.
    """
    name: Optional[str] = Field(None, min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=PHONE_MAX_LENGTH)
    address: Optional[str] = Field(None, max_length=ADDRESS_MAX_LENGTH)
    active: Optional[bool] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("name", "email", mode="before")
    @classmethod
    def reject_blank(cls, v):
        return _reject_blank(v)

    def provided_fields(self) -> Dict[str, Any]:
        """Fields present in the payload with a non-null value."""
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }


ModelT = TypeVar("ModelT", bound=BaseModel)


def describe_validation_errors(exc: ValidationError) -> List[Tuple[str, str]]:
    """
    Converts pydantic errors into (field, message) pairs.
    """
    problems = []
    for error in exc.errors():
        loc = error.get("loc") or ("body",)
        field = str(loc[0])
        message = FIELD_MESSAGES.get(field, {}).get(error.get("type"), error.get("msg"))
        problems.append((field, message))
    return problems


def validate_user_payload(model: Type[ModelT], data: Dict[str, Any]) -> ModelT:
    """
    Validates raw payload fields against a user model.

    Raises:
        PayloadValidationError: listing every violated field and rule
    """
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        problems = describe_validation_errors(exc)
        message = "; ".join(f"{field}: {text}" for field, text in problems)
        raise PayloadValidationError(message=message, details=problems) from exc
