"""Shipping address validation for checkout.

Inputs are trimmed before checking. The first failing field is reported back
with a message the buyer can act on.
"""

import re

from protean.exceptions import ValidationError
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

PHONE_PATTERN = re.compile(r"^(?=.{10,15}$)\+?[0-9\s()-]+$")
PINCODE_PATTERN = re.compile(r"^\d{4,10}$")

FIELD_ORDER = ("full_name", "phone", "address", "city", "state", "pincode")

MESSAGES = {
    "full_name": "Full name must be between 1 and 200 characters",
    "phone": "Phone number must be 10-15 digits, optionally starting with +",
    "address": "Address must be between 1 and 500 characters",
    "city": "City must be between 1 and 100 characters",
    "state": "State must be at most 100 characters",
    "pincode": "Pincode must be 4-10 digits",
}


def _bounded(value, field, max_length, min_length=1):
    if not (min_length <= len(value) <= max_length):
        raise ValueError(MESSAGES[field])
    return value


class ShippingDetails(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    full_name: str
    phone: str
    address: str
    city: str
    state: str = ""
    pincode: str

    @field_validator("full_name")
    @classmethod
    def check_full_name(cls, v):
        return _bounded(v, "full_name", 200)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        if not PHONE_PATTERN.match(v):
            raise ValueError(MESSAGES["phone"])
        return v

    @field_validator("address")
    @classmethod
    def check_address(cls, v):
        return _bounded(v, "address", 500)

    @field_validator("city")
    @classmethod
    def check_city(cls, v):
        return _bounded(v, "city", 100)

    @field_validator("state")
    @classmethod
    def check_state(cls, v):
        return _bounded(v, "state", 100, min_length=0)

    @field_validator("pincode")
    @classmethod
    def check_pincode(cls, v):
        if not PINCODE_PATTERN.match(v):
            raise ValueError(MESSAGES["pincode"])
        return v


def validate_shipping_address(data) -> dict:
    """Return the trimmed address or raise ``ValidationError`` for the first bad field."""
    if isinstance(data, BaseModel):
        data = data.model_dump()
    data = {key: ("" if data.get(key) is None else data.get(key)) for key in FIELD_ORDER}

    try:
        details = ShippingDetails(**data)
    except PydanticValidationError as exc:
        failed = {err["loc"][0] for err in exc.errors() if err.get("loc")}
        field = next((f for f in FIELD_ORDER if f in failed), FIELD_ORDER[0])
        raise ValidationError({field: [MESSAGES[field]]}) from None

    return details.model_dump()
