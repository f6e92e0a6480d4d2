"""
Form schema for a submitted contact.

Every validator raises ``PydanticCustomError`` so the message shown next to a
field is exactly the text below, without pydantic's "Value error, " prefix.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import phonenumbers
from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

NAME_MAX_LENGTH = 255
# email-validator rejects anything longer, whatever the column allows
EMAIL_MAX_LENGTH = 254
ADDRESS_MAX_LENGTH = 255
PHONE_MIN_LENGTH = 10
PHONE_MAX_LENGTH = 20

TRUTHY = {"on", "yes", "true", "1"}

FieldErrors = Dict[str, List[str]]


def _invalid(field: str, message: str) -> PydanticCustomError:
    return PydanticCustomError(f"{field}_invalid", message)


def canonical_phone_number(value: str, region: Optional[str] = None) -> Optional[str]:
    """
    E.164 form of ``value`` if it is a possible number (country-code aware,
    not just digit counting), else None. Numbers without a leading "+" need a
    default region to be parsed.
    """
    try:
        parsed = phonenumbers.parse(value, region)
    except phonenumbers.NumberParseException:
        return None
    if not phonenumbers.is_possible_number(parsed):
        return None
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def is_possible_phone_number(value: str, region: Optional[str] = None) -> bool:
    return canonical_phone_number(value, region) is not None


class ContactForm(BaseModel):
    # defaults are validated too, so a missing field reports "... is required"
    model_config = ConfigDict(str_strip_whitespace=True, validate_default=True)

    name: str = ""
    email: str = ""
    phone_number: str = ""
    address: Optional[str] = None
    is_favorite: bool = False

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        if not v:
            raise _invalid("name", "Name is required")
        if len(v) > NAME_MAX_LENGTH:
            raise _invalid("name", "Name must be less than 255 characters")
        return v

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        if not v:
            raise _invalid("email", "Email is required")
        if len(v) > EMAIL_MAX_LENGTH:
            raise _invalid("email", "Email must be less than 255 characters")
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError:
            raise _invalid("email", "Email must be a valid email address")
        return v

    @field_validator("phone_number")
    @classmethod
    def _check_phone_number(cls, v: str, info: ValidationInfo) -> str:
        if not v:
            raise _invalid("phone_number", "Phone number is required")
        if not PHONE_MIN_LENGTH <= len(v) <= PHONE_MAX_LENGTH:
            raise _invalid("phone_number", "Phone number must be between 10 and 20 characters")
        region = (info.context or {}).get("phone_region")
        canonical = canonical_phone_number(v, region)
        if canonical is None:
            raise _invalid("phone_number", "Phone number must be a valid phone number")
        # stored and compared in E.164 so one number can only exist once
        return canonical

    @field_validator("address")
    @classmethod
    def _check_address(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        if len(v) > ADDRESS_MAX_LENGTH:
            raise _invalid("address", "Address must be less than 255 characters")
        return v

    @field_validator("is_favorite", mode="before")
    @classmethod
    def _coerce_checkbox(cls, v: Any) -> bool:
        # HTML checkboxes send "on" when ticked and nothing otherwise
        if isinstance(v, str):
            return v.strip().lower() in TRUTHY
        return bool(v)


def field_errors(exc: ValidationError) -> FieldErrors:
    """Group pydantic errors by field name, preserving their order."""
    errors: FieldErrors = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "__all__"
        errors.setdefault(field, []).append(err["msg"])
    return errors


def parse_contact_form(data: Mapping[str, Any], phone_region: Optional[str] = None) -> ContactForm:
    """
    Validate raw form fields. Unknown keys (``intent``, ``id``, ...) are
    ignored; raises ``ValidationError`` with every failing field.
    """
    fields = {k: data[k] for k in ContactForm.model_fields if k in data}
    return ContactForm.model_validate(fields, context={"phone_region": phone_region})
