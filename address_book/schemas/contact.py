"""Pydantic schemas for contact resources."""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"

ContactId = Annotated[str, Field(min_length=36, max_length=36, pattern=UUID_PATTERN)]
Email = Annotated[str, Field(min_length=1, max_length=255)]
NamePart = Annotated[str, Field(min_length=1, max_length=128)]
CountryCode = Annotated[str, Field(min_length=1, max_length=8)]
PhoneNumber = Annotated[str, Field(min_length=1, max_length=24)]


class ContactFields(BaseModel):
    """Optional contact fields shared by the create and update payloads."""

    model_config = ConfigDict(extra="forbid")

    first_name: NamePart | None = None
    middle_initial: NamePart | None = None
    last_name: NamePart | None = None
    birth_date: date | None = None
    country_code: CountryCode | None = None
    phone_number: PhoneNumber | None = None

    @field_validator("*", mode="before")
    @classmethod
    def reject_explicit_null(cls, value: Any) -> Any:
        # defaults are not validated, so this only sees values the caller sent
        if value is None:
            msg = "Field may be omitted but must not be null"
            raise ValueError(msg)
        return value

    @field_validator("birth_date", mode="before")
    @classmethod
    def require_iso_date(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            msg = "birth_date must be a calendar date"
            raise ValueError(msg)
        if isinstance(value, date):
            return value
        if isinstance(value, str) and ISO_DATE_PATTERN.match(value):
            return value
        msg = "birth_date must use the YYYY-MM-DD format"
        raise ValueError(msg)


class ContactCreate(ContactFields):
    email: Email


class ContactUpdate(ContactFields):
    email: Email | None = None


class ContactRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    first_name: str | None = None
    middle_initial: str | None = None
    last_name: str | None = None
    birth_date: date | None = None
    country_code: str | None = None
    phone_number: str | None = None
    is_active: bool
