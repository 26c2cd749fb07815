"""Pydantic schemas for the address book service."""

from .contact import UUID_PATTERN, ContactCreate, ContactId, ContactRead, ContactUpdate

__all__ = [
    "ContactCreate",
    "ContactId",
    "ContactRead",
    "ContactUpdate",
    "UUID_PATTERN",
]
