"""Database models package for the address book service."""

from .base import Base
from .contact import Contact, ContactStatus

__all__ = [
    "Base",
    "Contact",
    "ContactStatus",
]
