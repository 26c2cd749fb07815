"""Contact model definition."""
from __future__ import annotations

from datetime import date
from enum import Enum

from sqlalchemy import Boolean, Date, String, true
from sqlalchemy.orm import Mapped, mapped_column

from address_book.models.base import Base


class ContactStatus(str, Enum):
    """Lifecycle states of a contact record.

    ``ACTIVE`` is the initial state and ``INACTIVE`` is terminal.
    """

    ACTIVE = "active"
    INACTIVE = "inactive"


class Contact(Base):
    """A person's contact details managed by the address book."""

    __tablename__ = "contacts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(128))
    middle_initial: Mapped[str | None] = mapped_column(String(128))
    last_name: Mapped[str | None] = mapped_column(String(128))
    birth_date: Mapped[date | None] = mapped_column(Date())
    country_code: Mapped[str | None] = mapped_column(String(8))
    phone_number: Mapped[str | None] = mapped_column(String(24))
    is_active: Mapped[bool] = mapped_column(
        Boolean(), default=True, server_default=true(), nullable=False
    )

    @property
    def status(self) -> ContactStatus:
        return ContactStatus.ACTIVE if self.is_active else ContactStatus.INACTIVE

    def deactivate(self) -> None:
        """Move the record to ``INACTIVE``; a no-op if it already is."""
        self.is_active = False
