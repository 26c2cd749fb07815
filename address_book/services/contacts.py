"""Business rules for contact records.

The service validates input, enforces email uniqueness, merges partial updates
onto stored records and performs the soft-delete transition. Storage access
goes through :class:`ContactRepository`, which is handed to the service by the
caller.

Uniqueness is checked with a read before each write so callers get a clear
duplicate error. Two concurrent writers may both pass that check; the
``UNIQUE`` constraint on ``contacts.email`` then rejects the second write and
the resulting ``IntegrityError`` is reported as :class:`DuplicateFailure`.
Any other constraint violation is an :class:`InternalFailure`.
"""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable, Mapping, Sequence
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, TypeVar
from uuid import uuid4

from pydantic import BaseModel, TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from address_book.core.exceptions import (
    DuplicateFailure,
    InternalFailure,
    NotFoundFailure,
    ValidationFailure,
)
from address_book.core.logging import log_context
from address_book.models import Contact
from address_book.schemas import ContactCreate, ContactId, ContactUpdate

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

_contact_id_adapter: TypeAdapter[str] = TypeAdapter(ContactId)

# SQLite and PostgreSQL wording for a violated unique index on contacts.email
EMAIL_UNIQUE_MARKERS = ("UNIQUE constraint failed: contacts.email", "uq_contacts_email")


def new_contact_id() -> str:
    return str(uuid4())


class ContactRepository:
    """Query helpers for the ``contacts`` table bound to one session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, contact_id: str) -> Contact | None:
        result = await self.session.execute(select(Contact).where(Contact.id == contact_id))
        return result.scalars().first()

    async def list_all(self) -> Sequence[Contact]:
        result = await self.session.execute(select(Contact))
        return result.scalars().all()

    async def find_by_email(self, email: str, *, exclude_id: str | None = None) -> Contact | None:
        """Return a record holding ``email``, ignoring ``exclude_id`` if given."""
        stmt = select(Contact).where(Contact.email == email)
        if exclude_id is not None:
            stmt = stmt.where(Contact.id != exclude_id)
        result = await self.session.execute(stmt.limit(1))
        return result.scalars().first()

    def add(self, contact: Contact) -> None:
        self.session.add(contact)

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    async def refresh(self, contact: Contact) -> None:
        await self.session.refresh(contact)


def _parse(schema: type[SchemaT], payload: SchemaT | Mapping[str, Any]) -> SchemaT:
    if isinstance(payload, schema):
        return payload
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailure.from_pydantic(exc) from exc


def _violates_email_uniqueness(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return any(marker in message for marker in EMAIL_UNIQUE_MARKERS)


def _parse_contact_id(value: Any) -> str:
    try:
        return _contact_id_adapter.validate_python(value)
    except ValidationError as exc:
        raise ValidationFailure("Invalid contact identifier", fields=["id"]) from exc


class ContactService:
    """Create, read, update and deactivate contact records."""

    def __init__(
        self,
        repository: ContactRepository,
        *,
        today: Callable[[], date] = date.today,
        id_factory: Callable[[], str] = new_contact_id,
    ) -> None:
        self.repository = repository
        self._today = today
        self._id_factory = id_factory

    async def get(self, contact_id: str) -> Contact | None:
        """Return the record with ``contact_id`` or ``None`` when absent."""

        async with self._store_call("get", contact_id):
            return await self.repository.get(contact_id)

    async def list_all(self) -> Sequence[Contact]:
        """Return every record, active or not, in store order."""

        async with self._store_call("list"):
            return await self.repository.list_all()

    async def create(self, payload: ContactCreate | Mapping[str, Any]) -> Contact:
        """Persist a new active contact and return it as stored."""

        data = _parse(ContactCreate, payload)
        self._check_birth_date(data.birth_date)
        contact_id = self._id_factory()

        async with self._store_call("create", contact_id):
            if await self.repository.find_by_email(data.email) is not None:
                logger.info("Rejected contact with duplicate email")
                raise DuplicateFailure()

            contact = Contact(id=contact_id, is_active=True, **data.model_dump())
            self.repository.add(contact)
            await self.repository.commit()
            await self.repository.refresh(contact)
            logger.info("Contact created")

        return contact

    async def update(
        self, contact_id: str, payload: ContactUpdate | Mapping[str, Any]
    ) -> Contact:
        """Overwrite the supplied fields of an existing record.

        Fields missing from ``payload`` keep their stored value and the active
        flag is never changed here.
        """

        contact_id = _parse_contact_id(contact_id)
        changes = _parse(ContactUpdate, payload).model_dump(exclude_unset=True)
        self._check_birth_date(changes.get("birth_date"))

        async with self._store_call("update", contact_id):
            contact = await self._get_or_fail(contact_id)

            if "email" in changes:
                holder = await self.repository.find_by_email(changes["email"], exclude_id=contact_id)
                if holder is not None:
                    logger.info("Rejected update with duplicate email")
                    raise DuplicateFailure()

            for field, value in changes.items():
                setattr(contact, field, value)
            await self.repository.commit()
            await self.repository.refresh(contact)
            logger.info("Contact updated", extra={"fields": sorted(changes)})

        return contact

    async def deactivate(self, contact_id: str) -> Contact:
        """Soft-delete a record. Repeating the call on an inactive record succeeds."""

        contact_id = _parse_contact_id(contact_id)

        async with self._store_call("deactivate", contact_id):
            contact = await self._get_or_fail(contact_id)
            contact.deactivate()
            await self.repository.commit()
            await self.repository.refresh(contact)
            logger.info("Contact deactivated")

        return contact

    async def _get_or_fail(self, contact_id: str) -> Contact:
        contact = await self.repository.get(contact_id)
        if contact is None:
            logger.info("Contact not found")
            raise NotFoundFailure()
        return contact

    def _check_birth_date(self, birth_date: date | None) -> None:
        if birth_date is not None and birth_date > self._today():
            raise ValidationFailure('"birth_date" must be in the past.', fields=["birth_date"])

    @asynccontextmanager
    async def _store_call(self, operation: str, contact_id: str | None = None) -> AsyncIterator[None]:
        with log_context(operation=operation, contact_id=contact_id):
            try:
                yield
            except IntegrityError as exc:
                await self.repository.rollback()
                if _violates_email_uniqueness(exc):
                    logger.info("Store rejected duplicate email")
                    raise DuplicateFailure() from exc
                logger.exception("Store rejected write")
                raise InternalFailure() from exc
            except SQLAlchemyError as exc:
                await self.repository.rollback()
                logger.exception("Contact store call failed")
                raise InternalFailure() from exc
