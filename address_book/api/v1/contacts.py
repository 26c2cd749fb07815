"""Contacts API routes."""
from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from address_book.core.db import get_session
from address_book.schemas import UUID_PATTERN, ContactCreate, ContactRead, ContactUpdate
from address_book.services.contacts import ContactRepository, ContactService

router = APIRouter(tags=["contacts"])

AnyContactId = Annotated[str, Path(alias="id")]
# checked together with the request body so one response names every bad field
ContactIdPath = Annotated[
    str, Path(alias="id", min_length=36, max_length=36, pattern=UUID_PATTERN)
]


def get_contact_service(session: AsyncSession = Depends(get_session)) -> ContactService:
    """Build a service bound to the request's session."""
    return ContactService(ContactRepository(session))


@router.get("/contact/{id}", response_model=None)
async def retrieve_contact(
    contact_id: AnyContactId, service: ContactService = Depends(get_contact_service)
) -> ContactRead | dict[str, Any]:
    """Retrieve a single contact, or an empty object when none matches."""

    contact = await service.get(contact_id)
    if contact is None:
        return {}
    return ContactRead.model_validate(contact)


@router.get("/contacts")
async def list_contacts(
    service: ContactService = Depends(get_contact_service),
) -> list[ContactRead]:
    """List every contact, including deactivated ones."""

    contacts = await service.list_all()
    return [ContactRead.model_validate(contact) for contact in contacts]


@router.post("/contact", status_code=status.HTTP_201_CREATED)
async def create_contact(
    payload: ContactCreate, service: ContactService = Depends(get_contact_service)
) -> ContactRead:
    """Create a new contact."""

    contact = await service.create(payload)
    return ContactRead.model_validate(contact)


@router.put("/contact/{id}")
async def update_contact(
    contact_id: ContactIdPath,
    payload: ContactUpdate,
    service: ContactService = Depends(get_contact_service),
) -> ContactRead:
    """Update the supplied fields of a contact."""

    contact = await service.update(contact_id, payload)
    return ContactRead.model_validate(contact)


@router.delete("/contact/{id}")
async def deactivate_contact(
    contact_id: ContactIdPath, service: ContactService = Depends(get_contact_service)
) -> ContactRead:
    """Mark a contact inactive. The record itself is kept."""

    contact = await service.deactivate(contact_id)
    return ContactRead.model_validate(contact)
