"""Version 1 API routes for the address book service."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from address_book.api.v1.contacts import router as contacts_router
from address_book.core.config import Settings, get_settings

router = APIRouter()
router.include_router(contacts_router)


@router.get("/health", tags=["health"])
async def health_check(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    """Report the service health information."""
    return {"status": "ok", "version": settings.version}
