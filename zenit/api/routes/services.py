from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from zenit.core.db import get_session
from zenit.models.service import ServicePublic
from zenit.services.catalog_service import get_active_service, list_active_services, service_to_public

router = APIRouter(prefix="/services", tags=["services"])


@router.get("", response_model=list[ServicePublic])
async def list_services(session: AsyncSession = Depends(get_session)) -> list[ServicePublic]:
    """Active services, ordered by name."""
    return [service_to_public(s) for s in await list_active_services(session)]


@router.get("/{service_id}", response_model=ServicePublic)
async def get_service(service_id: int, session: AsyncSession = Depends(get_session)) -> ServicePublic:
    service = await get_active_service(session, service_id)
    if not service:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    return service_to_public(service)
