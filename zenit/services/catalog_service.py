from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zenit.models.service import Service, ServicePublic


async def list_active_services(session: AsyncSession) -> list[Service]:
    result = await session.execute(
        select(Service).where(Service.is_active == True).order_by(Service.name)  # noqa: E712
    )
    return list(result.scalars().all())


async def get_active_service(session: AsyncSession, service_id: int) -> Service | None:
    result = await session.execute(
        select(Service).where(Service.id == service_id, Service.is_active == True)  # noqa: E712
    )
    return result.scalar_one_or_none()


def service_to_public(service: Service) -> ServicePublic:
    return ServicePublic(
        id=service.id,
        name=service.name,
        description=service.description,
        duration_minutes=service.duration_minutes,
        price=service.price,
    )
