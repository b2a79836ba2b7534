from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from zenit.models.common import utc_naive_now


class Service(SQLModel, table=True):
    __tablename__ = "services"
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    description: str | None = None
    duration_minutes: int = Field(default=60, gt=0)
    price: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utc_naive_now, sa_type=DateTime())


class ServicePublic(SQLModel):
    id: int
    name: str
    description: str | None = None
    duration_minutes: int
    price: Decimal
