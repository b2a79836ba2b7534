from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from zenit.models.common import utc_naive_now


class Role(str, Enum):
    CLIENT = "client"
    THERAPIST = "therapist"


class ProfileBase(SQLModel):
    email: str = Field(unique=True, index=True)
    full_name: str
    phone: str | None = None
    role: str = Field(default=Role.CLIENT.value, max_length=20)


class Profile(ProfileBase, table=True):
    __tablename__ = "profiles"
    id: int | None = Field(default=None, primary_key=True)
    hashed_password: str
    created_at: datetime = Field(default_factory=utc_naive_now, sa_type=DateTime())
    updated_at: datetime = Field(default_factory=utc_naive_now, sa_type=DateTime())


class ProfileCreate(SQLModel):
    email: str
    password: str
    full_name: str
    phone: str | None = None


class ProfilePublic(SQLModel):
    id: int
    email: str
    full_name: str
    phone: str | None = None
    role: Role
