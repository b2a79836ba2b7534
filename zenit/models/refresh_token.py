from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from zenit.models.common import to_naive_utc


class RefreshToken(SQLModel, table=True):
    __tablename__ = "refresh_tokens"
    id: int | None = Field(default=None, primary_key=True)
    profile_id: int = Field(foreign_key="profiles.id", index=True)
    jti: str = Field(unique=True, index=True)
    expires_at: datetime = Field(index=True, sa_type=DateTime())
    revoked: bool = False

    def model_post_init(self, __context: object) -> None:
        """Ensure expires_at is naive UTC for TIMESTAMP WITHOUT TIME ZONE."""
        if self.expires_at is not None:
            self.expires_at = to_naive_utc(self.expires_at)
