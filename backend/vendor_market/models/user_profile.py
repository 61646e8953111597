from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import event
from sqlmodel import Field, SQLModel

from vendor_market.core.roles import Role
from vendor_market.models.user import User


class UserProfile(SQLModel, table=True):
    """Authorization record. Its id is the id of the matching users row."""

    __tablename__ = "user_profiles"

    id: UUID = Field(foreign_key="users.id", primary_key=True)
    role: str = Field(default=Role.VENDOR.value, max_length=20, index=True)
    vendor_id: Optional[UUID] = Field(
        default=None, foreign_key="vendors.id", nullable=True, index=True
    )
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()


@event.listens_for(User, "after_insert")
def _provision_vendor_profile(mapper, connection, target: User) -> None:
    """Every new identity starts out with a vendor profile."""
    now = datetime.utcnow()
    connection.execute(
        UserProfile.__table__.insert().values(
            id=target.id,
            role=Role.VENDOR.value,
            created_at=now,
            updated_at=now,
        )
    )
