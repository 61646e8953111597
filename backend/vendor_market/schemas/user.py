from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from vendor_market.core.roles import Role


class UserRead(BaseModel):
    id: UUID
    email: str
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CurrentUserRead(BaseModel):
    """Signed-in identity with its resolved role."""

    user: UserRead
    role: Role
    vendor_id: Optional[UUID] = None


class UserWithRole(BaseModel):
    id: UUID
    email: str
    role: Role
    created_at: datetime
    role_updated_at: Optional[datetime] = None


class RoleUpdate(BaseModel):
    role: Role


class TeamInviteRequest(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()
