from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class Vendor(SQLModel, table=True):
    """Applicant business."""

    __tablename__ = "vendors"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    business_name: str = Field(max_length=100)
    contact_name: str = Field(max_length=100)
    email: str = Field(index=True, unique=True, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    website: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = Field(default=None, max_length=1000)
    # A vendor record is linked to at most one identity
    user_id: Optional[UUID] = Field(
        default=None, foreign_key="users.id", nullable=True, unique=True
    )
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()
