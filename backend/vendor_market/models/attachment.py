from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class Attachment(SQLModel, table=True):
    """File attached to an application."""

    __tablename__ = "attachments"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    application_id: UUID = Field(foreign_key="applications.id", nullable=False, index=True)
    file_name: str = Field(max_length=255)  # Original client-side name
    file_path: str = Field(max_length=500)  # Storage key
    file_type: str = Field(max_length=100)  # MIME type
    file_size: Optional[int] = Field(default=None, ge=0)
    uploaded_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
