from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AttachmentRead(BaseModel):
    id: UUID
    application_id: UUID
    file_name: str
    file_type: str
    file_size: Optional[int] = None
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)
