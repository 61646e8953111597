from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from vendor_market.models import EventStatus


class EventBase(BaseModel):
    name: str = Field(min_length=2, max_length=200)
    event_date: datetime
    location: str = Field(min_length=2, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    application_deadline: Optional[datetime] = None
    max_vendors: Optional[int] = Field(default=None, ge=1, le=9999)

    @field_validator("name", "location", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("event_date", "application_deadline")
    @classmethod
    def to_naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Stored datetimes are naive UTC."""
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    @model_validator(mode="after")
    def deadline_before_event(self):
        if self.application_deadline and self.application_deadline > self.event_date:
            raise ValueError("Application deadline must be on or before the event date")
        return self


class EventCreate(EventBase):
    pass


class EventUpdate(EventBase):
    """Full replacement of the editable fields. Status changes go through /status."""


class EventStatusUpdate(BaseModel):
    status: EventStatus


class EventRead(BaseModel):
    id: UUID
    name: str
    event_date: datetime
    location: str
    description: Optional[str] = None
    application_deadline: Optional[datetime] = None
    max_vendors: Optional[int] = None
    status: EventStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EventWithCounts(EventRead):
    application_count: int = 0


class EventSummary(BaseModel):
    id: UUID
    name: str
    event_date: datetime
    location: str
    status: EventStatus

    model_config = ConfigDict(from_attributes=True)
