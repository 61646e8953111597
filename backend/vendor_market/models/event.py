from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class EventStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"


# draft -> "Publish" -> active -> "Close" -> closed. Closed is terminal.
EVENT_STATUS_TRANSITIONS: dict[EventStatus, EventStatus] = {
    EventStatus.DRAFT: EventStatus.ACTIVE,
    EventStatus.ACTIVE: EventStatus.CLOSED,
}


class Event(SQLModel, table=True):
    """Market event vendors apply to."""

    __tablename__ = "events"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    name: str = Field(max_length=200)
    event_date: datetime = Field(nullable=False, index=True)
    location: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    application_deadline: Optional[datetime] = Field(default=None, nullable=True)
    max_vendors: Optional[int] = Field(default=None, nullable=True)
    status: str = Field(default=EventStatus.DRAFT.value, max_length=20, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()

    def next_status(self) -> Optional[EventStatus]:
        """The only status this event may move to, or None when closed."""
        return EVENT_STATUS_TRANSITIONS.get(EventStatus(self.status))

    def is_accepting_applications(self, now: datetime | None = None) -> bool:
        if self.status != EventStatus.ACTIVE.value:
            return False
        if self.application_deadline is None:
            return True
        now = now or datetime.utcnow()
        return now <= self.application_deadline
