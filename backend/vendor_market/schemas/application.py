from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vendor_market.models import ApplicationStatus, BoothPreference, ProductCategory
from vendor_market.schemas.attachment import AttachmentRead
from vendor_market.schemas.event import EventSummary
from vendor_market.schemas.vendor import VendorInfo, VendorRead


class ApplicationDetails(BaseModel):
    event_id: UUID
    booth_preference: Optional[BoothPreference] = None
    product_categories: list[ProductCategory] = Field(min_length=1, max_length=5)
    special_requirements: Optional[str] = Field(default=None, max_length=500)

    @field_validator("booth_preference", "special_requirements", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ApplicationSubmit(VendorInfo, ApplicationDetails):
    """Everything the public apply form sends, apart from files."""


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus


class ApplicationNotesUpdate(BaseModel):
    organizer_notes: Optional[str] = Field(default=None, max_length=5000)


class ApplicationRead(BaseModel):
    id: UUID
    event_id: UUID
    vendor_id: UUID
    status: ApplicationStatus
    booth_preference: Optional[BoothPreference] = None
    product_categories: list[str] = []
    special_requirements: Optional[str] = None
    organizer_notes: Optional[str] = None
    submitted_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("product_categories", mode="before")
    @classmethod
    def none_to_list(cls, value):
        return value or []


class ApplicationListItem(ApplicationRead):
    vendor: VendorRead
    event: Optional[EventSummary] = None


class ApplicationDetail(ApplicationRead):
    vendor: VendorRead
    event: EventSummary
    attachments: list[AttachmentRead] = []


class ApplicationSubmitted(BaseModel):
    application_id: UUID
    vendor_id: UUID
    attachments: list[AttachmentRead] = []


class StatusCounts(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    waitlisted: int = 0
