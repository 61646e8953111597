from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    WAITLISTED = "waitlisted"


class BoothPreference(str, Enum):
    INDOOR = "indoor"
    OUTDOOR = "outdoor"
    NO_PREFERENCE = "no_preference"


class ProductCategory(str, Enum):
    HANDMADE_CRAFTS = "handmade_crafts"
    JEWELRY = "jewelry"
    CLOTHING = "clothing"
    ART = "art"
    FOOD_BEVERAGES = "food_beverages"
    HOME_DECOR = "home_decor"
    BEAUTY_WELLNESS = "beauty_wellness"
    VINTAGE_ANTIQUES = "vintage_antiques"
    PLANTS_FLOWERS = "plants_flowers"
    PET_PRODUCTS = "pet_products"
    OTHER = "other"


class Application(SQLModel, table=True):
    """A vendor's request to take part in one event.

    Status is a flat field: organizers may set any status from any status.
    """

    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("vendor_id", "event_id", name="uq_applications_vendor_event"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    event_id: UUID = Field(foreign_key="events.id", nullable=False, index=True)
    vendor_id: UUID = Field(foreign_key="vendors.id", nullable=False, index=True)
    status: str = Field(default=ApplicationStatus.PENDING.value, max_length=20, index=True)
    booth_preference: Optional[str] = Field(default=None, max_length=20)
    product_categories: Optional[list] = Field(
        default=None, sa_column=Column(JSON, nullable=True)
    )
    special_requirements: Optional[str] = Field(default=None, max_length=500)
    organizer_notes: Optional[str] = Field(default=None)
    submitted_at: datetime = Field(default_factory=datetime.utcnow, nullable=False, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()
