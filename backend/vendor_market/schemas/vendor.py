from __future__ import annotations

import re
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

PHONE_PATTERN = re.compile(r"^(\+1)?[\s.-]?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}$")
WEBSITE_PATTERN = re.compile(
    r"^(https?:\/\/)?(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
    r"([-a-zA-Z0-9()@:%_+.~#?&//=]*)$"
)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class VendorFields(BaseModel):
    """Editable vendor information shared by the apply form and the profile."""

    business_name: str = Field(min_length=2, max_length=100)
    contact_name: str = Field(min_length=2, max_length=100)
    phone: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("business_name", "contact_name", mode="before")
    @classmethod
    def strip_names(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("phone", mode="before")
    @classmethod
    def validate_phone(cls, value: Optional[str]) -> Optional[str]:
        value = _blank_to_none(value)
        if value is not None and not PHONE_PATTERN.match(value):
            raise ValueError("Please enter a valid phone number")
        return value

    @field_validator("website", mode="before")
    @classmethod
    def validate_website(cls, value: Optional[str]) -> Optional[str]:
        value = _blank_to_none(value)
        if value is not None and not WEBSITE_PATTERN.match(value):
            raise ValueError("Please enter a valid website URL")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def blank_description(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)


class VendorInfo(VendorFields):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class VendorProfileUpdate(VendorFields):
    """Profile edits. The email address is not editable."""


class VendorRead(BaseModel):
    id: UUID
    business_name: str
    contact_name: str
    email: str
    phone: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
