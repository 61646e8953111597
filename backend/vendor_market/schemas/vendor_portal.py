from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from vendor_market.schemas.application import ApplicationListItem, StatusCounts
from vendor_market.schemas.vendor import VendorRead


class VendorDashboard(BaseModel):
    vendor: Optional[VendorRead] = None
    applications: list[ApplicationListItem] = []
    counts: StatusCounts
