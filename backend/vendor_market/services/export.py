"""CSV export of applications."""

from __future__ import annotations

import csv
import io
from datetime import date, datetime
from typing import Iterable

from vendor_market.models import Application, Event, Vendor

CSV_HEADERS = [
    "Business Name",
    "Contact Name",
    "Email",
    "Phone",
    "Website",
    "Status",
    "Submitted Date",
    "Event",
    "Booth Preference",
    "Product Categories",
    "Special Requirements",
    "Organizer Notes",
    "Business Description",
]


def _format_date(value: datetime | None) -> str:
    """Dec 20, 2025"""
    if value is None:
        return ""
    return f"{value:%b} {value.day}, {value.year}"


def export_filename(today: date | None = None) -> str:
    today = today or datetime.utcnow().date()
    return f"applications-export-{today.isoformat()}.csv"


def build_csv(rows: Iterable[tuple[Application, Vendor, Event | None]]) -> str:
    """Render rows as CSV text; the csv module does the quoting."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for application, vendor, event in rows:
        writer.writerow(
            [
                vendor.business_name,
                vendor.contact_name,
                vendor.email,
                vendor.phone or "",
                vendor.website or "",
                application.status,
                _format_date(application.submitted_at),
                event.name if event else "",
                application.booth_preference or "",
                "; ".join(application.product_categories or []),
                application.special_requirements or "",
                application.organizer_notes or "",
                vendor.description or "",
            ]
        )
    return buffer.getvalue()
