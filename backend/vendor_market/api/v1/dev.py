"""Development helpers for email templates. Hidden in production."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse
from pydantic import EmailStr, TypeAdapter, ValidationError

from vendor_market.core.config import settings
from vendor_market.models import ApplicationStatus
from vendor_market.services.email import (
    is_email_configured,
    render_application_received,
    render_status_update,
    render_test_email,
    send_email,
)
from vendor_market.web.templating import templates

logger = logging.getLogger(__name__)

SAMPLE_DATA = {
    "vendor_name": "Sarah Johnson",
    "business_name": "Handcrafted Jewelry Co.",
    "event_name": "Winter Holiday Market 2025",
    "event_date": "Saturday, December 20, 2025",
}
SAMPLE_APPLICATION_ID = "a1b2c3d4-e5f6-7890-abcd-ef1234567890"
SAMPLE_NOTES = "Looking forward to seeing your beautiful jewelry collection at the market!"

TEMPLATES = ("application-received", "status-update")


def development_only() -> None:
    if settings.is_production:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")


router = APIRouter(dependencies=[Depends(development_only)])


@router.get("/preview-email", response_class=HTMLResponse, summary="Preview email templates")
def preview_email(
    request: Request,
    template: Optional[str] = Query(default=None),
    status_value: ApplicationStatus = Query(default=ApplicationStatus.APPROVED, alias="status"),
    notes: Optional[str] = Query(default=None),
):
    if template is None:
        return templates.TemplateResponse(
            request,
            "pages/email_preview_index.html",
            {"statuses": [s.value for s in ApplicationStatus]},
        )

    if template == "application-received":
        content = render_application_received(application_id=SAMPLE_APPLICATION_ID, **SAMPLE_DATA)
    elif template == "status-update":
        content = render_status_update(
            status=status_value,
            organizer_notes=notes if notes is not None else SAMPLE_NOTES,
            **SAMPLE_DATA,
        )
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown template: {template}. Available: {', '.join(TEMPLATES)}",
        )
    return HTMLResponse(content.html)


@router.get("/test-email", summary="Send a test email")
def test_email(to: str = Query(...)) -> dict:
    try:
        address = TypeAdapter(EmailStr).validate_python(to)
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please enter a valid email address",
        ) from None

    configured = is_email_configured()
    content = render_test_email(to=address, configured=configured)
    result = send_email(to=address, subject=content.subject, html=content.html, text=content.text)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to send test email: {result.error}",
        )
    return {
        "success": True,
        "message_id": result.message_id,
        "configured": configured,
        "to": address,
    }
