from __future__ import annotations

import logging

from vendor_market.core.celery_utils import safe_celery_delay
from vendor_market.core.config import settings
from vendor_market.models import Application, Event, Vendor
from vendor_market.services.email import (
    EmailContent,
    format_event_date,
    render_application_received,
    render_status_update,
    send_email,
)

logger = logging.getLogger(__name__)


def dispatch_email(to: str, content: EmailContent) -> bool:
    """
    Hand a rendered message to the background worker, or send it inline.

    Never raises: a notification failure must not undo the write that
    triggered it.
    """
    try:
        if settings.EMAIL_USE_CELERY:
            from vendor_market.tasks.email import send_email_task

            queued = safe_celery_delay(
                send_email_task,
                to=to,
                subject=content.subject,
                html=content.html,
                text=content.text,
            )
            if queued is not None:
                return True
            logger.info(f"[Notification] Celery unavailable, sending inline to {to}")

        result = send_email(to=to, subject=content.subject, html=content.html, text=content.text)
    except Exception:
        logger.exception(f"[Notification] Unexpected error sending {content.subject!r} to {to}")
        return False

    if not result.success:
        logger.error(f"[Notification] Email to {to} failed: {result.error}")
    return result.success


def notify_application_received(application: Application, vendor: Vendor, event: Event) -> bool:
    """Confirmation sent once a new application has been committed."""
    try:
        content = render_application_received(
            vendor_name=vendor.contact_name,
            business_name=vendor.business_name,
            event_name=event.name,
            event_date=format_event_date(event.event_date),
            application_id=str(application.id),
        )
    except Exception:
        logger.exception(f"[Notification] Could not render confirmation for application {application.id}")
        return False
    return dispatch_email(vendor.email, content)


def notify_status_changed(application: Application, vendor: Vendor, event: Event) -> bool:
    """Tell the vendor about the application's current status and notes."""
    try:
        content = render_status_update(
            vendor_name=vendor.contact_name,
            business_name=vendor.business_name,
            event_name=event.name,
            event_date=format_event_date(event.event_date),
            status=application.status,
            organizer_notes=application.organizer_notes,
        )
    except Exception:
        logger.exception(f"[Notification] Could not render status update for application {application.id}")
        return False
    return dispatch_email(vendor.email, content)
