"""Celery tasks for outgoing email."""

from __future__ import annotations

import logging

from vendor_market.celery_app import celery_app
from vendor_market.services.email import send_email

logger = logging.getLogger(__name__)


@celery_app.task(name="vendor_market.tasks.email.send_email_task")
def send_email_task(to: str, subject: str, html: str, text: str) -> dict:
    """
    Deliver one message in the background.

    Returns:
        dict: success flag, message id and error (if any)
    """
    result = send_email(to=to, subject=subject, html=html, text=text)
    if not result.success:
        logger.error(f"Background email to {to} failed: {result.error}")
    return {
        "success": result.success,
        "message_id": result.message_id,
        "error": result.error,
    }
