"""Transactional email: template rendering and SMTP delivery."""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from vendor_market.core.config import settings
from vendor_market.models import ApplicationStatus

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "emails"

template_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(enabled_extensions=("html",)),
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass
class EmailContent:
    subject: str
    html: str
    text: str


@dataclass
class EmailResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class StatusCopy:
    subject: str
    heading: str
    message: str
    label: str
    badge_color: str
    badge_text_color: str


STATUS_COPY: dict[ApplicationStatus, StatusCopy] = {
    ApplicationStatus.APPROVED: StatusCopy(
        subject="Congratulations! Your Application Has Been Approved",
        heading="Great News! You're In!",
        message=(
            "We're thrilled to let you know that your vendor application has been "
            "approved. We can't wait to have you at the market!"
        ),
        label="Approved",
        badge_color="#dcfce7",
        badge_text_color="#166534",
    ),
    ApplicationStatus.REJECTED: StatusCopy(
        subject="Application Update: Not Selected This Time",
        heading="Thank You for Applying",
        message=(
            "After careful consideration, we regret to inform you that we're unable "
            "to offer you a vendor spot at this time. We received many wonderful "
            "applications and had to make difficult decisions."
        ),
        label="Not Selected",
        badge_color="#fee2e2",
        badge_text_color="#991b1b",
    ),
    ApplicationStatus.WAITLISTED: StatusCopy(
        subject="Application Update: You're on the Waitlist",
        heading="You're on Our Waitlist",
        message=(
            "Thank you for your patience! Your application has been placed on our "
            "waitlist. This means we loved your application but have reached our "
            "vendor capacity for this event."
        ),
        label="Waitlisted",
        badge_color="#fef3c7",
        badge_text_color="#92400e",
    ),
    ApplicationStatus.PENDING: StatusCopy(
        subject="Application Received: Under Review",
        heading="Your Application is Under Review",
        message=(
            "Your application is currently being reviewed by our team. We'll notify "
            "you once a decision has been made."
        ),
        label="Pending Review",
        badge_color="#fef3c7",
        badge_text_color="#92400e",
    ),
}


def format_event_date(value: datetime) -> str:
    """Saturday, December 20, 2025"""
    return f"{value:%A, %B} {value.day}, {value.year}"


def _render(template: str, **context) -> tuple[str, str]:
    context.setdefault("site_name", settings.PROJECT_NAME)
    context.setdefault("year", datetime.utcnow().year)
    html = template_env.get_template(f"{template}.html").render(**context)
    text = template_env.get_template(f"{template}.txt").render(**context)
    return html, text.strip()


def render_application_received(
    *,
    vendor_name: str,
    business_name: str,
    event_name: str,
    event_date: str,
    application_id: str,
) -> EmailContent:
    html, text = _render(
        "application_received",
        vendor_name=vendor_name,
        business_name=business_name,
        event_name=event_name,
        event_date=event_date,
        application_id=application_id,
    )
    return EmailContent(subject=f"Application Received: {event_name}", html=html, text=text)


def render_status_update(
    *,
    vendor_name: str,
    business_name: str,
    event_name: str,
    event_date: str,
    status: ApplicationStatus | str,
    organizer_notes: Optional[str] = None,
) -> EmailContent:
    status = ApplicationStatus(status)
    copy = STATUS_COPY[status]
    html, text = _render(
        "status_update",
        vendor_name=vendor_name,
        business_name=business_name,
        event_name=event_name,
        event_date=event_date,
        status=status.value,
        copy=copy,
        organizer_notes=organizer_notes,
    )
    return EmailContent(subject=f"{copy.subject} - {event_name}", html=html, text=text)


def render_test_email(*, to: str, configured: bool) -> EmailContent:
    html, text = _render(
        "test_email",
        to=to,
        timestamp=datetime.utcnow().isoformat(),
        from_address=settings.EMAIL_FROM_ADDRESS,
        configured=configured,
    )
    return EmailContent(subject=f"Test Email from {settings.PROJECT_NAME}", html=html, text=text)


def is_email_configured() -> bool:
    return bool(settings.SMTP_HOST)


def send_email(
    to: str,
    subject: str,
    html: str,
    text: str,
    from_address: Optional[str] = None,
) -> EmailResult:
    """
    Send one message over SMTP.

    Without SMTP_HOST the message is logged instead of sent and reported as
    delivered, so local development works without a mail server.
    """
    from_address = from_address or settings.EMAIL_FROM_ADDRESS

    if not is_email_configured():
        message_id = f"dev-{int(datetime.utcnow().timestamp() * 1000)}"
        logger.info(
            f"[Email] Would send email (SMTP not configured): "
            f"to={to!r} subject={subject!r} from={from_address!r}"
        )
        return EmailResult(success=True, message_id=message_id)

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = to
    msg["Message-ID"] = make_msgid()
    msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as smtp:
            if settings.SMTP_USE_TLS:
                smtp.starttls()
            if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
                smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"[Email] Failed to send email to {to}: {e}")
        return EmailResult(success=False, error=str(e))

    logger.info(f"[Email] Sent {subject!r} to {to}")
    return EmailResult(success=True, message_id=msg["Message-ID"])
