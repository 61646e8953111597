"""Application lifecycle: submission, review queries and status writes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, func, select

from vendor_market.models import Application, ApplicationStatus, Attachment, Event, User, Vendor
from vendor_market.schemas import ApplicationSubmit
from vendor_market.services.attachments import IncomingFile, store_files, validate_files
from vendor_market.services.notifications import notify_application_received, notify_status_changed
from vendor_market.services.permissions import link_vendor_to_user
from vendor_market.services.storage import StorageBackend

logger = logging.getLogger(__name__)


@dataclass
class ApplicationFilters:
    status: Optional[ApplicationStatus] = None
    event_id: Optional[UUID] = None
    search: Optional[str] = None


@dataclass
class SubmissionResult:
    application: Application
    vendor: Vendor
    event: Event
    attachments: list[Attachment] = field(default_factory=list)


def _apply_filters(statement, filters: ApplicationFilters):
    if filters.status:
        statement = statement.where(Application.status == ApplicationStatus(filters.status).value)
    if filters.event_id:
        statement = statement.where(Application.event_id == filters.event_id)
    search = (filters.search or "").strip()
    if search:
        pattern = f"%{search.lower()}%"
        statement = statement.where(
            or_(
                func.lower(Vendor.business_name).like(pattern),
                func.lower(Vendor.contact_name).like(pattern),
                func.lower(Vendor.email).like(pattern),
            )
        )
    return statement


def query_applications(
    session: Session,
    filters: ApplicationFilters,
    offset: Optional[int] = None,
    limit: Optional[int] = None,
) -> list[tuple[Application, Vendor, Optional[Event]]]:
    """Matching applications with vendor and event, newest first."""
    statement = (
        select(Application, Vendor, Event)
        .join(Vendor, Vendor.id == Application.vendor_id)
        .outerjoin(Event, Event.id == Application.event_id)
    )
    statement = _apply_filters(statement, filters)
    statement = statement.order_by(Application.submitted_at.desc())
    if offset is not None:
        statement = statement.offset(offset)
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())


def count_applications(session: Session, filters: ApplicationFilters) -> int:
    statement = (
        select(func.count())
        .select_from(Application)
        .join(Vendor, Vendor.id == Application.vendor_id)
    )
    return session.exec(_apply_filters(statement, filters)).one()


def count_by_status(
    session: Session,
    event_id: Optional[UUID] = None,
    vendor_id: Optional[UUID] = None,
) -> dict[str, int]:
    """{"total": n, "pending": n, ...} with zeros for missing statuses."""
    statement = select(Application.status, func.count()).group_by(Application.status)
    if event_id:
        statement = statement.where(Application.event_id == event_id)
    if vendor_id:
        statement = statement.where(Application.vendor_id == vendor_id)

    counts = {s.value: 0 for s in ApplicationStatus}
    for app_status, count in session.exec(statement).all():
        counts[app_status] = count
    counts["total"] = sum(counts.values())
    return counts


def _find_or_update_vendor(session: Session, payload: ApplicationSubmit) -> Vendor:
    vendor = session.exec(select(Vendor).where(Vendor.email == payload.email)).one_or_none()
    if vendor is None:
        vendor = Vendor(
            business_name=payload.business_name,
            contact_name=payload.contact_name,
            email=payload.email,
            phone=payload.phone,
            website=payload.website,
            description=payload.description,
        )
    else:
        # Latest submission wins for contact details
        vendor.business_name = payload.business_name
        vendor.contact_name = payload.contact_name
        vendor.phone = payload.phone
        vendor.website = payload.website
        vendor.description = payload.description
        vendor.touch()
    session.add(vendor)
    session.flush()
    return vendor


def submit_application(
    session: Session,
    storage: StorageBackend,
    payload: ApplicationSubmit,
    files: list[IncomingFile],
    user: Optional[User] = None,
) -> SubmissionResult:
    """
    Record a new pending application with its files, then send the
    confirmation email.

    Raises HTTPException for a missing or closed event (404/409), a repeat
    application (409) or an invalid file batch (400).
    """
    event = session.get(Event, payload.event_id)
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    if not event.is_accepting_applications():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This event is not accepting applications",
        )

    validate_files(files)

    vendor = _find_or_update_vendor(session, payload)
    existing = session.exec(
        select(Application.id).where(
            Application.vendor_id == vendor.id,
            Application.event_id == event.id,
        )
    ).first()
    if existing is not None:
        session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You have already submitted an application for this event",
        )

    application = Application(
        event_id=event.id,
        vendor_id=vendor.id,
        status=ApplicationStatus.PENDING.value,
        booth_preference=payload.booth_preference.value if payload.booth_preference else None,
        product_categories=[c.value for c in payload.product_categories],
        special_requirements=payload.special_requirements,
    )
    session.add(application)
    # Signed-in applicants only claim the vendor registered under their own email
    if user is not None and payload.email == user.email.lower():
        link_vendor_to_user(session, vendor, user)

    attachments: list[Attachment] = []
    try:
        if files:
            session.flush()
            attachments = store_files(session, storage, application.id, files)
        else:
            session.commit()
    except IntegrityError:
        # Lost a race with a concurrent submission for the same pair
        session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You have already submitted an application for this event",
        ) from None

    session.refresh(application)
    session.refresh(vendor)
    session.refresh(event)
    logger.info(f"[Applications] Application {application.id} submitted for event {event.id}")

    notify_application_received(application, vendor, event)
    return SubmissionResult(application=application, vendor=vendor, event=event, attachments=attachments)


def get_application_or_404(session: Session, application_id: UUID) -> Application:
    application = session.get(Application, application_id)
    if application is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")
    return application


def update_status(session: Session, application: Application, new_status: ApplicationStatus) -> Application:
    """
    Set any status from any status and email the vendor once.

    Re-applying the current status is still a write and still notifies.
    """
    application.status = ApplicationStatus(new_status).value
    application.touch()
    session.add(application)
    session.commit()
    session.refresh(application)
    logger.info(f"[Applications] Application {application.id} set to {application.status}")

    vendor = session.get(Vendor, application.vendor_id)
    event = session.get(Event, application.event_id)
    if vendor is not None and event is not None:
        notify_status_changed(application, vendor, event)
    else:
        logger.warning(f"[Applications] Missing vendor or event for {application.id}, no email sent")
    return application


def update_notes(session: Session, application: Application, notes: Optional[str]) -> Application:
    application.organizer_notes = notes.strip() if notes and notes.strip() else None
    application.touch()
    session.add(application)
    session.commit()
    session.refresh(application)
    return application
