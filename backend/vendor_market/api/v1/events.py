from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel import func, select

from vendor_market.api.deps import ContextDep, require_organizer
from vendor_market.core.roles import Role
from vendor_market.db import SessionDep
from vendor_market.models import Application, Event, EventStatus
from vendor_market.schemas import (
    EventCreate,
    EventRead,
    EventStatusUpdate,
    EventUpdate,
    EventWithCounts,
)
from vendor_market.services.permissions import RequestContext

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_event_or_404(session: SessionDep, event_id: UUID) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


@router.get(
    "/",
    response_model=list[EventWithCounts],
    summary="List all events with application counts",
)
def list_events(
    session: SessionDep,
    context: RequestContext = Depends(require_organizer),
) -> list[EventWithCounts]:
    counts = dict(
        session.exec(
            select(Application.event_id, func.count()).group_by(Application.event_id)
        ).all()
    )
    events = session.exec(select(Event).order_by(Event.event_date.desc())).all()
    return [
        EventWithCounts.model_validate(event).model_copy(
            update={"application_count": counts.get(event.id, 0)}
        )
        for event in events
    ]


@router.get(
    "/open",
    response_model=list[EventRead],
    summary="Events currently accepting applications",
)
def list_open_events(session: SessionDep) -> list[Event]:
    now = datetime.utcnow()
    statement = (
        select(Event)
        .where(Event.status == EventStatus.ACTIVE.value)
        .where((Event.application_deadline.is_(None)) | (Event.application_deadline >= now))
        .order_by(Event.event_date.asc())
    )
    return list(session.exec(statement).all())


@router.get("/{event_id}", response_model=EventRead, summary="Get event")
def read_event(event_id: UUID, session: SessionDep, context: ContextDep) -> Event:
    """Active events are public; organizers can read any event."""
    event = _get_event_or_404(session, event_id)
    if event.status != EventStatus.ACTIVE.value and not context.has_role(Role.ORGANIZER):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


@router.post(
    "/",
    response_model=EventRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create event",
)
def create_event(
    payload: EventCreate,
    session: SessionDep,
    context: RequestContext = Depends(require_organizer),
) -> Event:
    event = Event(**payload.model_dump(), status=EventStatus.DRAFT.value)
    session.add(event)
    session.commit()
    session.refresh(event)
    logger.info(f"[Events] {context.user.email} created event {event.id}")
    return event


@router.put("/{event_id}", response_model=EventRead, summary="Update event")
def update_event(
    event_id: UUID,
    payload: EventUpdate,
    session: SessionDep,
    context: RequestContext = Depends(require_organizer),
) -> Event:
    event = _get_event_or_404(session, event_id)
    for key, value in payload.model_dump().items():
        setattr(event, key, value)
    event.touch()
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


@router.patch("/{event_id}/status", response_model=EventRead, summary="Publish or close event")
def update_event_status(
    event_id: UUID,
    payload: EventStatusUpdate,
    session: SessionDep,
    context: RequestContext = Depends(require_organizer),
) -> Event:
    """Only draft -> active and active -> closed are allowed."""
    event = _get_event_or_404(session, event_id)
    allowed = event.next_status()
    if payload.status != allowed:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot change event status from {event.status} to {payload.status.value}",
        )

    event.status = payload.status.value
    event.touch()
    session.add(event)
    session.commit()
    session.refresh(event)
    logger.info(f"[Events] Event {event.id} is now {event.status}")
    return event


@router.delete(
    "/{event_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete event without applications",
)
def delete_event(
    event_id: UUID,
    session: SessionDep,
    context: RequestContext = Depends(require_organizer),
) -> Response:
    event = _get_event_or_404(session, event_id)
    application_count = session.exec(
        select(func.count()).select_from(Application).where(Application.event_id == event.id)
    ).one()
    if application_count > 0:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=(
                f"Cannot delete this event because it has {application_count} application(s). "
                'Set the status to "Closed" instead.'
            ),
        )

    session.delete(event)
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
