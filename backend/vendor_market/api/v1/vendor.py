from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from vendor_market.api.deps import require_vendor
from vendor_market.db import SessionDep
from vendor_market.models import Application, Event, Vendor
from vendor_market.schemas import (
    ApplicationListItem,
    ApplicationRead,
    EventSummary,
    StatusCounts,
    VendorDashboard,
    VendorProfileUpdate,
    VendorRead,
)
from vendor_market.services.applications import count_by_status
from vendor_market.services.permissions import RequestContext, get_linked_vendor

router = APIRouter()


def build_dashboard(session: Session, vendor: Vendor | None) -> VendorDashboard:
    """The vendor's applications, newest first, with counts by status."""
    if vendor is None:
        return VendorDashboard(vendor=None, applications=[], counts=StatusCounts())

    rows = session.exec(
        select(Application, Event)
        .join(Event, Event.id == Application.event_id)
        .where(Application.vendor_id == vendor.id)
        .order_by(Application.submitted_at.desc())
    ).all()
    vendor_read = VendorRead.model_validate(vendor)
    applications = [
        ApplicationListItem(
            **ApplicationRead.model_validate(application).model_dump(exclude={"organizer_notes"}),
            vendor=vendor_read,
            event=EventSummary.model_validate(event),
        )
        for application, event in rows
    ]
    return VendorDashboard(
        vendor=vendor_read,
        applications=applications,
        counts=StatusCounts(**count_by_status(session, vendor_id=vendor.id)),
    )


def _linked_vendor_or_404(session: Session, context: RequestContext) -> Vendor:
    vendor = get_linked_vendor(session, context.user)
    if vendor is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No vendor profile is linked to this account",
        )
    return vendor


@router.get("/dashboard", response_model=VendorDashboard, summary="Vendor dashboard")
def read_dashboard(
    session: SessionDep,
    context: RequestContext = Depends(require_vendor),
) -> VendorDashboard:
    return build_dashboard(session, get_linked_vendor(session, context.user))


@router.get("/profile", response_model=VendorRead, summary="Get vendor profile")
def read_profile(
    session: SessionDep,
    context: RequestContext = Depends(require_vendor),
) -> Vendor:
    return _linked_vendor_or_404(session, context)


@router.put("/profile", response_model=VendorRead, summary="Update vendor profile")
def update_profile(
    payload: VendorProfileUpdate,
    session: SessionDep,
    context: RequestContext = Depends(require_vendor),
) -> Vendor:
    vendor = _linked_vendor_or_404(session, context)
    for key, value in payload.model_dump().items():
        setattr(vendor, key, value)
    vendor.touch()
    session.add(vendor)
    session.commit()
    session.refresh(vendor)
    return vendor
