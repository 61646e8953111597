import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, Response, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlmodel import select

from vendor_market.api.deps import ContextDep, StorageDep, get_optional_user, require_organizer
from vendor_market.core.limiter import limiter
from vendor_market.db import SessionDep
from vendor_market.models import Application, ApplicationStatus, Attachment, Event, User, Vendor
from vendor_market.schemas import (
    ApplicationDetail,
    ApplicationListItem,
    ApplicationNotesUpdate,
    ApplicationRead,
    ApplicationStatusUpdate,
    ApplicationSubmit,
    ApplicationSubmitted,
    AttachmentRead,
    EventSummary,
    PaginatedResponse,
    PaginationParams,
    StatusCounts,
    VendorRead,
)
from vendor_market.services.applications import (
    ApplicationFilters,
    count_applications,
    count_by_status,
    get_application_or_404,
    query_applications,
    submit_application,
    update_notes,
    update_status,
)
from vendor_market.services.attachments import count_attachments, read_upload, store_files, validate_files
from vendor_market.services.export import build_csv, export_filename
from vendor_market.services.permissions import RequestContext, can_view_application

logger = logging.getLogger(__name__)

router = APIRouter()


def _filters(
    status_filter: Optional[ApplicationStatus] = Query(default=None, alias="status"),
    event_id: Optional[UUID] = Query(default=None),
    search: Optional[str] = Query(default=None, max_length=200),
) -> ApplicationFilters:
    return ApplicationFilters(status=status_filter, event_id=event_id, search=search)


def _ensure_can_view(session: SessionDep, context: RequestContext, application: Application) -> None:
    if not context.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not can_view_application(session, context, application):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized: insufficient role",
        )


@router.post(
    "/",
    response_model=ApplicationSubmitted,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a vendor application",
)
@limiter.limit("10/hour")
async def submit(
    request: Request,
    session: SessionDep,
    storage: StorageDep,
    user: Optional[User] = Depends(get_optional_user),
    business_name: str = Form(...),
    contact_name: str = Form(...),
    email: str = Form(...),
    event_id: str = Form(...),
    product_categories: list[str] = Form(...),
    phone: Optional[str] = Form(None),
    website: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    booth_preference: Optional[str] = Form(None),
    special_requirements: Optional[str] = Form(None),
    files: Optional[list[UploadFile]] = File(None),
) -> ApplicationSubmitted:
    """Public multipart form. Signed-in callers get the vendor linked to their account."""
    try:
        payload = ApplicationSubmit(
            business_name=business_name,
            contact_name=contact_name,
            email=email,
            phone=phone,
            website=website,
            description=description,
            event_id=event_id,
            booth_preference=booth_preference,
            product_categories=product_categories,
            special_requirements=special_requirements,
        )
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from None

    incoming = [await read_upload(upload) for upload in files or [] if upload.filename]
    result = submit_application(session, storage, payload, incoming, user=user)
    return ApplicationSubmitted(
        application_id=result.application.id,
        vendor_id=result.vendor.id,
        attachments=[AttachmentRead.model_validate(a) for a in result.attachments],
    )


@router.get(
    "/",
    response_model=PaginatedResponse[ApplicationListItem],
    summary="List applications",
)
def list_applications(
    session: SessionDep,
    pagination: Annotated[PaginationParams, Query()],
    filters: ApplicationFilters = Depends(_filters),
    context: RequestContext = Depends(require_organizer),
) -> PaginatedResponse[ApplicationListItem]:
    total = count_applications(session, filters)
    rows = query_applications(session, filters, offset=pagination.skip, limit=pagination.limit)
    items = [
        ApplicationListItem(
            **ApplicationRead.model_validate(application).model_dump(),
            vendor=VendorRead.model_validate(vendor),
            event=EventSummary.model_validate(event) if event else None,
        )
        for application, vendor, event in rows
    ]
    return PaginatedResponse[ApplicationListItem].create(items, total, pagination.page, pagination.page_size)


@router.get("/counts", response_model=StatusCounts, summary="Application counts by status")
def read_counts(
    session: SessionDep,
    event_id: Optional[UUID] = Query(default=None),
    context: RequestContext = Depends(require_organizer),
) -> StatusCounts:
    return StatusCounts(**count_by_status(session, event_id=event_id))


@router.get("/export", summary="Export applications as CSV")
def export_applications(
    session: SessionDep,
    filters: ApplicationFilters = Depends(_filters),
    context: RequestContext = Depends(require_organizer),
) -> Response:
    rows = query_applications(session, filters)
    logger.info(f"[Applications] {context.user.email} exported {len(rows)} application(s)")
    return Response(
        content=build_csv(rows),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.get("/{application_id}", response_model=ApplicationDetail, summary="Get application")
def read_application(
    application_id: UUID,
    session: SessionDep,
    context: ContextDep,
) -> ApplicationDetail:
    """Organizers see any application; vendors only their own, without organizer notes."""
    application = get_application_or_404(session, application_id)
    _ensure_can_view(session, context, application)

    vendor = session.get(Vendor, application.vendor_id)
    event = session.get(Event, application.event_id)
    attachments = session.exec(
        select(Attachment)
        .where(Attachment.application_id == application.id)
        .order_by(Attachment.uploaded_at)
    ).all()

    detail = ApplicationDetail(
        **ApplicationRead.model_validate(application).model_dump(),
        vendor=VendorRead.model_validate(vendor),
        event=EventSummary.model_validate(event),
        attachments=[AttachmentRead.model_validate(a) for a in attachments],
    )
    if not context.has_role("organizer"):
        detail.organizer_notes = None
    return detail


@router.patch(
    "/{application_id}/status",
    response_model=ApplicationRead,
    summary="Change application status",
)
def change_status(
    application_id: UUID,
    payload: ApplicationStatusUpdate,
    session: SessionDep,
    context: RequestContext = Depends(require_organizer),
) -> Application:
    application = get_application_or_404(session, application_id)
    return update_status(session, application, payload.status)


@router.patch(
    "/{application_id}/notes",
    response_model=ApplicationRead,
    summary="Save organizer notes",
)
def change_notes(
    application_id: UUID,
    payload: ApplicationNotesUpdate,
    session: SessionDep,
    context: RequestContext = Depends(require_organizer),
) -> Application:
    application = get_application_or_404(session, application_id)
    return update_notes(session, application, payload.organizer_notes)


@router.post(
    "/{application_id}/attachments",
    response_model=list[AttachmentRead],
    status_code=status.HTTP_201_CREATED,
    summary="Attach more files to an application",
)
async def add_attachments(
    application_id: UUID,
    session: SessionDep,
    storage: StorageDep,
    context: ContextDep,
    files: list[UploadFile] = File(...),
) -> list[AttachmentRead]:
    application = get_application_or_404(session, application_id)
    _ensure_can_view(session, context, application)

    incoming = [await read_upload(upload) for upload in files]
    validate_files(incoming, existing_count=count_attachments(session, application.id))
    attachments = store_files(session, storage, application.id, incoming)
    return [AttachmentRead.model_validate(a) for a in attachments]
