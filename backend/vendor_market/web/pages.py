"""Server-rendered pages."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlmodel import select

from vendor_market.api.deps import ContextDep, StorageDep
from vendor_market.api.v1.admin import list_users_with_roles
from vendor_market.api.v1.auth import clear_session_cookie, set_session_cookie
from vendor_market.api.v1.vendor import build_dashboard
from vendor_market.core.limiter import limiter
from vendor_market.core.roles import Role, home_path_for
from vendor_market.db import SessionDep
from vendor_market.models import BoothPreference, Event, EventStatus, ProductCategory
from vendor_market.schemas import ApplicationSubmit, LoginRequest, SignupRequest
from vendor_market.services.applications import (
    ApplicationFilters,
    count_by_status,
    query_applications,
    submit_application,
)
from vendor_market.services.attachments import ALLOWED_FILE_TYPES, MAX_FILES, read_upload
from vendor_market.services.auth import AuthError, safe_redirect, sign_in, sign_up
from vendor_market.services.permissions import get_linked_vendor
from vendor_market.web.guards import page_guard
from vendor_market.web.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(page_guard)], include_in_schema=False)


def _form_errors(exc: ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        message = error["msg"]
        # pydantic prefixes custom validator messages
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        field = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{field}: {message}" if field else message)
    return messages


def _redirect(location: str) -> RedirectResponse:
    return RedirectResponse(location, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/", response_class=HTMLResponse)
def index(request: Request, session: SessionDep, context: ContextDep):
    now = datetime.utcnow()
    events = session.exec(
        select(Event)
        .where(Event.status == EventStatus.ACTIVE.value)
        .where((Event.application_deadline.is_(None)) | (Event.application_deadline >= now))
        .order_by(Event.event_date.asc())
    ).all()
    return templates.TemplateResponse(
        request, "pages/index.html", {"viewer": context, "events": events}
    )


def _apply_context(context, event: Event, form: dict, errors: list[str]) -> dict:
    return {
        "viewer": context,
        "event": event,
        "form": form,
        "errors": errors,
        "categories": [c.value for c in ProductCategory],
        "booth_preferences": [b.value for b in BoothPreference],
        "accept": ",".join(ALLOWED_FILE_TYPES),
        "max_files": MAX_FILES,
    }


def _open_event_or_404(session: SessionDep, event_id: UUID) -> Event:
    event = session.get(Event, event_id)
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


@router.get("/apply", response_class=HTMLResponse)
def apply_page(
    request: Request,
    session: SessionDep,
    context: ContextDep,
    event_id: Optional[UUID] = Query(default=None, alias="event"),
):
    if event_id is None:
        return _redirect("/")
    event = _open_event_or_404(session, event_id)
    form = {"email": context.user.email if context.user else "", "product_categories": []}
    return templates.TemplateResponse(request, "pages/apply.html", _apply_context(context, event, form, []))


@router.post("/apply", response_class=HTMLResponse)
@limiter.limit("10/hour")
async def apply_submit(
    request: Request,
    session: SessionDep,
    storage: StorageDep,
    context: ContextDep,
    event_id: UUID = Form(...),
    business_name: str = Form(""),
    contact_name: str = Form(""),
    email: str = Form(""),
    phone: Optional[str] = Form(None),
    website: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    booth_preference: Optional[str] = Form(None),
    product_categories: list[str] = Form(default=[]),
    special_requirements: Optional[str] = Form(None),
    files: Optional[list[UploadFile]] = File(None),
):
    event = _open_event_or_404(session, event_id)
    form = {
        "business_name": business_name,
        "contact_name": contact_name,
        "email": email,
        "phone": phone or "",
        "website": website or "",
        "description": description or "",
        "booth_preference": booth_preference or "",
        "product_categories": product_categories,
        "special_requirements": special_requirements or "",
    }

    def rerender(errors: list[str], status_code: int = status.HTTP_400_BAD_REQUEST):
        return templates.TemplateResponse(
            request,
            "pages/apply.html",
            _apply_context(context, event, form, errors),
            status_code=status_code,
        )

    try:
        payload = ApplicationSubmit(event_id=event.id, **form)
    except ValidationError as e:
        return rerender(_form_errors(e))

    incoming = [await read_upload(upload) for upload in files or [] if upload.filename]
    try:
        result = submit_application(session, storage, payload, incoming, user=context.user)
    except HTTPException as e:
        if e.status_code >= 500:
            raise
        return rerender([str(e.detail)], status_code=e.status_code)

    return templates.TemplateResponse(
        request,
        "pages/apply_success.html",
        {"viewer": context, "event": event, "application": result.application, "vendor": result.vendor},
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/login", response_class=HTMLResponse)
def login_page(
    request: Request,
    context: ContextDep,
    redirect_to: Optional[str] = Query(default=None, alias="redirectTo"),
):
    if context.is_authenticated and context.role is not None:
        return _redirect(home_path_for(context.role))
    return templates.TemplateResponse(
        request,
        "pages/login.html",
        {"viewer": context, "redirect_to": safe_redirect(redirect_to), "errors": [], "email": ""},
    )


@router.post("/login", response_class=HTMLResponse)
def login_submit(
    request: Request,
    session: SessionDep,
    context: ContextDep,
    email: str = Form(""),
    password: str = Form(""),
    redirect_to: Optional[str] = Form(default=None, alias="redirectTo"),
):
    def rerender(errors: list[str]):
        return templates.TemplateResponse(
            request,
            "pages/login.html",
            {
                "viewer": context,
                "redirect_to": safe_redirect(redirect_to),
                "errors": errors,
                "email": email,
            },
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    try:
        form = LoginRequest(email=email, password=password, redirect_to=redirect_to)
    except ValidationError as e:
        return rerender(_form_errors(e))

    try:
        result = sign_in(session, form.email, form.password, form.redirect_to)
    except AuthError as e:
        return rerender([str(e)])

    response = _redirect(result.redirect_to)
    set_session_cookie(response, result.access_token)
    return response


@router.get("/signup", response_class=HTMLResponse)
def signup_page(request: Request, context: ContextDep):
    if context.is_authenticated and context.role is not None:
        return _redirect(home_path_for(context.role))
    return templates.TemplateResponse(
        request, "pages/signup.html", {"viewer": context, "errors": [], "email": ""}
    )


@router.post("/signup", response_class=HTMLResponse)
def signup_submit(
    request: Request,
    session: SessionDep,
    context: ContextDep,
    email: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form("", alias="confirmPassword"),
):
    def rerender(errors: list[str]):
        return templates.TemplateResponse(
            request,
            "pages/signup.html",
            {"viewer": context, "errors": errors, "email": email},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    try:
        form = SignupRequest(email=email, password=password, confirm_password=confirm_password)
    except ValidationError as e:
        return rerender(_form_errors(e))

    try:
        sign_up(session, form.email, form.password)
        result = sign_in(session, form.email, form.password)
    except AuthError as e:
        return rerender([str(e)])

    response = _redirect(result.redirect_to)
    set_session_cookie(response, result.access_token)
    return response


@router.post("/logout")
def logout():
    response = _redirect("/login")
    clear_session_cookie(response)
    return response


@router.get("/dashboard", response_class=HTMLResponse)
def organizer_dashboard(request: Request, session: SessionDep, context: ContextDep):
    recent = query_applications(session, ApplicationFilters(), limit=10)
    events = session.exec(select(Event).order_by(Event.event_date.desc())).all()
    return templates.TemplateResponse(
        request,
        "pages/dashboard.html",
        {
            "viewer": context,
            "counts": count_by_status(session),
            "recent": recent,
            "events": events,
        },
    )


@router.get("/dashboard/admin", response_class=HTMLResponse)
def admin_dashboard(request: Request, session: SessionDep, context: ContextDep):
    return templates.TemplateResponse(
        request,
        "pages/admin.html",
        {"viewer": context, "users": list_users_with_roles(session), "roles": list(Role)},
    )


@router.get("/dashboard/team", response_class=HTMLResponse)
def team_page(request: Request, session: SessionDep, context: ContextDep):
    staff = [
        user
        for user in list_users_with_roles(session)
        if user.role in (Role.ORGANIZER, Role.ADMIN)
    ]
    return templates.TemplateResponse(
        request, "pages/team.html", {"viewer": context, "staff": staff}
    )


@router.get("/vendor", response_class=HTMLResponse)
def vendor_dashboard(request: Request, session: SessionDep, context: ContextDep):
    dashboard = build_dashboard(session, get_linked_vendor(session, context.user))
    return templates.TemplateResponse(
        request, "pages/vendor.html", {"viewer": context, "dashboard": dashboard}
    )


@router.get("/unauthorized", response_class=HTMLResponse)
def unauthorized(request: Request, context: ContextDep):
    home = home_path_for(context.role) if context.role else "/"
    return templates.TemplateResponse(
        request,
        "pages/unauthorized.html",
        {"viewer": context, "home": home},
        status_code=status.HTTP_403_FORBIDDEN,
    )
