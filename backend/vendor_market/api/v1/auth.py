from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from vendor_market.api.deps import require_vendor
from vendor_market.core.config import settings
from vendor_market.db import SessionDep
from vendor_market.models import User
from vendor_market.schemas import (
    CurrentUserRead,
    LoginRequest,
    SignupRequest,
    TokenResponse,
    UserRead,
)
from vendor_market.services.auth import AuthError, sign_in, sign_up
from vendor_market.services.permissions import RequestContext, get_linked_vendor

router = APIRouter()


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME)


@router.post(
    "/signup",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
)
def signup(payload: SignupRequest, session: SessionDep) -> User:
    try:
        return sign_up(session, payload.email, payload.password)
    except AuthError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None


@router.post("/login", response_model=TokenResponse, summary="Sign in")
def login(payload: LoginRequest, response: Response, session: SessionDep) -> TokenResponse:
    try:
        result = sign_in(session, payload.email, payload.password, payload.redirect_to)
    except AuthError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None

    set_session_cookie(response, result.access_token)
    return TokenResponse(
        access_token=result.access_token,
        role=result.role.value,
        redirect_to=result.redirect_to,
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def logout() -> Response:
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_session_cookie(response)
    return response


@router.get("/me", response_model=CurrentUserRead, summary="Current user and role")
def read_me(
    session: SessionDep,
    context: RequestContext = Depends(require_vendor),
) -> CurrentUserRead:
    vendor = get_linked_vendor(session, context.user)
    return CurrentUserRead(
        user=UserRead.model_validate(context.user),
        role=context.role,
        vendor_id=vendor.id if vendor else None,
    )
