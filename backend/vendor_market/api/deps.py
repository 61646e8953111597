from __future__ import annotations

import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from vendor_market.core.config import settings
from vendor_market.core.roles import Role
from vendor_market.core.security import verify_token
from vendor_market.db import SessionDep
from vendor_market.models import User
from vendor_market.services.permissions import RequestContext, require_role
from vendor_market.services.storage import StorageBackend, get_storage

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)


def _token_from_request(request: Request, bearer: Optional[str]) -> Optional[str]:
    """Bearer header first, then the session cookie set by the login page."""
    return bearer or request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_optional_user(
    request: Request,
    session: SessionDep,
    token: Optional[str] = Depends(oauth2_scheme),
) -> Optional[User]:
    token = _token_from_request(request, token)
    if not token:
        return None
    try:
        payload = verify_token(token)
        user_id = UUID(payload["sub"])
    except (ValueError, KeyError):
        return None

    user = session.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


def get_request_context(
    session: SessionDep,
    user: Optional[User] = Depends(get_optional_user),
) -> RequestContext:
    """Identity plus a role read from the database on every request."""
    if user is None:
        return RequestContext()
    result = require_role(session, user, Role.VENDOR)
    return RequestContext(user=user, role=result.role if result.authorized else None)


class RoleGuard:
    """
    Dependency that admits callers holding at least ``minimum``.

    Usage: ``context: RequestContext = Depends(RoleGuard(Role.ORGANIZER))``
    """

    def __init__(self, minimum: Role) -> None:
        self.minimum = minimum

    def __call__(
        self,
        session: SessionDep,
        user: Optional[User] = Depends(get_optional_user),
    ) -> RequestContext:
        result = require_role(session, user, self.minimum)
        if not result.authorized:
            if user is None:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail=result.reason,
                    headers={"WWW-Authenticate": "Bearer"},
                )
            logger.info(f"[Auth] User {user.id} denied: {result.reason} (needs {self.minimum.value})")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=result.reason)
        return RequestContext(user=user, role=result.role)


ContextDep = Annotated[RequestContext, Depends(get_request_context)]
StorageDep = Annotated[StorageBackend, Depends(get_storage)]
require_vendor = RoleGuard(Role.VENDOR)
require_organizer = RoleGuard(Role.ORGANIZER)
require_admin = RoleGuard(Role.ADMIN)
