"""Route guard for server-rendered pages."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import Depends, Request

from vendor_market.api.deps import get_request_context
from vendor_market.core.roles import Role
from vendor_market.services.permissions import RequestContext

logger = logging.getLogger(__name__)

# Most specific prefix first
PROTECTED_ROUTES: list[tuple[str, Role]] = [
    ("/dashboard/admin", Role.ADMIN),
    ("/dashboard/team", Role.ADMIN),
    ("/dashboard", Role.ORGANIZER),
    ("/vendor", Role.VENDOR),
]


class PageRedirect(Exception):
    """Raised by page dependencies to send the browser elsewhere (303)."""

    def __init__(self, location: str) -> None:
        super().__init__(location)
        self.location = location


def required_role_for(path: str) -> Optional[Role]:
    for prefix, role in PROTECTED_ROUTES:
        if path == prefix or path.startswith(prefix + "/"):
            return role
    return None


def login_url(path: str) -> str:
    return f"/login?{urlencode({'redirectTo': path})}"


def page_guard(
    request: Request,
    context: RequestContext = Depends(get_request_context),
) -> None:
    """
    Runs before every page handler.

    Anonymous visitors of a protected page go to the login page with a
    redirectTo back; signed-in users below the required role go to
    /unauthorized.
    """
    path = request.url.path
    required = required_role_for(path)
    if required is None:
        return
    if not context.is_authenticated:
        raise PageRedirect(login_url(path))
    if not context.has_role(required):
        logger.info(f"[Pages] {context.user.email} ({context.role}) denied {path}")
        raise PageRedirect("/unauthorized")
