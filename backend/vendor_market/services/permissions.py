from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from vendor_market.core.roles import Role, has_minimum_role
from vendor_market.models import Application, User, UserProfile, Vendor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizationResult:
    authorized: bool
    role: Optional[Role] = None
    reason: Optional[str] = None


@dataclass
class RequestContext:
    """Identity and role resolved for the current request."""

    user: Optional[User] = None
    role: Optional[Role] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def has_role(self, minimum: Role | str) -> bool:
        return self.role is not None and has_minimum_role(self.role, minimum)


def get_profile(session: Session, user_id: UUID) -> Optional[UserProfile]:
    return session.get(UserProfile, user_id)


def resolve_role(session: Session, user: User) -> Role:
    """Read the user's role. Users without a profile row are vendors."""
    profile = get_profile(session, user.id)
    if profile is None:
        return Role.VENDOR
    return Role(profile.role)


def require_role(
    session: Session,
    user: Optional[User],
    minimum: Role | str,
) -> AuthorizationResult:
    """
    Check that ``user`` holds at least ``minimum``.

    Never raises: a lookup failure is reported as not authorized.
    """
    if user is None:
        return AuthorizationResult(authorized=False, reason="Not authenticated")

    try:
        role = resolve_role(session, user)
    except (SQLAlchemyError, ValueError) as e:
        logger.error(f"[Permissions] Role lookup failed for user {user.id}: {e}")
        return AuthorizationResult(authorized=False, reason="Unable to verify permissions")

    if not has_minimum_role(role, minimum):
        return AuthorizationResult(
            authorized=False, role=role, reason="Unauthorized: insufficient role"
        )
    return AuthorizationResult(authorized=True, role=role)


def get_linked_vendor(session: Session, user: Optional[User]) -> Optional[Vendor]:
    """The vendor record linked to ``user``, via its profile or vendors.user_id."""
    if user is None:
        return None
    profile = get_profile(session, user.id)
    if profile is not None and profile.vendor_id is not None:
        vendor = session.get(Vendor, profile.vendor_id)
        if vendor is not None:
            return vendor
    return session.exec(select(Vendor).where(Vendor.user_id == user.id)).one_or_none()


def can_view_application(session: Session, context: RequestContext, application: Application) -> bool:
    """Organizers see every application; vendors only their own."""
    if context.has_role(Role.ORGANIZER):
        return True
    vendor = get_linked_vendor(session, context.user)
    return vendor is not None and vendor.id == application.vendor_id


def link_vendor_to_user(session: Session, vendor: Vendor, user: User) -> None:
    """
    Attach a vendor record to an identity. Does not commit.

    Only a vendor registered under the user's own email is linked. No-op
    when the vendor belongs to someone else or the user already has a
    different vendor.
    """
    if vendor.email.lower() != user.email.lower():
        logger.info(f"[Auth] Not linking vendor {vendor.id} to user {user.id}: email mismatch")
        return
    if vendor.user_id is not None and vendor.user_id != user.id:
        return
    linked = get_linked_vendor(session, user)
    if linked is not None and linked.id != vendor.id:
        return
    if vendor.user_id is None:
        vendor.user_id = user.id
        vendor.touch()
        session.add(vendor)
    profile = get_profile(session, user.id)
    if profile is not None and profile.vendor_id is None:
        profile.vendor_id = vendor.id
        profile.touch()
        session.add(profile)
