from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlmodel import Session, select

from vendor_market.core.roles import Role, home_path_for
from vendor_market.core.security import create_access_token, get_password_hash, verify_password
from vendor_market.models import User, Vendor
from vendor_market.services.permissions import link_vendor_to_user, resolve_role

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Sign-up or sign-in rejected. The message is safe to show to the user."""


@dataclass
class SignInResult:
    user: User
    role: Role
    access_token: str
    redirect_to: str


def safe_redirect(redirect_to: Optional[str]) -> Optional[str]:
    """Only same-site absolute paths are honoured."""
    if not redirect_to:
        return None
    if not redirect_to.startswith("/") or redirect_to.startswith("//") or "\\" in redirect_to:
        return None
    return redirect_to


def post_login_redirect(role: Role, redirect_to: Optional[str] = None) -> str:
    """An explicit local redirect wins; otherwise the role's home page."""
    return safe_redirect(redirect_to) or home_path_for(role)


def get_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(select(User).where(User.email == email.lower())).one_or_none()


def sign_up(session: Session, email: str, password: str) -> User:
    """
    Create an identity. A vendor profile is provisioned with it.

    An unlinked vendor record with the same email is linked to the new user.
    """
    email = email.lower()
    if get_user_by_email(session, email) is not None:
        raise AuthError("An account with this email already exists")

    user = User(email=email, hashed_password=get_password_hash(password))
    session.add(user)
    session.flush()

    vendor = session.exec(select(Vendor).where(Vendor.email == email)).one_or_none()
    if vendor is not None and vendor.user_id is None:
        link_vendor_to_user(session, vendor, user)

    session.commit()
    session.refresh(user)
    logger.info(f"[Auth] New account {user.id}")
    return user


def sign_in(
    session: Session,
    email: str,
    password: str,
    redirect_to: Optional[str] = None,
) -> SignInResult:
    user = get_user_by_email(session, email)
    if user is None or not verify_password(password, user.hashed_password):
        raise AuthError("Invalid email or password")
    if not user.is_active:
        raise AuthError("This account has been deactivated")

    role = resolve_role(session, user)
    return SignInResult(
        user=user,
        role=role,
        access_token=create_access_token(user.id),
        redirect_to=post_login_redirect(role, redirect_to),
    )
