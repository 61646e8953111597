from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from vendor_market.api.deps import require_admin
from vendor_market.core.roles import Role
from vendor_market.db import SessionDep
from vendor_market.models import User, UserProfile
from vendor_market.schemas import RoleUpdate, UserWithRole
from vendor_market.services.permissions import RequestContext

logger = logging.getLogger(__name__)

router = APIRouter()


def list_users_with_roles(session: Session) -> list[UserWithRole]:
    rows = session.exec(
        select(User, UserProfile)
        .outerjoin(UserProfile, UserProfile.id == User.id)
        .order_by(User.created_at.desc())
    ).all()
    return [
        UserWithRole(
            id=user.id,
            email=user.email,
            role=Role(profile.role) if profile else Role.VENDOR,
            created_at=user.created_at,
            role_updated_at=profile.updated_at if profile else None,
        )
        for user, profile in rows
    ]


@router.get("/users", response_model=list[UserWithRole], summary="List users with roles")
def list_users(
    session: SessionDep,
    context: RequestContext = Depends(require_admin),
) -> list[UserWithRole]:
    return list_users_with_roles(session)


@router.patch("/users/{user_id}/role", response_model=UserWithRole, summary="Change a user's role")
def change_role(
    user_id: UUID,
    payload: RoleUpdate,
    session: SessionDep,
    context: RequestContext = Depends(require_admin),
) -> UserWithRole:
    if user_id == context.user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot change your own role",
        )
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    profile = session.get(UserProfile, user.id)
    if profile is None:
        profile = UserProfile(id=user.id)
    profile.role = payload.role.value
    profile.touch()
    session.add(profile)
    session.commit()
    session.refresh(profile)
    logger.info(f"[Admin] {context.user.email} set role of {user.email} to {profile.role}")

    return UserWithRole(
        id=user.id,
        email=user.email,
        role=Role(profile.role),
        created_at=user.created_at,
        role_updated_at=profile.updated_at,
    )
