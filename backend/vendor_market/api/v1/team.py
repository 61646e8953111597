from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from vendor_market.api.deps import require_admin
from vendor_market.schemas import TeamInviteRequest
from vendor_market.services.permissions import RequestContext

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/invite", summary="Invite a team member")
def invite_member(
    payload: TeamInviteRequest,
    context: RequestContext = Depends(require_admin),
) -> None:
    # TODO: send invitations once an invite email template and token flow exist
    logger.info(f"[Team] Invite requested for {payload.email} by {context.user.email}")
    raise HTTPException(
        status_code=status.HTTP_501_NOT_IMPLEMENTED,
        detail="Email invitations are not configured",
    )
