from __future__ import annotations

import logging
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status

from vendor_market.api.deps import ContextDep, StorageDep, require_organizer
from vendor_market.db import SessionDep
from vendor_market.models import Application, Attachment
from vendor_market.services.attachments import delete_attachment
from vendor_market.services.permissions import RequestContext, can_view_application
from vendor_market.services.storage import StorageError

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_attachment_or_404(session: SessionDep, attachment_id: UUID) -> Attachment:
    attachment = session.get(Attachment, attachment_id)
    if not attachment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attachment not found")
    return attachment


@router.get("/{attachment_id}/download", summary="Download attachment")
def download_attachment(
    attachment_id: UUID,
    session: SessionDep,
    storage: StorageDep,
    context: ContextDep,
) -> Response:
    attachment = _get_attachment_or_404(session, attachment_id)
    application = session.get(Application, attachment.application_id)

    if not context.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if application is None or not can_view_application(session, context, application):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized: insufficient role",
        )

    try:
        data = storage.get(attachment.file_path)
    except FileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found in storage",
        ) from None
    except StorageError as e:
        logger.error(f"[Attachments] Failed to read {attachment.file_path}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to read file from storage",
        ) from e

    return Response(
        content=data,
        media_type=attachment.file_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(attachment.file_name)}"
        },
    )


@router.delete(
    "/{attachment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete attachment",
)
def remove_attachment(
    attachment_id: UUID,
    session: SessionDep,
    storage: StorageDep,
    context: RequestContext = Depends(require_organizer),
) -> Response:
    attachment = _get_attachment_or_404(session, attachment_id)
    delete_attachment(session, storage, attachment)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
