"""Attachment policy, storage writes and two-phase deletes."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from uuid import UUID, uuid4

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, func, select

from vendor_market.models import Attachment
from vendor_market.services.storage import StorageBackend, StorageError

logger = logging.getLogger(__name__)

ALLOWED_FILE_TYPES: dict[str, str] = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
    "image/webp": "WebP",
    "application/pdf": "PDF",
}
# 10 MB
MAX_FILE_SIZE = 10 * 1024 * 1024
MAX_FILES = 5


@dataclass
class IncomingFile:
    file_name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


async def read_upload(upload: UploadFile) -> IncomingFile:
    data = await upload.read()
    return IncomingFile(
        file_name=upload.filename or "file",
        content_type=upload.content_type or "application/octet-stream",
        data=data,
    )


def sanitize_file_name(file_name: str) -> str:
    sanitized = re.sub(r"[^a-z0-9.]", "-", file_name.lower())
    return re.sub(r"-+", "-", sanitized)


def build_storage_key(application_id: UUID, file_name: str) -> str:
    return f"applications/{application_id}/{uuid4().hex}-{sanitize_file_name(file_name)}"


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def validate_file(file: IncomingFile) -> None:
    if file.content_type not in ALLOWED_FILE_TYPES:
        allowed = ", ".join(ALLOWED_FILE_TYPES.values())
        raise _bad_request(f"Invalid file type: {file.content_type}. Allowed types: {allowed}")
    if file.size > MAX_FILE_SIZE:
        raise _bad_request(
            f"File size ({file.size / 1024 / 1024:.1f}MB) exceeds maximum allowed size "
            f"({MAX_FILE_SIZE // (1024 * 1024)}MB)"
        )
    if file.size == 0:
        raise _bad_request("File is empty")


def validate_files(files: list[IncomingFile], existing_count: int = 0) -> None:
    """
    Check a whole batch before anything is written.

    Raises HTTPException(400) on the first violation.
    """
    if existing_count + len(files) > MAX_FILES:
        raise _bad_request(f"Maximum {MAX_FILES} files allowed per application")

    seen: set[tuple[str, int]] = set()
    for file in files:
        validate_file(file)
        key = (file.file_name, file.size)
        if key in seen:
            raise _bad_request(f"{file.file_name}: File already added")
        seen.add(key)


def count_attachments(session: Session, application_id: UUID) -> int:
    statement = select(func.count()).select_from(Attachment).where(
        Attachment.application_id == application_id
    )
    return session.exec(statement).one()


def _remove_objects(storage: StorageBackend, paths: list[str]) -> None:
    for path in paths:
        try:
            storage.delete(path)
        except StorageError as e:
            logger.error(f"[Attachments] Failed to clean up orphaned object {path}: {e}")


def store_files(
    session: Session,
    storage: StorageBackend,
    application_id: UUID,
    files: list[IncomingFile],
) -> list[Attachment]:
    """
    Write every object, then commit one row per object together with
    whatever else is pending in the session.

    Objects written by this call are removed again if either step fails.
    """
    written: list[str] = []
    try:
        for file in files:
            path = build_storage_key(application_id, file.file_name)
            storage.put(path, file.data, file.content_type)
            written.append(path)
    except StorageError as e:
        logger.error(f"[Attachments] Upload failed for application {application_id}: {e}")
        session.rollback()
        _remove_objects(storage, written)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store uploaded files",
        ) from e

    attachments = [
        Attachment(
            application_id=application_id,
            file_name=file.file_name,
            file_path=path,
            file_type=file.content_type,
            file_size=file.size,
        )
        for file, path in zip(files, written)
    ]
    try:
        session.add_all(attachments)
        session.commit()
    except SQLAlchemyError as e:
        logger.error(f"[Attachments] Failed to record attachments for {application_id}: {e}")
        session.rollback()
        _remove_objects(storage, written)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save attachments",
        ) from e

    for attachment in attachments:
        session.refresh(attachment)
    logger.info(f"[Attachments] Stored {len(attachments)} file(s) for application {application_id}")
    return attachments


def delete_attachment(session: Session, storage: StorageBackend, attachment: Attachment) -> None:
    """
    Remove the row and its object as one unit.

    The row delete is flushed inside the open transaction, the object is
    removed, and only then is the transaction committed. If the object
    cannot be removed the row delete is rolled back. A failed commit after
    the object is gone leaves the row in place and logged as orphaned;
    deleting it again succeeds because a missing object counts as deleted.
    """
    attachment_id = attachment.id
    path = attachment.file_path
    session.delete(attachment)
    session.flush()

    try:
        storage.delete(path)
    except StorageError as e:
        session.rollback()
        logger.error(f"[Attachments] Failed to delete object {path}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to delete file from storage",
        ) from e

    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(
            f"[Attachments] Object {path} deleted but row {attachment_id} could not be removed: {e}"
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete attachment",
        ) from e

    logger.info(f"[Attachments] Deleted attachment {attachment_id} ({path})")
