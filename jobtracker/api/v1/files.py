"""File endpoints: upload to object storage, list, download through the API and delete."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy.orm import Session

from jobtracker.api.dependencies import get_app_settings
from jobtracker.api.v1.auth import get_current_user
from jobtracker.core.config import Settings
from jobtracker.core.database import get_db
from jobtracker.core.errors import BadRequestError, PayloadTooLargeError
from jobtracker.models import User
from jobtracker.schemas.common import SuccessResponse
from jobtracker.schemas.files import FileInfo, FilesListResponse, UploadResponse
from jobtracker.services.files import store_upload
from jobtracker.services.storage import ObjectStorage, file_url, get_storage

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/upload", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
def upload_file(
    _user: Annotated[User, Depends(get_current_user)],
    file: Annotated[UploadFile, File()],
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[ObjectStorage, Depends(get_storage)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    task_id: Annotated[int | None, Form(alias="taskId")] = None,
) -> UploadResponse:
    """
    Store a multipart `file` in object storage.

    - The object key is the upload time in epoch milliseconds followed by the
      original filename with whitespace runs replaced by underscores.
    - With `taskId` the file is also recorded as an attachment of that task.
    - Files larger than MAX_UPLOAD_FILE_BYTES are rejected with 413.
    """
    filename = file.filename or ""
    if not filename.strip():
        raise BadRequestError("No file provided", fields={"file": ["file is required"]})
    content = file.file.read(settings.MAX_UPLOAD_FILE_BYTES + 1)
    if len(content) > settings.MAX_UPLOAD_FILE_BYTES:
        raise PayloadTooLargeError(
            f"File size must not exceed {settings.MAX_UPLOAD_FILE_BYTES} bytes"
        )
    stored = store_upload(
        db,
        storage,
        settings.API_PREFIX,
        content,
        filename,
        content_type=file.content_type,
        task_id=task_id,
    )
    return UploadResponse(
        filename=stored.key,
        original_name=stored.original_name,
        url=stored.url,
        attachment_id=stored.attachment.id if stored.attachment is not None else None,
    )


@router.get("/files", response_model=FilesListResponse)
def list_files(
    _user: Annotated[User, Depends(get_current_user)],
    storage: Annotated[ObjectStorage, Depends(get_storage)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> FilesListResponse:
    """Every object in the bucket, newest first."""
    return FilesListResponse(
        files=[
            FileInfo(
                key=obj.key,
                size=obj.size,
                last_modified=obj.last_modified,
                url=file_url(settings.API_PREFIX, obj.key),
                content_type=obj.content_type,
            )
            for obj in storage.list()
        ]
    )


@router.get("/files/{key:path}")
def get_file(
    key: str,
    _user: Annotated[User, Depends(get_current_user)],
    storage: Annotated[ObjectStorage, Depends(get_storage)],
) -> Response:
    content, content_type = storage.get(key)
    return Response(
        content=content,
        media_type=content_type,
        headers={"Cache-Control": "no-cache"},
    )


@router.delete("/files/{key:path}", response_model=SuccessResponse)
def delete_file(
    key: str,
    user: Annotated[User, Depends(get_current_user)],
    storage: Annotated[ObjectStorage, Depends(get_storage)],
) -> SuccessResponse:
    storage.delete(key)
    logger.info("User id=%s deleted file %s", user.id, key)
    return SuccessResponse()
