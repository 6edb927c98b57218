"""Schemas for object storage file endpoints."""

from datetime import datetime

from jobtracker.schemas.common import ApiModel


class UploadResponse(ApiModel):
    """Stored object key, the client's original filename and the proxy URL."""

    filename: str
    original_name: str
    url: str
    attachment_id: int | None = None


class FileInfo(ApiModel):
    key: str
    size: int
    last_modified: datetime
    url: str
    content_type: str


class FilesListResponse(ApiModel):
    files: list[FileInfo]
