from __future__ import annotations

from fastapi import UploadFile

from rijig_web.application.dto.auth import UploadedFile


def to_uploaded_file(upload: UploadFile | None) -> UploadedFile | None:
    """Read a form upload into memory; an empty file input counts as no upload."""
    if upload is None or not upload.filename:
        return None
    return UploadedFile(
        filename=upload.filename,
        content=upload.file.read(),
        content_type=upload.content_type or "application/octet-stream",
    )
