import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from inventory.api.dependencies import verify_token
from inventory.config import Settings, get_settings
from inventory.exceptions import ValidationError
from inventory.schemas.upload import FileDeleteResponse, UploadResponse, UploadedFile
from inventory.utils.storage import ALLOWED_MIME_TYPES, FileStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["Uploads"], dependencies=[Depends(verify_token)])


@router.post(
    "",
    response_model=UploadResponse,
    summary="Upload a file",
    description="Store an image or document. Images land under /uploads/images, everything else under /uploads/documents."
)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    storage: FileStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    """
    Upload a single file in the multipart field ``file``.

    Allowed: JPEG, PNG, GIF, WebP, PDF, plain text, CSV, Word and Excel
    documents, up to 10MB.
    """
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")

    mimetype = file.content_type or "application/octet-stream"
    if mimetype not in ALLOWED_MIME_TYPES:
        logger.warning(f"Rejected upload {file.filename!r} of type {mimetype}")
        raise ValidationError(f"File type {mimetype} is not allowed")

    content = await file.read(settings.MAX_UPLOAD_SIZE + 1)
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise ValidationError(f"File too large (max {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB)")

    stored = storage.save(content, file.filename, mimetype)

    return UploadResponse(
        file=UploadedFile(
            filename=stored.filename,
            originalName=file.filename,
            mimetype=mimetype,
            size=stored.size,
            url=stored.url,
        )
    )


@router.delete(
    "/{filename}",
    response_model=FileDeleteResponse,
    summary="Delete an uploaded file",
    description="Remove a stored file. Deleting a missing file succeeds."
)
def delete_file(
    filename: str,
    storage: FileStorage = Depends(get_storage),
):
    """Delete a previously uploaded file by its stored name."""
    if not filename or "/" in filename or "\\" in filename or filename in (".", ".."):
        raise ValidationError("Filename required")

    storage.delete(filename)
    return FileDeleteResponse(filename=filename)
