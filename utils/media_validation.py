"""Validation helpers for uploaded images."""

from typing import Optional

from fastapi import HTTPException, UploadFile

from models.image_record import ImagePayload

DEFAULT_IMAGE_TYPE = "image/jpeg"


def declared_mime_type(upload: UploadFile) -> str:
    """Return the client-declared MIME type without parameters.

    The bytes are not sniffed; the declared type is trusted.
    """
    if not upload.content_type:
        return DEFAULT_IMAGE_TYPE
    return upload.content_type.split(";", 1)[0].strip().lower() or DEFAULT_IMAGE_TYPE


async def read_image_payload(upload: Optional[UploadFile]) -> Optional[ImagePayload]:
    """Read an uploaded image field into an `ImagePayload`, or None when absent."""
    if upload is None:
        return None
    try:
        data = await upload.read()
    except Exception as exc:  # pylint: disable=broad-exception-caught
        raise HTTPException(status_code=400, detail="Unable to read uploaded image.") from exc
    return ImagePayload(data=data, mime_type=declared_mime_type(upload), filename=upload.filename)
