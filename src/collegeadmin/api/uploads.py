"""Profile image upload handling."""

from __future__ import annotations

from fastapi import Response, UploadFile

from collegeadmin.credential_store import ProfileImage
from collegeadmin.errors import ValidationError

IMAGE_CONTENT_PREFIX = "image/"


def read_image_upload(upload: UploadFile, max_bytes: int, field: str) -> tuple[bytes, str]:
    """Read an uploaded image, enforcing type and size limits.

    Args:
        upload: The multipart file part.
        max_bytes: Largest accepted payload.
        field: Form field name, reported in validation errors.

    Returns:
        Tuple of (data, content_type).

    Raises:
        ValidationError: If the part is not an image, is empty, or is too large.
    """
    content_type = upload.content_type or ""
    if not content_type.startswith(IMAGE_CONTENT_PREFIX):
        raise ValidationError(
            "Only image files are allowed",
            errors=[{"field": field, "message": f"Unsupported content type: {content_type}"}],
        )

    # One byte past the limit is enough to detect an oversized upload
    data = upload.file.read(max_bytes + 1)
    if not data:
        raise ValidationError(
            "Please upload an image file",
            errors=[{"field": field, "message": "File is empty"}],
        )
    if len(data) > max_bytes:
        raise ValidationError(
            "File too large",
            errors=[{"field": field, "message": f"File exceeds {max_bytes} bytes"}],
        )
    return data, content_type


def image_response(image: ProfileImage) -> Response:
    """Binary response carrying a stored profile image."""
    return Response(content=image.data, media_type=image.content_type)
