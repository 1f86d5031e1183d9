"""Uploaded images as ``data:`` URIs (payment evidence, payment QR code)."""

import base64

from fastapi import UploadFile

from rentledger.services.errors import InvalidReadingError
from rentledger.services.localizer import t


def to_data_uri(content: bytes, content_type: str | None) -> str:
    """Encode image bytes as ``data:<mime>;base64,<payload>``.

    Raises:
        InvalidReadingError: If the content type is not an image
    """
    if not content_type or not content_type.startswith("image/"):
        raise InvalidReadingError(t("errors.not_an_image"))
    payload = base64.b64encode(content).decode("ascii")
    return f"data:{content_type};base64,{payload}"


async def upload_to_data_uri(upload: UploadFile) -> str:
    """Read an uploaded file without blocking and encode it."""
    content = await upload.read()
    return to_data_uri(content, upload.content_type)


__all__ = ["to_data_uri", "upload_to_data_uri"]
