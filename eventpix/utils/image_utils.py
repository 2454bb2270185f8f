"""
Image upload helpers: validation of uploaded bytes and dimension lookup.

Pillow only reads the header here; decoding full frames is the detector's job.
"""
import io
import logging
import uuid
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from ..domain.constants import ALLOWED_IMAGE_EXTENSIONS, ALLOWED_IMAGE_MIME, MAX_IMAGE_BYTES
from ..domain.exceptions import ValidationError

logger = logging.getLogger(__name__)


def validate_image_upload(filename: Optional[str], content_type: Optional[str], data: bytes) -> str:
    """
    Check an uploaded image and return its lowercase extension.

    Raises:
        ValidationError: missing name, unsupported format, empty or oversized file
    """
    if not filename:
        raise ValidationError("One or more files have no filename.")

    ext = Path(filename).suffix.lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError(f"Allowed formats: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}")

    mime = (content_type or "").strip().lower()
    if mime and mime != "application/octet-stream" and mime not in ALLOWED_IMAGE_MIME:
        raise ValidationError(f"Unsupported content type: {mime}")

    if not data:
        raise ValidationError(f"File {filename} is empty.")
    if len(data) > MAX_IMAGE_BYTES:
        raise ValidationError(f"File {filename} exceeds {MAX_IMAGE_BYTES // (1024 * 1024)} MB.")
    return ext


def read_image_size(data: bytes) -> Tuple[int, int]:
    """(width, height) in pixels, ValidationError when the bytes are not an image."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            return image.size
    except (UnidentifiedImageError, OSError) as e:
        logger.warning("Uploaded bytes are not a readable image: %s", e)
        raise ValidationError("The uploaded file is not a readable image.") from e


def unique_filename(ext: str) -> str:
    """Random blob name keeping the original extension."""
    return f"{uuid.uuid4().hex}{ext}"


def content_type_for(ext: str) -> str:
    return {".png": "image/png", ".webp": "image/webp"}.get(ext, "image/jpeg")
