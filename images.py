"""
Image handling policy

One mode per deployment: `file` writes the bytes to the served image
directory and stores the generated filename, `embedded` stores the bytes on
the record itself as a base64 data URI.
"""

import base64
import logging
import mimetypes
import secrets
import string
import time
from pathlib import Path
from typing import Optional

from config import Settings
from errors import ImageStorageError
from schemas import ImageUpload

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase

# mimetypes maps image/jpeg to .jpe on some platforms
_EXTENSIONS = {"image/jpeg": "jpg", "image/jpg": "jpg", "image/png": "png", "image/webp": "webp"}


def _random_suffix(length: int = 11) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def _extension(image: ImageUpload) -> str:
    if image.filename and "." in image.filename:
        ext = image.filename.rsplit(".", 1)[1].lower()
        if ext.isalnum():
            return ext
    content_type = (image.content_type or "").lower()
    if content_type in _EXTENSIONS:
        return _EXTENSIONS[content_type]
    guessed = mimetypes.guess_extension(content_type) if content_type else None
    return guessed.lstrip(".") if guessed else "bin"


def generate_filename(image: ImageUpload) -> str:
    """`<epoch ms>_<random base36>.<ext>`, unique enough for concurrent uploads."""
    return f"{int(time.time() * 1000)}_{_random_suffix()}.{_extension(image)}"


def encode_data_uri(image: ImageUpload) -> str:
    content_type = image.content_type or "application/octet-stream"
    payload = base64.b64encode(image.data).decode("ascii")
    return f"data:{content_type};base64,{payload}"


class ImagePolicy:
    def __init__(self, mode: str, image_dir: Path, url_prefix: str = "/schoolImages"):
        if mode not in ("file", "embedded"):
            raise ValueError(f"Unknown image storage mode: {mode}")
        self.mode = mode
        self.image_dir = Path(image_dir)
        self.url_prefix = url_prefix.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImagePolicy":
        return cls(settings.image_storage, Path(settings.image_dir), settings.image_url_prefix)

    @property
    def image_required(self) -> bool:
        return self.mode == "file"

    def store(self, image: Optional[ImageUpload]) -> Optional[str]:
        """Persist the image and return the reference to put on the record."""
        if image is None or image.size == 0:
            return None
        if self.mode == "embedded":
            return encode_data_uri(image)

        filename = generate_filename(image)
        try:
            self.image_dir.mkdir(parents=True, exist_ok=True)
            (self.image_dir / filename).write_bytes(image.data)
        except OSError as e:
            logger.exception("Image upload failed")
            raise ImageStorageError("Failed to upload image") from e
        logger.info("Image uploaded: %s", filename)
        return filename

    def resolve_url(self, reference: Optional[str]) -> Optional[str]:
        if not reference:
            return None
        if reference.startswith("data:"):
            return reference
        return f"{self.url_prefix}/{reference}"


__all__ = ["ImagePolicy", "generate_filename", "encode_data_uri"]
