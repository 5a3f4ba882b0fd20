"""
School record validation

Rules run in a fixed order and the first failure is reported, so the same
submission always produces the same error. Nothing here touches storage.
"""

import re
from typing import Mapping, Optional

from config import MAX_IMAGE_BYTES
from errors import SchoolValidationError
from schemas import ImageUpload, SchoolCreate

CONTACT_RE = re.compile(r"[0-9]{10,15}")
EMAIL_RE = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE | re.ASCII)
ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp"})

# (field, label used in the presence message, minimum length)
REQUIRED_FIELDS = (
    ("name", "School name", 2),
    ("address", "Address", 10),
    ("city", "City", 2),
    ("state", "State", 2),
    ("contact", "Contact number", None),
    ("email", "Email", None),
)


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def validate_school(
    fields: Mapping[str, Optional[str]],
    image: Optional[ImageUpload] = None,
    image_required: bool = True,
    max_image_bytes: int = MAX_IMAGE_BYTES,
) -> SchoolCreate:
    """
    Check a submitted school against the validation rules.

    Order: presence, length, contact format, email format, image constraints.
    Raises SchoolValidationError carrying the first failing reason; returns
    the cleaned record otherwise. An empty upload counts as no image.
    """
    values = {name: _clean(fields.get(name)) for name, _, _ in REQUIRED_FIELDS}
    if image is not None and image.size == 0:
        image = None

    for name, label, _ in REQUIRED_FIELDS:
        if not values[name]:
            raise SchoolValidationError(f"{label} is required", field=name)
    if image_required and image is None:
        raise SchoolValidationError("School image is required", field="image")

    for name, _, min_length in REQUIRED_FIELDS:
        if min_length and len(values[name]) < min_length:
            raise SchoolValidationError(
                f"{name.capitalize()} must be at least {min_length} characters", field=name
            )

    if not CONTACT_RE.fullmatch(values["contact"]):
        raise SchoolValidationError(
            "Please enter a valid contact number (10-15 digits)", field="contact"
        )

    if not EMAIL_RE.fullmatch(values["email"]):
        raise SchoolValidationError("Please enter a valid email address", field="email")

    if image is not None:
        if image.size > max_image_bytes:
            limit_mb = max_image_bytes / (1024 * 1024)
            raise SchoolValidationError(
                f"Image size should be less than {limit_mb:g}MB", field="image"
            )
        if (image.content_type or "").lower() not in ALLOWED_IMAGE_TYPES:
            raise SchoolValidationError(
                "Please upload a valid image file (JPEG, PNG, WebP)", field="image"
            )

    return SchoolCreate(**values)


__all__ = ["validate_school", "ALLOWED_IMAGE_TYPES", "CONTACT_RE", "EMAIL_RE"]
