import pytest

from errors import SchoolValidationError
from schemas import ImageUpload
from validation import validate_school

PNG = ImageUpload(filename="logo.png", content_type="image/png", data=b"\x89PNG\r\n\x1a\n")


def _reject(fields, **kwargs) -> SchoolValidationError:
    with pytest.raises(SchoolValidationError) as exc_info:
        validate_school(fields, **kwargs)
    return exc_info.value


@pytest.mark.parametrize("field", ["name", "address", "city", "state", "contact", "email"])
@pytest.mark.parametrize("missing", [None, "", "   "])
def test_missing_field_is_reported_by_name(school_fields, field, missing) -> None:
    school_fields[field] = missing

    error = _reject(school_fields, image_required=False)

    assert error.field == field
    assert error.message.endswith("is required")


def test_image_required_only_in_file_mode(school_fields) -> None:
    error = _reject(school_fields, image=None, image_required=True)
    assert error.field == "image"
    assert error.message == "School image is required"

    assert validate_school(school_fields, image=None, image_required=False).name == "Green Valley School"


def test_empty_upload_counts_as_missing(school_fields) -> None:
    empty = ImageUpload(filename="", content_type="application/octet-stream", data=b"")
    assert _reject(school_fields, image=empty, image_required=True).field == "image"


def test_first_failing_rule_wins(school_fields) -> None:
    school_fields.update(name="X", contact="12345", email="a@b")

    error = _reject(school_fields, image_required=False)

    assert error.message == "Name must be at least 2 characters"


def test_presence_checked_before_length(school_fields) -> None:
    school_fields.update(name="X", email="")
    assert _reject(school_fields, image_required=False).field == "email"


@pytest.mark.parametrize(
    "field, value, message",
    [
        ("name", "A", "Name must be at least 2 characters"),
        ("address", "Short St", "Address must be at least 10 characters"),
        ("city", "Z", "City must be at least 2 characters"),
        ("state", "I", "State must be at least 2 characters"),
    ],
)
def test_minimum_lengths(school_fields, field, value, message) -> None:
    school_fields[field] = value
    assert _reject(school_fields, image_required=False).message == message


@pytest.mark.parametrize("contact", ["12345", "abc1234567", "123456789012345678", "555-123-4567", "５５５１２３４５６７"])
def test_bad_contact_rejected(school_fields, contact) -> None:
    school_fields["contact"] = contact
    error = _reject(school_fields, image_required=False)
    assert error.field == "contact"


@pytest.mark.parametrize("contact", ["9876543210", "123456789012345"])
def test_good_contact_accepted(school_fields, contact) -> None:
    school_fields["contact"] = contact
    assert validate_school(school_fields, image_required=False).contact == contact


def test_contact_checked_before_email(school_fields) -> None:
    school_fields.update(contact="123", email="not-an-email")
    assert _reject(school_fields, image_required=False).field == "contact"


@pytest.mark.parametrize("email", ["a@b", "user.example.com", "user@@example.com", "us er@example.com", "user@example.c"])
def test_bad_email_rejected(school_fields, email) -> None:
    school_fields["email"] = email
    error = _reject(school_fields, image_required=False)
    assert error.message == "Please enter a valid email address"


@pytest.mark.parametrize(
    "email",
    [
        "user@example.com",
        "First.Last+tag@Example.CO.UK",
        "a..b@example.com",
        "user.@example.com",
        "office@school.test",
        "admin@campus.local",
    ],
)
def test_good_email_accepted(school_fields, email) -> None:
    school_fields["email"] = email
    assert validate_school(school_fields, image_required=False).email == email


def test_oversized_image_rejected(school_fields) -> None:
    big = ImageUpload(filename="big.jpg", content_type="image/jpeg", data=b"\0" * (5 * 1024 * 1024 + 1))

    error = _reject(school_fields, image=big, image_required=True)

    assert error.message == "Image size should be less than 5MB"


def test_image_at_limit_accepted(school_fields) -> None:
    exact = ImageUpload(filename="ok.webp", content_type="image/webp", data=b"\0" * (5 * 1024 * 1024))
    validate_school(school_fields, image=exact, image_required=True)


def test_image_size_checked_before_media_type(school_fields) -> None:
    big = ImageUpload(filename="big.png", content_type="image/gif", data=b"\0" * 64)
    error = _reject(school_fields, image=big, image_required=True, max_image_bytes=32)
    assert error.message.startswith("Image size")


@pytest.mark.parametrize("content_type", ["image/gif", "application/pdf", None])
def test_unsupported_media_type_rejected(school_fields, content_type) -> None:
    image = ImageUpload(filename="x", content_type=content_type, data=b"abc")
    error = _reject(school_fields, image=image, image_required=True)
    assert error.message == "Please upload a valid image file (JPEG, PNG, WebP)"


def test_accepted_record_is_stripped(school_fields) -> None:
    school_fields["city"] = "  Springfield  "

    school = validate_school(school_fields, image=PNG, image_required=True)

    assert school.city == "Springfield"
    assert school.model_dump() == {**school_fields, "city": "Springfield"}


def test_declared_size_over_limit_rejected_without_bytes(school_fields) -> None:
    unread = ImageUpload(filename="huge.png", content_type="image/png", declared_size=2 * 1024**3)

    error = _reject(school_fields, image=unread, image_required=True)

    assert error.message == "Image size should be less than 5MB"
