"""
Database Schemas

Pydantic models for the "schools" MongoDB collection and the payloads the
API exchanges. Stored documents carry the fields of SchoolCreate plus the
store-assigned `_id` and `createdAt`.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import datetime


class SchoolCreate(BaseModel):
    """
    A school that passed validation and may be inserted.
    Collection name: "schools"
    """
    name: str = Field(..., min_length=2, description="School name")
    address: str = Field(..., min_length=10, description="Street address")
    city: str = Field(..., min_length=2)
    state: str = Field(..., min_length=2)
    contact: str = Field(..., pattern=r"^[0-9]{10,15}$", description="Contact number, digits only")
    email: str = Field(..., description="Contact email address")


class SchoolOut(BaseModel):
    """A stored school as returned by the API."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    address: str
    city: str
    state: str
    contact: str
    email: str
    image: Optional[str] = Field(None, description="Image filename or data URI")
    image_url: Optional[str] = Field(None, alias="imageUrl", description="Where a client can load the image")
    created_at: datetime = Field(..., alias="createdAt")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value):
        return str(value)


class ImageUpload(BaseModel):
    """Raw image bytes received with a submission."""
    filename: Optional[str] = None
    content_type: Optional[str] = None
    data: bytes = b""
    declared_size: Optional[int] = Field(None, description="Size reported by the client when the bytes were not read")

    @property
    def size(self) -> int:
        if self.declared_size is not None:
            return self.declared_size
        return len(self.data)


class SchoolCreated(BaseModel):
    message: str
    id: str


class SchoolListing(BaseModel):
    schools: List[SchoolOut]
    total: int = Field(..., description="Number of schools before filtering")
    cities: List[str]
    states: List[str]


class ErrorResponse(BaseModel):
    error: str
