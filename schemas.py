"""
Pydantic models for order submissions, stored orders and images
"""

import random
import string
import time
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator

IMAGE_URL_PATTERN = r"^https?://.+"

# Messages returned for a rejected submission, keyed by field
FIELD_ERRORS = {
    "productTitle": "Invalid product title",
    "price": "Invalid price",
    "size": "Invalid size",
    "imageUrl": "Invalid image URL",
    "customerPhone": "Invalid phone number",
}

_ID_ALPHABET = string.ascii_lowercase + string.digits


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_order_id() -> str:
    """Epoch milliseconds plus a short random base36 suffix."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=7))
    return f"{int(time.time() * 1000)}-{suffix}"


class OrderCreate(BaseModel):
    productTitle: str = Field(..., min_length=1, max_length=200, strict=True)
    price: str = Field(..., min_length=1, max_length=50, strict=True)
    size: Optional[str] = Field(None, max_length=20, strict=True)
    imageUrl: Optional[str] = Field(None, pattern=IMAGE_URL_PATTERN, strict=True)
    customerPhone: Optional[str] = Field(None, max_length=20, strict=True)

    @field_validator('size', 'imageUrl', 'customerPhone', mode='before')
    @classmethod
    def blank_as_missing(cls, v):
        if v == "":
            return None
        return v


class Order(BaseModel):
    id: str
    productTitle: str
    price: str
    size: Optional[str] = None
    imageUrl: Optional[str] = None
    customerPhone: Optional[str] = None
    receivedAt: datetime
    processed: bool = False
    processedAt: Optional[datetime] = None

    def toggle_processed(self) -> None:
        self.processed = not self.processed
        self.processedAt = utcnow() if self.processed else None

    def to_record(self) -> dict:
        # Only fields that were provided or changed are written out, so an
        # order without an image has no imageUrl key at all.
        return self.model_dump(mode="json", exclude_unset=True)


class ImageInfo(BaseModel):
    name: str
    url: str
    size: int
    modified: Optional[datetime] = None
    originalName: Optional[str] = None

    def to_record(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
