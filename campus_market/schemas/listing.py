# campus_market/schemas/listing.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from campus_market.models.listing import ListingStatus

from .base import BaseSchema
from .user import UserOut

STATUSES = {s.value for s in ListingStatus}


class CategoryOut(BaseSchema):
    id: int
    name: str
    description: str
    icon: str


class ListingImageOut(BaseSchema):
    id: int
    listing_id: int
    image_url: str
    is_primary: bool


class ListingCreateIn(BaseSchema):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    category_id: int = Field(..., ge=1)
    condition: str = Field("", max_length=30)
    location: str = Field("", max_length=200)
    images: List[str] = Field(default_factory=list)


class ListingUpdateIn(BaseSchema):
    """Partial update. Empty strings, zero numbers and empty lists mean "leave as is"."""

    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    category_id: Optional[int] = Field(None, ge=0)
    condition: Optional[str] = Field(None, max_length=30)
    location: Optional[str] = Field(None, max_length=200)
    status: Optional[str] = None
    images: Optional[List[str]] = None

    @field_validator("status")
    @classmethod
    def _v_status(cls, v: Optional[str]) -> Optional[str]:
        if v and v not in STATUSES:
            raise ValueError("status must be one of: " + ", ".join(sorted(STATUSES)))
        return v


class ListingOut(BaseSchema):
    id: int
    title: str
    description: str
    price: float
    category_id: int
    category: Optional[CategoryOut] = None
    seller_id: int
    seller: Optional[UserOut] = None
    images: List[ListingImageOut]
    status: str
    condition: str
    location: str
    views: int
    created_at: datetime
    updated_at: datetime


class ListingPageOut(BaseSchema):
    listings: List[ListingOut]
    total: int
    page: int
    limit: int
    pages: int
