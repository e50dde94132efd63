import enum

from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from campus_market.core.db import Base, SoftDeleteMixin, TimestampMixin


class ListingStatus(str, enum.Enum):
    ACTIVE = "active"
    SOLD = "sold"
    INACTIVE = "inactive"


class Category(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(String(255), nullable=False, default="")
    icon = Column(String(50), nullable=False, default="")


class Listing(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "listings"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    # set once at creation, never reassigned
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(String(20), nullable=False, default=ListingStatus.ACTIVE.value, index=True)
    condition = Column(String(30), nullable=False, default="")
    location = Column(String(200), nullable=False, default="")
    views = Column(Integer, nullable=False, default=0)

    category = relationship("Category", lazy="joined")
    seller = relationship("User", back_populates="listings", lazy="joined")
    images = relationship(
        "ListingImage",
        back_populates="listing",
        order_by="ListingImage.id",
        lazy="selectin",
    )


class ListingImage(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "listing_images"

    id = Column(Integer, primary_key=True)
    listing_id = Column(Integer, ForeignKey("listings.id"), nullable=False, index=True)
    image_url = Column(String(1024), nullable=False)
    is_primary = Column(Boolean, nullable=False, default=False)

    listing = relationship("Listing", back_populates="images")
