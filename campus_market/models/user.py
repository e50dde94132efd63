from sqlalchemy import Boolean, Column, Integer, String, Text
from sqlalchemy.orm import relationship

from campus_market.core.db import Base, SoftDeleteMixin, TimestampMixin


class User(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # always stored lower-cased
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)

    phone = Column(String(30), nullable=False, default="")
    bio = Column(Text, nullable=False, default="")
    profile_image = Column(String(1024), nullable=False, default="")
    is_admin = Column(Boolean, nullable=False, default=False)

    listings = relationship("Listing", back_populates="seller", lazy="raise")
