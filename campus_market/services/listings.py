#campus_market/services/listings.py

import math
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import asc, desc, func, or_, select, update
from sqlalchemy.orm import Session

from campus_market.core.db import utcnow
from campus_market.core.errors import Forbidden, InvalidInput, NotFound
from campus_market.models.listing import Category, Listing, ListingImage, ListingStatus
from campus_market.models.user import User
from campus_market.schemas.listing import ListingCreateIn, ListingUpdateIn
from campus_market.utils.logger import logger

# the only columns a client may sort by
SORT_FIELDS = {
    "created_at": Listing.created_at,
    "updated_at": Listing.updated_at,
    "price": Listing.price,
    "title": Listing.title,
    "views": Listing.views,
}
SORT_ORDERS = {"asc": asc, "desc": desc}


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


class ListingService:
    def __init__(self, db: Session):
        self.db = db

    # ---------- reads ----------
    def _find(self, listing_id: int) -> Optional[Listing]:
        stmt = select(Listing).where(Listing.id == listing_id).execution_options(populate_existing=True)
        return self.db.scalars(stmt).first()

    def get_or_404(self, listing_id: int) -> Listing:
        listing = self._find(listing_id)
        if not listing:
            raise NotFound("Listing not found")
        return listing

    def view(self, listing_id: int) -> Listing:
        """Fetch a listing of any status and count the view."""
        result = self.db.execute(
            update(Listing)
            .where(Listing.id == listing_id, Listing.deleted_at.is_(None))
            .values(views=Listing.views + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise NotFound("Listing not found")
        self.db.commit()
        return self.get_or_404(listing_id)

    def search(
        self,
        search: Optional[str] = None,
        category_id: Optional[int] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        condition: Optional[str] = None,
        sort: str = "created_at",
        order: str = "desc",
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Listing], int]:
        if sort not in SORT_FIELDS:
            raise InvalidInput("Invalid sort field")
        if order not in SORT_ORDERS:
            raise InvalidInput("Invalid sort order")

        conditions = [Listing.status == ListingStatus.ACTIVE.value]
        if search:
            # literal substring: % and _ in the text are not wildcards
            conditions.append(
                or_(
                    Listing.title.icontains(search, autoescape=True),
                    Listing.description.icontains(search, autoescape=True),
                )
            )
        if category_id is not None:
            conditions.append(Listing.category_id == category_id)
        if min_price is not None:
            conditions.append(Listing.price >= min_price)
        if max_price is not None:
            conditions.append(Listing.price <= max_price)
        if condition:
            conditions.append(Listing.condition == condition)

        total = self.db.scalar(select(func.count(Listing.id)).where(*conditions)) or 0

        direction = SORT_ORDERS[order]
        q = (
            select(Listing)
            .where(*conditions)
            # id breaks ties so pages never overlap
            .order_by(direction(SORT_FIELDS[sort]), direction(Listing.id))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        rows = self.db.scalars(q).unique().all()
        return list(rows), total

    def by_seller(self, seller_id: int, status: Optional[str] = None) -> List[Listing]:
        q = select(Listing).where(Listing.seller_id == seller_id)
        if status:
            q = q.where(Listing.status == status)
        q = q.order_by(desc(Listing.created_at), desc(Listing.id))
        return list(self.db.scalars(q).unique().all())

    # ---------- writes ----------
    def _check_category(self, category_id: int) -> None:
        exists = self.db.scalars(select(Category.id).where(Category.id == category_id)).first()
        if exists is None:
            raise InvalidInput("Invalid category")

    def _add_images(self, listing_id: int, urls: List[str]) -> None:
        for i, url in enumerate(urls):
            self.db.add(ListingImage(listing_id=listing_id, image_url=url, is_primary=(i == 0)))

    def _drop_images(self, listing_id: int) -> None:
        self.db.execute(
            update(ListingImage)
            .where(ListingImage.listing_id == listing_id, ListingImage.deleted_at.is_(None))
            .values(deleted_at=utcnow())
            .execution_options(synchronize_session=False)
        )

    def create(self, seller: User, data: ListingCreateIn) -> Listing:
        self._check_category(data.category_id)

        listing = Listing(
            title=data.title,
            description=data.description,
            price=data.price,
            category_id=data.category_id,
            seller_id=seller.id,
            condition=data.condition,
            location=data.location,
            status=ListingStatus.ACTIVE.value,
            views=0,
        )
        self.db.add(listing)
        self.db.flush()  # id for the images

        self._add_images(listing.id, data.images)
        self.db.commit()

        logger.info("listing created id=%s seller=%s images=%d", listing.id, seller.id, len(data.images))
        return self.get_or_404(listing.id)

    def update(self, user: User, listing_id: int, data: ListingUpdateIn) -> Listing:
        listing = self.get_or_404(listing_id)
        if listing.seller_id != user.id:
            raise Forbidden("Not authorized to update this listing")

        # non-empty wins: zero values and empty strings are treated as absent
        if data.title:
            listing.title = data.title
        if data.description:
            listing.description = data.description
        if data.price:
            listing.price = data.price
        if data.category_id:
            self._check_category(data.category_id)
            listing.category_id = data.category_id
        if data.condition:
            listing.condition = data.condition
        if data.location:
            listing.location = data.location
        if data.status:
            listing.status = data.status

        if data.images:
            self._drop_images(listing.id)
            self._add_images(listing.id, data.images)

        listing.updated_at = utcnow()
        self.db.commit()
        return self.get_or_404(listing.id)

    def delete(self, user: User, listing_id: int) -> None:
        listing = self.get_or_404(listing_id)
        if listing.seller_id != user.id and not user.is_admin:
            raise Forbidden("Not authorized to delete this listing")

        self._drop_images(listing.id)
        listing.deleted_at = utcnow()
        self.db.commit()
        logger.info("listing deleted id=%s by=%s admin=%s", listing_id, user.id, user.is_admin)
