from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from campus_market.core.auth import get_current_user, get_current_user_optional
from campus_market.core.db import get_db
from campus_market.models.user import User
from campus_market.schemas.common import DetailOut
from campus_market.schemas.listing import ListingCreateIn, ListingOut, ListingPageOut, ListingUpdateIn
from campus_market.services.listings import ListingService, page_count

router = APIRouter(prefix="/listings", tags=["listings"])


def get_listing_service(db: Session = Depends(get_db)) -> ListingService:
    return ListingService(db)


# ---------- 1) browse / search (token optional) ----------
@router.get("", response_model=ListingPageOut)
def list_listings(
    search: Optional[str] = None,
    category_id: Optional[int] = Query(None, ge=1),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    condition: Optional[str] = None,
    sort: str = Query("created_at", pattern="^(created_at|updated_at|price|title|views)$"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    svc: ListingService = Depends(get_listing_service),
    me: Optional[User] = Depends(get_current_user_optional),
):
    rows, total = svc.search(
        search=search,
        category_id=category_id,
        min_price=min_price,
        max_price=max_price,
        condition=condition,
        sort=sort,
        order=order,
        page=page,
        limit=limit,
    )
    return ListingPageOut(
        listings=[ListingOut.model_validate(p) for p in rows],
        total=total,
        page=page,
        limit=limit,
        pages=page_count(total, limit),
    )


# ---------- 2) detail (token optional, counts a view) ----------
@router.get("/{listing_id}", response_model=ListingOut)
def get_listing(
    listing_id: int = Path(..., ge=1),
    svc: ListingService = Depends(get_listing_service),
    me: Optional[User] = Depends(get_current_user_optional),
):
    return ListingOut.model_validate(svc.view(listing_id))


# ---------- 3) create ----------
@router.post("", response_model=ListingOut, status_code=status.HTTP_201_CREATED)
def create_listing(
    body: ListingCreateIn,
    svc: ListingService = Depends(get_listing_service),
    me: User = Depends(get_current_user),
):
    return ListingOut.model_validate(svc.create(me, body))


# ---------- 4) update (seller only) ----------
@router.put("/{listing_id}", response_model=ListingOut)
def update_listing(
    body: ListingUpdateIn,
    listing_id: int = Path(..., ge=1),
    svc: ListingService = Depends(get_listing_service),
    me: User = Depends(get_current_user),
):
    return ListingOut.model_validate(svc.update(me, listing_id, body))


# ---------- 5) delete (seller or admin) ----------
@router.delete("/{listing_id}", response_model=DetailOut)
def delete_listing(
    listing_id: int = Path(..., ge=1),
    svc: ListingService = Depends(get_listing_service),
    me: User = Depends(get_current_user),
):
    svc.delete(me, listing_id)
    return DetailOut(message="Listing deleted successfully")
