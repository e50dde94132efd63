from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from campus_market.core.db import get_db
from campus_market.schemas.listing import CategoryOut
from campus_market.services.categories import list_categories

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=List[CategoryOut])
def get_categories(db: Session = Depends(get_db)):
    return [CategoryOut.model_validate(c) for c in list_categories(db)]
