from fastapi import APIRouter, Depends, File, UploadFile

from campus_market.core.auth import get_current_user
from campus_market.core.config import Settings, get_settings
from campus_market.core.errors import InvalidInput
from campus_market.models.user import User
from campus_market.services.uploads import save_image

router = APIRouter(tags=["image"])


@router.post("/upload")
async def upload_image(
    image: UploadFile = File(...),
    me: User = Depends(get_current_user),
    cfg: Settings = Depends(get_settings),
):
    if not image.filename:
        raise InvalidInput("No image provided")

    contents = await image.read()
    url, filename = save_image(contents, image.filename, cfg.UPLOAD_DIR, cfg.MAX_UPLOAD_BYTES)

    return {"url": url, "filename": filename}
