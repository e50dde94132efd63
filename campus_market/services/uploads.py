# campus_market/services/uploads.py
import time
from io import BytesIO
from pathlib import Path
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from campus_market.core.errors import InvalidInput

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
URL_PREFIX = "/uploads/"


def save_image(data: bytes, original_name: str, upload_dir: str, max_bytes: int) -> Tuple[str, str]:
    """Store the bytes as-is under a generated name. Returns (url, filename)."""
    ext = Path(original_name or "").suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise InvalidInput("Unsupported image type")
    if not data:
        raise InvalidInput("No image provided")
    if len(data) > max_bytes:
        raise InvalidInput("Image is too large")

    try:
        Image.open(BytesIO(data)).verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise InvalidInput("File is not a valid image")

    filename = f"{time.time_ns()}{ext}"
    target = Path(upload_dir)
    target.mkdir(parents=True, exist_ok=True)
    (target / filename).write_bytes(data)
    return URL_PREFIX + filename, filename
