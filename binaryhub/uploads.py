import logging
import re
import time
import uuid
from pathlib import Path
from typing import Optional

from fastapi import HTTPException, UploadFile

from .config import CONFIG

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
PUBLIC_PREFIX = "/uploads"


def has_file(upload: Optional[UploadFile]) -> bool:
    return upload is not None and bool(upload.filename)


def unique_filename(original: str) -> str:
    path = Path(original)
    ext = path.suffix.lower()
    stem = re.sub(r"\s+", "-", path.stem) or "image"
    stem = re.sub(r"[^A-Za-z0-9._-]", "", stem) or "image"
    return f"{stem}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}{ext}"


def local_path(public_path: str) -> Optional[Path]:
    """Map a public /uploads/... path back onto the uploads directory."""
    if not public_path or not public_path.startswith(PUBLIC_PREFIX + "/"):
        return None
    root = CONFIG.UPLOADS_DIR.resolve()
    target = (root / public_path[len(PUBLIC_PREFIX) + 1:]).resolve()
    if root not in target.parents:
        return None
    return target


async def save_image(upload: UploadFile, folder: str) -> str:
    ext = Path(upload.filename or "").suffix.lower()
    content_type = (upload.content_type or "").lower()
    if ext not in ALLOWED_EXTENSIONS or content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="Only image files (jpeg, jpg, png, gif, webp) are allowed!")

    data = await upload.read(CONFIG.MAX_UPLOAD_BYTES + 1)
    if len(data) > CONFIG.MAX_UPLOAD_BYTES:
        limit_mb = CONFIG.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise HTTPException(status_code=400, detail=f"File too large (max {limit_mb}MB)")

    target_dir = CONFIG.UPLOADS_DIR / folder
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / unique_filename(upload.filename)
    with target.open("wb") as f:
        f.write(data)
    logger.debug("Stored upload %s", target)
    return f"{PUBLIC_PREFIX}/{folder}/{target.name}"


def remove_image(public_path: Optional[str]) -> bool:
    target = local_path(public_path or "")
    if target is None or not target.exists():
        return False
    try:
        target.unlink()
    except OSError:
        logger.exception("Could not remove upload %s", target)
        return False
    return True
