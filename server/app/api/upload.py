from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from typing import Dict, Optional
import logging

from app.api.deps import get_container
from app.container import Container
from app.core.exceptions import ValidationError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/upload")
async def upload_image(
    image: Optional[UploadFile] = File(None),
    container: Container = Depends(get_container),
) -> Dict[str, str]:
    """Push an image to the provider's storage and return its public URL."""
    if image is None:
        raise ValidationError("No image file provided")
    content_type = image.content_type or ""
    if not content_type.startswith("image/"):
        raise ValidationError("Only image files are allowed")

    limit = container.settings.max_upload_bytes
    # Read one byte past the limit so oversized files are caught without buffering them whole
    content = await image.read(limit + 1)
    if len(content) > limit:
        raise ValidationError(f"Image exceeds the {limit // (1024 * 1024)} MB limit")
    if not content:
        raise ValidationError("Uploaded image is empty")

    try:
        image_url = await container.provider.upload_image(content, image.filename or "upload", content_type)
    except Exception:
        logger.exception("Error uploading image name=%s", image.filename)
        raise HTTPException(status_code=500, detail="Failed to upload image")
    return {"imageUrl": image_url}
