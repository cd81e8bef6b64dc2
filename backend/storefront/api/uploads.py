"""
Uploads API Endpoints
Product image upload to the image host
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from supabase import Client

from storefront.api.deps import INTERNAL_ERROR
from storefront.core.database import get_supabase
from storefront.services.image_service import ImageService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload-image")
async def upload_image(
    image: Optional[UploadFile] = File(None),
    supabase: Client = Depends(get_supabase)
):
    """
    Store an image as product-{epoch_ms}.{ext}

    Only image/* content types up to 5MB are accepted.
    """
    if image is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No image was sent")

    try:
        content = await image.read()
        uploaded = ImageService(supabase).upload(content, image.filename, image.content_type)
        return {"success": True, "imageUrl": uploaded.url, "fileName": uploaded.file_name}

    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to upload image {image.filename}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)
