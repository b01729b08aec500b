from typing import Any, List
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.core.config import settings
from app.core.storage import r2_storage
from app.deps import get_current_user
from app.modules.media.service import MediaService
from app.modules.user_management.models.user import Profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.API_V1_STR}/media", tags=["media"])

def get_media_service():
    return MediaService(r2_storage)

@router.post("/images", response_model=dict)
async def upload_images(
    images: List[UploadFile] = File(...),
    current_user: Profile = Depends(get_current_user),
    media_service: MediaService = Depends(get_media_service),
) -> Any:
    """Upload up to four images for a post and return their public URLs"""
    try:
        validated = await media_service.read_images(images)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        urls = media_service.upload_images(validated, current_user.id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error uploading images: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to upload images")
    return {"image_urls": urls}

@router.get("/{path:path}")
def serve_media(path: str, media_service: MediaService = Depends(get_media_service)):
    try:
        return media_service.get_media(path)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"An unexpected error occurred while serving media file {path}: {str(e)}")
        raise HTTPException(status_code=500, detail="An unexpected error occurred while serving media file.")
