from typing import List, Optional, Tuple
import logging
import mimetypes
import os

from fastapi import UploadFile, HTTPException
from starlette.responses import StreamingResponse

from app.core.config import settings
from app.core.storage import R2Storage

logger = logging.getLogger(__name__)

def validate_image(filename: Optional[str], content_type: Optional[str], size: int) -> None:
    """Raise ValueError unless the upload is an image within the size limit"""
    if not content_type or not content_type.startswith("image/"):
        raise ValueError(f"Only image files are allowed: {filename or 'unnamed file'}")
    if size > settings.MAX_UPLOAD_SIZE:
        limit_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
        raise ValueError(f"Image '{filename}' exceeds the {limit_mb}MB limit")

def validate_image_count(count: int) -> None:
    if count > settings.MAX_IMAGES_PER_POST:
        raise ValueError(f"A post can have at most {settings.MAX_IMAGES_PER_POST} images")

class MediaService:
    def __init__(self, r2_storage: R2Storage):
        self.r2_storage = r2_storage

    async def read_images(self, files: List[UploadFile]) -> List[Tuple[UploadFile, bytes]]:
        """Read and validate every file before anything is uploaded"""
        files = [file for file in files or [] if file is not None and file.filename]
        validate_image_count(len(files))
        result = []
        for file in files:
            content = await file.read()
            validate_image(file.filename, file.content_type, len(content))
            result.append((file, content))
        return result

    def upload_images(self, images: List[Tuple[UploadFile, bytes]], user_id: str) -> List[str]:
        """Upload validated images under the user's prefix, in order"""
        return [
            self.r2_storage.upload_bytes(content, file.filename, file.content_type, user_id)
            for file, content in images
        ]

    def get_media(self, path: str):
        """Get media from R2 storage, or from local storage when R2 is not configured"""
        if self.r2_storage.client:
            try:
                obj = self.r2_storage.client.get_object(
                    Bucket=self.r2_storage.bucket,
                    Key=path
                )
            except Exception as e:
                logger.warning(f"Failed to retrieve file {path} from R2: {str(e)}")
                raise HTTPException(status_code=404, detail="File not found")
            return StreamingResponse(
                obj["Body"].iter_chunks(),
                media_type=obj.get("ContentType", "application/octet-stream"),
                headers={"Cache-Control": "public, max-age=86400"},
            )

        local_root = os.path.abspath(self.r2_storage.local_root)
        file_path = os.path.abspath(self.r2_storage.local_path(path))
        if not file_path.startswith(local_root + os.sep) or not os.path.isfile(file_path):
            logger.error(f"File {path} not found in local storage")
            raise HTTPException(status_code=404, detail="File not found")

        content_type = mimetypes.guess_type(file_path)[0] or "application/octet-stream"
        with open(file_path, "rb") as f:
            content = f.read()
        return StreamingResponse(
            iter([content]),
            media_type=content_type,
            headers={
                "Cache-Control": "public, max-age=86400",
                "Content-Disposition": f"inline; filename={path.split('/')[-1]}"
            }
        )
