import os
import uuid
import boto3
import logging
import traceback
from typing import Optional
from urllib.parse import urlparse
from fastapi import HTTPException
from .config import settings

logger = logging.getLogger(__name__)


def key_from_url(url: str) -> Optional[str]:
    """Object key of a stored image: the last two path segments (<user_id>/<filename>)."""
    try:
        path = urlparse(url).path
    except ValueError:
        logger.error(f"Error parsing URL: {url}")
        return None
    segments = [segment for segment in path.split("/") if segment]
    if len(segments) < 2:
        return None
    return "/".join(segments[-2:])


class R2Storage:
    """Handles image storage using Cloudflare R2, with a local-disk fallback"""

    def __init__(self):
        """Initialize the R2 client with settings from config"""
        self.client = None
        self.bucket = settings.R2_BUCKET_NAME
        self.public_url = settings.R2_PUBLIC_URL
        self.base_url = settings.BASE_URL

        logger.info("Initializing R2Storage with configuration:")
        logger.info(f"  Bucket: {self.bucket}")
        logger.info(f"  Public URL: {self.public_url}")
        logger.info(f"  Endpoint: {settings.R2_ENDPOINT}")
        logger.info(f"  Access Key ID: {settings.R2_ACCESS_KEY_ID[:5]}..." if settings.R2_ACCESS_KEY_ID else "  Access Key ID: Not set")

        if all([settings.R2_ENDPOINT, settings.R2_ACCESS_KEY_ID, settings.R2_SECRET_ACCESS_KEY]):
            try:
                self.client = boto3.client(
                    's3',
                    endpoint_url=settings.R2_ENDPOINT,
                    aws_access_key_id=settings.R2_ACCESS_KEY_ID,
                    aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY
                )
                logger.info("R2Storage S3 client initialized successfully")
            except Exception as e:
                logger.error(f"Failed to create S3 client: {str(e)}")
                logger.error(traceback.format_exc())
                logger.warning("R2 storage will not be available due to initialization failure")
        else:
            missing = []
            if not settings.R2_ENDPOINT:
                missing.append("R2_ENDPOINT")
            if not settings.R2_ACCESS_KEY_ID:
                missing.append("R2_ACCESS_KEY_ID")
            if not settings.R2_SECRET_ACCESS_KEY:
                missing.append("R2_SECRET_ACCESS_KEY")
            logger.warning(f"R2 storage not configured - missing: {', '.join(missing)}; using local storage")

    @property
    def local_root(self) -> str:
        return os.path.join(settings.UPLOAD_DIRECTORY, self.bucket)

    def local_path(self, key: str) -> str:
        return os.path.join(self.local_root, *key.split("/"))

    def _public_url_for(self, key: str) -> str:
        if self.client and self.public_url:
            return f"{self.public_url}/{key}"
        # Proxy URL served by the media router
        return f"{self.base_url}{settings.API_V1_STR}/media/{key}"

    def upload_bytes(self, content: bytes, filename: str, content_type: Optional[str], user_id: str) -> str:
        """Store an image under the owner's prefix and return its public URL"""
        file_extension = os.path.splitext(filename or "")[1].lower()
        key = f"{user_id}/{uuid.uuid4().hex}{file_extension}"

        if not self.client:
            local_path = self.local_path(key)
            os.makedirs(os.path.dirname(local_path), exist_ok=True)
            try:
                with open(local_path, "wb") as out_file:
                    out_file.write(content)
            except OSError as e:
                logger.error(f"[UPLOAD] Failed to save file locally: {str(e)}")
                raise HTTPException(status_code=500, detail="Failed to upload image")
            logger.info(f"[UPLOAD] Saved file locally at {local_path}")
            return self._public_url_for(key)

        logger.info(f"[UPLOAD] Uploading '{filename}' to R2 bucket '{self.bucket}' with key '{key}'")
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type or 'application/octet-stream'
            )
        except Exception as e:
            logger.error(f"[UPLOAD] Failed to upload to R2: {str(e)}")
            logger.error(traceback.format_exc())
            raise HTTPException(status_code=500, detail="Failed to upload image")
        return self._public_url_for(key)

    def delete_file(self, url: str) -> bool:
        """Delete a stored image using its URL"""
        if not url:
            logger.error("No URL provided for file deletion")
            return False

        key = key_from_url(url)
        if not key:
            logger.error(f"URL {url} doesn't contain a <user_id>/<filename> path")
            return False

        if not self.client:
            local_path = self.local_path(key)
            try:
                os.remove(local_path)
            except OSError as e:
                logger.error(f"Failed to delete local file {local_path}: {e}")
                return False
            logger.info(f"Deleted local file {local_path}")
            return True

        try:
            logger.info(f"Deleting file with key '{key}' from bucket '{self.bucket}'")
            self.client.delete_object(
                Bucket=self.bucket,
                Key=key
            )
            return True
        except Exception as e:
            logger.error(f"Failed to delete from R2: {str(e)}")
            logger.error(traceback.format_exc())
            return False

# Global instance for app-wide usage
r2_storage = R2Storage()
