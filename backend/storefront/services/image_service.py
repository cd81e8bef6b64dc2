"""
Image Service - product image uploads to Supabase Storage
"""
import logging
import time
from dataclasses import dataclass

from supabase import Client

from storefront.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "jpg"


@dataclass
class UploadedImage:
    file_name: str
    url: str


def build_file_name(original_name: str, now_ms: int = None) -> str:
    """product-{epoch_ms}.{ext}, extension taken from the uploaded name"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    extension = DEFAULT_EXTENSION
    if original_name and "." in original_name:
        extension = original_name.rsplit(".", 1)[-1].lower() or DEFAULT_EXTENSION
    return f"product-{now_ms}.{extension}"


def validate_image(content_type: str, size: int, max_bytes: int = None) -> None:
    """
    Raises:
        ValueError: not an image or larger than the upload limit
    """
    max_bytes = max_bytes or settings.MAX_UPLOAD_BYTES
    if not content_type or not content_type.startswith("image/"):
        raise ValueError("File must be an image")
    if size > max_bytes:
        raise ValueError(f"Image must be at most {max_bytes // (1024 * 1024)}MB")


class ImageService:

    def __init__(self, client: Client, bucket: str = None):
        self.client = client
        self.bucket = bucket or settings.STORAGE_BUCKET

    def upload(self, content: bytes, original_name: str, content_type: str) -> UploadedImage:
        validate_image(content_type, len(content))

        file_name = build_file_name(original_name)
        storage = self.client.storage.from_(self.bucket)
        storage.upload(file_name, content, {"content-type": content_type})

        url = storage.get_public_url(file_name)
        logger.info(f"Image uploaded: {file_name} ({len(content)} bytes)")
        return UploadedImage(file_name=file_name, url=url)
