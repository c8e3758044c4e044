"""Product image upload storage."""
import logging
import os
import time
import uuid
from typing import Optional

from fastapi import UploadFile

from shop_service.config import ALLOWED_IMAGE_TYPES, MAX_IMAGE_BYTES
from shop_service.monitoring import image_uploads_counter

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"


class ImageRejected(ValueError):
    """Raised when an upload is not an acceptable product image."""


class ImageStore:
    """Writes product images to a local directory served under ``/uploads``."""

    def __init__(self, directory: str, max_bytes: int = MAX_IMAGE_BYTES):
        self.directory = directory
        self.max_bytes = max_bytes

    def ensure_directory(self) -> None:
        os.makedirs(self.directory, exist_ok=True)

    @staticmethod
    def is_allowed(filename: str, content_type: Optional[str]) -> bool:
        """Both the extension and the MIME subtype must be an allowed image type."""
        extension = os.path.splitext(filename)[1].lower().lstrip(".")
        major, _, subtype = (content_type or "").lower().partition("/")
        return (
            extension in ALLOWED_IMAGE_TYPES
            and major == "image"
            and subtype in ALLOWED_IMAGE_TYPES
        )

    async def save(self, upload: UploadFile) -> str:
        """
        Validate and store an uploaded image.

        Args:
            upload: Multipart file field

        Returns:
            Public path of the stored image, e.g. ``/uploads/product-1700000000000-3f9a2c1b.png``

        Raises:
            ImageRejected: If the file type is not allowed or the file is too large
        """
        filename = upload.filename or ""
        if not self.is_allowed(filename, upload.content_type):
            image_uploads_counter.add(1, {"outcome": "rejected_type"})
            logger.warning("Image upload rejected: type not allowed", extra={
                "upload_filename": filename,
                "content_type": upload.content_type
            })
            raise ImageRejected("Images only: jpeg, jpg, png or webp")

        data = await upload.read(self.max_bytes + 1)
        if len(data) > self.max_bytes:
            image_uploads_counter.add(1, {"outcome": "rejected_size"})
            logger.warning("Image upload rejected: too large", extra={
                "upload_filename": filename,
                "limit_bytes": self.max_bytes
            })
            raise ImageRejected(f"Image must be at most {self.max_bytes} bytes")

        extension = os.path.splitext(filename)[1].lower()
        # Unique within a millisecond; never overwrite an existing file
        stored_name = f"product-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{extension}"
        self.ensure_directory()
        with open(os.path.join(self.directory, stored_name), "xb") as f:
            f.write(data)

        image_uploads_counter.add(1, {"outcome": "accepted"})
        logger.info("Image stored", extra={
            "stored_name": stored_name,
            "size_bytes": len(data)
        })
        return f"{PUBLIC_PREFIX}/{stored_name}"

    def discard(self, image_ref: str) -> None:
        """Remove a stored image that ended up unreferenced."""
        stored_name = image_ref.rsplit("/", 1)[-1]
        path = os.path.join(self.directory, stored_name)
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        logger.info("Discarded unreferenced image", extra={"stored_name": stored_name})
