"""
Directory-backed store for uploaded product images
"""

import os
import time
from datetime import datetime, timezone
from typing import List

import structlog

from errors import NotFound, StorageError, ValidationError
from schemas import ImageInfo

logger = structlog.get_logger()

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
MAX_IMAGE_BYTES = 5 * 1024 * 1024


class ImageStore:

    def __init__(self, directory: str, public_path: str = "/images"):
        self.directory = directory
        self.public_path = public_path.rstrip("/")

    def url_for(self, name: str) -> str:
        return f"{self.public_path}/{name}"

    def list(self) -> List[ImageInfo]:
        """Image files in the directory, newest first."""
        if not os.path.isdir(self.directory):
            return []

        images = []
        for entry in os.scandir(self.directory):
            ext = os.path.splitext(entry.name)[1].lower()
            if not entry.is_file() or ext not in ALLOWED_EXTENSIONS:
                continue
            stat = entry.stat()
            images.append(ImageInfo(
                name=entry.name,
                url=self.url_for(entry.name),
                size=stat.st_size,
                modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            ))
        images.sort(key=lambda img: img.modified, reverse=True)
        return images

    def save(self, filename: str, content_type: str, data: bytes) -> ImageInfo:
        """
        Store an upload as ``<base>-<epoch ms><ext>``.

        Only ``image/*`` content types up to MAX_IMAGE_BYTES are accepted.
        """
        if not content_type or not content_type.startswith("image/"):
            raise ValidationError("Only image files are allowed!")
        if len(data) > MAX_IMAGE_BYTES:
            raise ValidationError("Image too large (max 5 MB)")

        original = os.path.basename((filename or "").replace("\\", "/"))
        base, ext = os.path.splitext(original)
        name = f"{base or 'image'}-{int(time.time() * 1000)}{ext}"

        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(os.path.join(self.directory, name), "wb") as f:
                f.write(data)
        except OSError as e:
            logger.error("image_write_failed", name=name, error=str(e))
            raise StorageError(f"Could not save image: {e}") from e

        logger.info("image_uploaded", name=name, size=len(data))
        return ImageInfo(
            name=name,
            url=self.url_for(name),
            size=len(data),
            originalName=filename,
        )

    def delete(self, filename: str) -> None:
        # Only plain names inside the directory can be removed
        if filename in ("", ".", "..") or os.path.basename(filename) != filename:
            raise NotFound("Image not found")
        path = os.path.join(self.directory, filename)
        if not os.path.isfile(path):
            raise NotFound("Image not found")

        try:
            os.remove(path)
        except OSError as e:
            raise StorageError(f"Could not delete image: {e}") from e
        logger.info("image_deleted", name=filename)
