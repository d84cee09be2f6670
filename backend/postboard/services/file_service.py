"""
Postboard Backend — Image Upload Service
==========================================

What:  Validates, names, stores and removes uploaded post images.
Who:   Called by PostService on create and update.
When:  After the caller is authenticated, before the post row is written.

Naming Scheme:
    <original name, lower-cased, spaces → hyphens>-<epoch ms>.<ext>
    e.g. "My Cat.PNG" uploaded as image/png → "my-cat.png-1700000000000.png"

    The timestamp keeps names unique across uploads of the same file;
    the extension always matches the accepted MIME type, whatever the
    client called the file. Directory components in the client filename
    are discarded, so a name can never point outside images_root.

Failure Handling:
    Unsupported types and oversized files are rejected before anything is
    written. If the database write that follows a successful store fails,
    PostService calls cleanup_file() so no orphaned image is left behind.
"""

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional, Tuple

import aiofiles

from postboard.config import settings
from postboard.exceptions import ValidationError, FileStorageError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
# What: Declared MIME type → extension written to disk
ALLOWED_MIME_TYPES = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
}


@dataclass(frozen=True)
class ImageUpload:
    """An uploaded image as received from the multipart body."""
    filename: str
    content_type: str
    content: bytes


class FileService:
    """
    Manages the upload lifecycle of post images.

    Lifecycle of an uploaded image:
        1. Route reads the multipart `image` part → ImageUpload
        2. validate_mime_type() against ALLOWED_MIME_TYPES
        3. validate_size() against settings.max_file_size
        4. build_filename() derives the stored name
        5. store_file() writes it under images_root
        6. public_url() builds the URL saved in posts.image_path
        7. On a failed database write: cleanup_file()
    """

    def __init__(self, images_root: Optional[str] = None):
        """
        Args:
            images_root: Override the upload directory (used in tests).
                         If None, settings.images_root is read on each call.
        """
        self._images_root = images_root

    @property
    def images_root(self) -> Path:
        return Path(self._images_root or settings.images_root).resolve()

    def validate_mime_type(self, content_type: Optional[str]) -> str:
        """
        Check the declared MIME type against the allow-list.

        Returns: The extension to store the file under.
        Raises:  ValidationError for any type outside png/jpeg/jpg.
        """
        mime_type = (content_type or "").split(";")[0].strip().lower()
        extension = ALLOWED_MIME_TYPES.get(mime_type)
        if extension is None:
            raise ValidationError(
                message="Invalid mime type",
                field="image",
                context={
                    "content_type": content_type,
                    "allowed": list(ALLOWED_MIME_TYPES.keys()),
                },
            )
        return extension

    def validate_size(self, actual_size: int) -> None:
        """Reject uploads larger than settings.max_file_size."""
        if actual_size > settings.max_file_size:
            max_mb = settings.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"Image exceeds the maximum size of {max_mb:.0f}MB.",
                field="image",
                context={"max_size": settings.max_file_size, "actual_size": actual_size},
            )

    def build_filename(
        self,
        original_name: str,
        extension: str,
        timestamp_ms: Optional[int] = None,
    ) -> str:
        """
        Derive the stored filename from the client's filename.

        Args:
            original_name: Filename reported by the client (may contain a path)
            extension:     Extension for the accepted MIME type
            timestamp_ms:  Upload time in epoch milliseconds (now if None)
        """
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        base = PurePosixPath(original_name.replace("\\", "/")).name or "image"
        name = "-".join(base.lower().split(" "))
        return f"{name}-{timestamp_ms}.{extension}"

    def public_url(self, base_url: str, filename: str) -> str:
        """Absolute URL under which routes.images serves a stored file."""
        return f"{base_url.rstrip('/')}/images/{filename}"

    async def store_file(self, content: bytes, filename: str) -> str:
        """
        Write image bytes into images_root.

        Returns: Absolute path of the written file.
        Raises:  FileStorageError if the directory or file cannot be written.
        """
        absolute_path = self.images_root / filename
        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store image at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("Image stored: %s (%d bytes)", filename, len(content))
        return str(absolute_path)

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a stored image. Best-effort: logs failures, never raises.

        When: The post write that should have referenced the file failed,
              or an update matched no post.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up image: %s", path.name)
            else:
                logger.debug("Cleanup: image already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up image %s: %s", file_path, str(e))

    async def validate_and_store(self, image: ImageUpload) -> Tuple[str, str]:
        """
        Validate an upload and write it to disk.

        Returns: (absolute_path, stored_filename)
        Raises:  ValidationError (nothing written) or FileStorageError.
        """
        extension = self.validate_mime_type(image.content_type)
        self.validate_size(len(image.content))

        filename = self.build_filename(image.filename, extension)
        absolute_path = await self.store_file(image.content, filename)
        return absolute_path, filename


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
