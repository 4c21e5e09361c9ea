"""
BaseDrop Backend — Image Storage Service
==========================================

What:  Validates, stores, serves and cleans up uploaded base screenshots.
How:   Checks extension and declared MIME type, bounds the payload size,
       and writes the bytes under a generated unique filename.
Why:   Only the generated name ever touches the filesystem, never client input.
Who:   Called by SubmissionService during upload and by the image route.
When:  After form fields are validated, before the record is appended.

Acceptance rules:
    1. Extension:  .jpeg .jpg .png .gif .webp (case-insensitive)
    2. MIME type:  the type declared by the client must also be an image type
    3. Size:       at most settings.max_file_size bytes (5MB by default)

    Both (1) and (2) must pass; a renamed .txt with an image/png type, or a
    .png declared as text/plain, is rejected.

Filename scheme:
    <millisecond timestamp>-<random integer>.<original extension>
    e.g. 1718035200000-482913377.png
"""

import logging
import os
import random
import time
from pathlib import Path
from typing import Optional

import aiofiles
from fastapi import UploadFile

from app.config import settings
from app.exceptions import FileStorageError, NotFoundError, UploadError, ValidationError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
}

TYPE_REJECTED_MESSAGE = "Only image files (jpg, jpeg, png, gif, webp) are allowed!"
SIZE_REJECTED_MESSAGE = "File too large"


class FileService:
    """
    Manages the image upload lifecycle.

    Lifecycle of an uploaded image:
        1. SubmissionService hands over the UploadFile → validate_and_store()
        2. Extension + MIME check (no bytes read yet)
        3. Bounded read: at most max_file_size + 1 bytes are pulled into memory
        4. Size check on the bytes actually received
        5. Bytes written to image_dir/<generated name>
        6. Generated name returned (stored in the record's "image" field)
        7. On a later failure: cleanup_file() removes the stored image

    Directory Structure:
        image/
        ├── 1718035200000-482913377.png
        └── 1718035261734-90412.jpg
    """

    def __init__(
        self,
        image_dir: Optional[str] = None,
        max_file_size: Optional[int] = None,
    ):
        """
        Args:
            image_dir: Override the image directory (used in tests).
            max_file_size: Override the upload size limit in bytes.
        """
        self.image_dir = Path(image_dir or settings.image_dir).resolve()
        self.max_file_size = max_file_size or settings.max_file_size

    # ── Validation ────────────────────────────────────────────────────────

    def validate_type(self, filename: str, content_type: Optional[str]) -> str:
        """
        Check the original extension and the declared MIME type.

        Returns: Lowercased extension with dot.
        Raises:  UploadError if either check fails.
        """
        ext = Path(filename).suffix.lower()
        mime = (content_type or "").split(";")[0].strip().lower()

        if ext not in ALLOWED_EXTENSIONS or mime not in ALLOWED_MIME_TYPES:
            raise UploadError(
                message=TYPE_REJECTED_MESSAGE,
                context={"extension": ext, "content_type": mime},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Enforce the upload size limit.

        content_length is the size reported for the part (may be None);
        actual_size is what was read. Either one over the limit rejects.
        """
        if content_length and content_length > self.max_file_size:
            raise UploadError(
                message=SIZE_REJECTED_MESSAGE,
                context={"max_size": self.max_file_size, "reported_size": content_length},
            )

        if actual_size > self.max_file_size:
            raise UploadError(
                message=SIZE_REJECTED_MESSAGE,
                context={"max_size": self.max_file_size, "actual_size": actual_size},
            )

    async def read_limited(self, upload: UploadFile) -> bytes:
        """Read the upload, stopping one byte past the limit."""
        return await upload.read(self.max_file_size + 1)

    # ── Storage ───────────────────────────────────────────────────────────

    def generate_filename(self, original_filename: str) -> str:
        """
        Build a unique storage name from the current time and a random suffix.

        The original extension is kept as submitted (including its case);
        nothing else from the client's filename survives.
        """
        timestamp_ms = int(time.time() * 1000)
        suffix = random.randint(0, 10**9)
        return f"{timestamp_ms}-{suffix}{Path(original_filename).suffix}"

    async def store_file(self, content: bytes, original_filename: str) -> str:
        """
        Write the image to the image directory, creating it if needed.

        Returns: The generated filename.
        Raises:  FileStorageError if the directory or file cannot be written.
        """
        filename = self.generate_filename(original_filename)
        absolute_path = self.image_dir / filename

        try:
            self.image_dir.mkdir(parents=True, exist_ok=True)

            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)

            logger.info("Image stored: %s (%d bytes)", filename, len(content))
            return filename

        except OSError as e:
            logger.error("Failed to store image at %s: %s", absolute_path, str(e))
            # A failed write can leave a partial file behind
            await self.cleanup_file(filename)
            raise FileStorageError(
                error=str(e),
                context={"path": str(absolute_path)},
            )

    async def cleanup_file(self, filename: str) -> None:
        """
        Remove a stored image (used after a failed submission).

        Best-effort: a missing file is ignored and any other failure is
        logged, never raised, so it cannot mask the original error.
        """
        try:
            path = self.image_dir / filename
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up image: %s", filename)
            else:
                logger.debug("Cleanup: image already gone: %s", filename)
        except Exception as e:
            logger.warning("Failed to clean up image %s: %s", filename, str(e))

    def resolve(self, filename: str) -> Path:
        """
        Map a public image name to its path inside the image directory.

        Raises:
            ValidationError: the name escapes the image directory.
            NotFoundError:   no such image.
        """
        full_path = (self.image_dir / filename).resolve()

        # Prevents path traversal (e.g. ../base/baseth12.json)
        if full_path.parent != self.image_dir:
            raise ValidationError(message="Invalid file path", field="image")

        if not full_path.is_file():
            raise NotFoundError(resource="image", resource_id=filename)

        return full_path

    async def validate_and_store(self, upload: UploadFile) -> str:
        """
        Complete validation and storage pipeline for one uploaded image.

        Validation order:
            1. Extension + declared MIME type (no bytes read)
            2. Reported size, then bounded read and actual size
            3. Store to disk

        Returns: The generated filename.
        """
        filename = upload.filename or ""

        self.validate_type(filename, upload.content_type)

        self.validate_size(upload.size, 0)
        content = await self.read_limited(upload)
        self.validate_size(None, len(content))

        return await self.store_file(content, filename)


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
