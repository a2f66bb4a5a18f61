"""
File upload utilities: content checks and disk storage under the upload directory.
Stored files are served back under ``/uploads/<category>/<name>``.
"""

import io
import logging
import uuid
from pathlib import Path
from typing import Iterable, Optional, Tuple
from PIL import Image, UnidentifiedImageError
import aiofiles
from fastapi import UploadFile

from app.config import get_settings
from app.utils.exceptions import (
    FileUploadError,
    UnsupportedFileTypeError,
    FileSizeExceededError,
)

settings = get_settings()
logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"

# Storage sub-directories, one per uploading resource
PROPERTY_MEDIA = "properties"
MAINTENANCE_PHOTOS = "maintenance"
DOCUMENTS = "documents"
RENTAL_DOCUMENTS = "rental_documents"


class FileValidator:
    """Checks run on an uploaded file before it is written to disk."""

    @staticmethod
    def validate_mime_type(mime_type: Optional[str], allowed_prefixes: Iterable[str]) -> str:
        """
        Validate the declared content type against allowed prefixes.

        Args:
            mime_type: Content type sent by the client
            allowed_prefixes: Accepted prefixes such as ``image/``

        Returns:
            The content type

        Raises:
            UnsupportedFileTypeError: If the type matches no prefix
        """
        allowed = list(allowed_prefixes)
        if not mime_type or not any(mime_type.startswith(prefix) for prefix in allowed):
            raise UnsupportedFileTypeError(mime_type or "unknown", [f"{prefix}*" for prefix in allowed])
        return mime_type

    @staticmethod
    def validate_file_size(file_size: int, max_size: int) -> int:
        if file_size <= 0:
            raise FileUploadError("Uploaded file is empty")
        if file_size > max_size:
            raise FileSizeExceededError(file_size, max_size)
        return file_size

    @staticmethod
    def read_image_dimensions(content: bytes) -> Tuple[int, int]:
        """
        Open image bytes with Pillow and return (width, height).

        Raises:
            FileUploadError: If the bytes are not a readable image
        """
        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
            with Image.open(io.BytesIO(content)) as img:
                return img.width, img.height
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise FileUploadError(f"Invalid image file: {e}")

    @classmethod
    async def read_upload(
        cls,
        file: UploadFile,
        max_size: int,
        allowed_prefixes: Optional[Iterable[str]] = None
    ) -> bytes:
        """
        Read an upload into memory after checking its type and size.

        Args:
            file: FastAPI UploadFile object
            max_size: Maximum size in bytes
            allowed_prefixes: Accepted content type prefixes, any type when omitted

        Returns:
            File content
        """
        if not file.filename:
            raise FileUploadError("Filename is required")
        if allowed_prefixes is not None:
            cls.validate_mime_type(file.content_type, allowed_prefixes)

        await file.seek(0)
        content = await file.read()
        cls.validate_file_size(len(content), max_size)
        return content


class FileStorage:
    """Writes and removes files below the configured upload directory."""

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = Path(base_dir or settings.upload_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def generate_unique_filename(original_filename: str) -> str:
        extension = Path(original_filename).suffix.lower()
        return f"{uuid.uuid4().hex}{extension}"

    def get_category_directory(self, category: str) -> Path:
        directory = self.base_dir / category
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def resolve(self, public_path: str) -> Path:
        """Map a stored ``/uploads/...`` path back to a location on disk."""
        relative = public_path
        if relative.startswith(PUBLIC_PREFIX + "/"):
            relative = relative[len(PUBLIC_PREFIX) + 1:]
        resolved = (self.base_dir / relative).resolve()
        if self.base_dir.resolve() not in resolved.parents:
            raise FileUploadError("Invalid file path")
        return resolved

    async def save(self, content: bytes, category: str, original_filename: str) -> str:
        """
        Save file content under a random name.

        Args:
            content: Bytes to write
            category: Storage sub-directory
            original_filename: Uploaded name, used for its extension only

        Returns:
            Public path of the stored file

        Raises:
            FileUploadError: If the file cannot be written
        """
        filename = self.generate_unique_filename(original_filename)
        target = self.get_category_directory(category) / filename
        try:
            async with aiofiles.open(target, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"Failed to write upload {target}: {e}", exc_info=True)
            target.unlink(missing_ok=True)
            raise FileUploadError("Failed to save file")

        return f"{PUBLIC_PREFIX}/{category}/{filename}"

    def delete_file(self, public_path: str) -> bool:
        """
        Delete a stored file. Failures are logged, never raised.

        Returns:
            True if a file was removed
        """
        try:
            path = self.resolve(public_path)
            if path.exists():
                path.unlink()
                return True
            return False
        except (OSError, FileUploadError) as e:
            logger.warning(f"Could not delete file {public_path}: {e}")
            return False

    def delete_files(self, public_paths: Iterable[str]) -> int:
        return sum(1 for path in public_paths if self.delete_file(path))


def get_file_storage() -> FileStorage:
    return FileStorage()
