"""Profile image upload validation and storage."""

import os
import uuid
from pathlib import Path

from fastapi import UploadFile

from app.config import get_settings

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
PUBLIC_PREFIX = "/static/uploads/users"


class UploadService:
    """Stores user profile images on local disk."""

    def validate_upload_metadata(self, filename: str, content_type: str | None) -> str | None:
        """Validate upload file metadata (extension + MIME). Returns error message or None if valid."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            return f"Unsupported file type '{ext}'. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"

        if content_type and not content_type.startswith("image/"):
            return f"Invalid content type '{content_type}'. Must be an image file."

        return None

    def users_dir(self) -> Path:
        return Path(get_settings().UPLOAD_DIR) / "users"

    async def store_profile_image(self, upload: UploadFile) -> str:
        """Stream an uploaded image to disk with size limit. Returns its public path.

        Raises ValueError if the file exceeds max upload size.
        """
        settings = get_settings()
        max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
        ext = Path(upload.filename or "image.bin").suffix.lower()
        stored_filename = f"{uuid.uuid4()}{ext}"
        target_dir = self.users_dir()
        target_dir.mkdir(parents=True, exist_ok=True)

        file_path = target_dir / stored_filename
        file_size = 0
        chunk_size = 1024 * 64

        try:
            with open(file_path, "wb") as f:
                while True:
                    chunk = await upload.read(chunk_size)
                    if not chunk:
                        break
                    file_size += len(chunk)
                    if file_size > max_bytes:
                        raise ValueError(
                            f"File too large ({file_size // (1024 * 1024)}MB). Maximum: {settings.MAX_UPLOAD_SIZE_MB}MB"
                        )
                    f.write(chunk)
        except ValueError:
            if file_path.exists():
                os.remove(file_path)
            raise

        return f"{PUBLIC_PREFIX}/{stored_filename}"

    def remove_profile_image(self, public_path: str) -> None:
        """Delete a stored image by the public path store_profile_image returned."""
        file_path = self.users_dir() / Path(public_path).name
        if file_path.exists():
            os.remove(file_path)


_upload_service: UploadService | None = None


def get_upload_service() -> UploadService:
    """Get singleton upload service instance."""
    global _upload_service
    if _upload_service is None:
        _upload_service = UploadService()
    return _upload_service
