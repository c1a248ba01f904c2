"""
Avatar Storage Service for MentorConnect

Saves profile pictures to local disk under MEDIA_ROOT and hands back the
public URL served from MEDIA_URL.

Directory Structure:
  profilePictures/{user_id}/
    ├── 3f2c...e1.jpg
    └── 9a7b...04.png

Each upload gets a fresh uuid name; earlier pictures are left in place.
"""

import uuid
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles

from mentorconnect.core.config import settings
from mentorconnect.core.exceptions import (
    StoreUnavailableError,
    UnsupportedImageError,
    UploadTooLargeError,
    ValidationError,
)
from mentorconnect.core.logging_config import logger

PROFILE_PICTURES_PREFIX = "profilePictures"

# Accepted content types and the extension used when the filename has none
IMAGE_CONTENT_TYPES: Dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}
IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp"})


class AvatarStorageService:
    """
    Service for storing profile pictures.
    """

    def __init__(self, root: Optional[str] = None, url_prefix: Optional[str] = None):
        self.root = Path(root or settings.MEDIA_ROOT)
        self.url_prefix = (url_prefix or settings.MEDIA_URL).rstrip("/")

    def get_user_prefix(self, user_id: str) -> str:
        """
        Storage prefix for one user's pictures.

        Structure: profilePictures/{user_id}
        """
        return f"{PROFILE_PICTURES_PREFIX}/{user_id}"

    @staticmethod
    def resolve_extension(filename: Optional[str], content_type: Optional[str]) -> str:
        """
        Keep the uploaded file's extension when it is an image extension,
        otherwise derive one from the content type.

        Raises:
            UnsupportedImageError: content type is not an accepted image type
        """
        if content_type not in IMAGE_CONTENT_TYPES:
            raise UnsupportedImageError(
                "Profile picture must be a JPEG, PNG, GIF or WebP image",
                content_type=content_type,
            )
        extension = Path(filename or "").suffix.lower().lstrip(".")
        if extension in IMAGE_EXTENSIONS:
            return extension
        return IMAGE_CONTENT_TYPES[content_type]

    def url_for(self, key: str) -> str:
        return f"{self.url_prefix}/{key}"

    async def save_profile_picture(
        self,
        user_id: str,
        content: bytes,
        filename: Optional[str],
        content_type: Optional[str],
        max_bytes: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Validate and store a profile picture.

        Storage key: profilePictures/{user_id}/{uuid}.{ext}

        Args:
            user_id: Owner of the picture
            content: Raw file bytes
            filename: Name the client sent; only its extension is kept
            content_type: MIME type the client sent
            max_bytes: Size limit, defaults to AVATAR_MAX_BYTES

        Returns:
            Dict with key, url, size_bytes and content_type
        """
        limit = max_bytes or settings.AVATAR_MAX_BYTES
        if not content:
            raise ValidationError("Empty file", field="file")
        if len(content) > limit:
            raise UploadTooLargeError(limit)

        extension = self.resolve_extension(filename, content_type)
        key = f"{self.get_user_prefix(user_id)}/{uuid.uuid4()}.{extension}"
        path = self.root / key

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as exc:
            logger.log_error_with_context(exc, context="save_profile_picture", target_user_id=str(user_id))
            raise StoreUnavailableError("Could not store the profile picture")

        logger.info(
            f"[AvatarStorage] Stored {key} ({len(content)} bytes)",
            extra={"event_type": "avatar_uploaded", "target_user_id": str(user_id), "size_bytes": len(content)},
        )
        return {
            "key": key,
            "url": self.url_for(key),
            "size_bytes": len(content),
            "content_type": content_type,
        }
