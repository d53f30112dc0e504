"""Session-scoped store of upload thumbnails, keyed by opaque references."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Dict, Optional

from services.thumbnail_generator import ThumbnailGenerator

LOGGER = logging.getLogger(__name__)


class ImageStore:
    """Keep PNG thumbnails of uploaded images in process memory."""

    def __init__(self, thumbnailer: Optional[ThumbnailGenerator] = None) -> None:
        self.thumbnailer = thumbnailer or ThumbnailGenerator()
        self._thumbnails: Dict[str, bytes] = {}

    async def save(self, image_bytes: bytes) -> Optional[str]:
        """Thumbnail `image_bytes` and return its reference.

        Returns None when the bytes cannot be decoded as an image.
        """
        if not image_bytes:
            return None
        # Pillow is blocking -> run in thread
        try:
            thumb = await asyncio.to_thread(self.thumbnailer.create_thumbnail, image_bytes)
        except ValueError as exc:
            LOGGER.warning("Skipping thumbnail for upload: %s", exc)
            return None
        image_ref = uuid.uuid4().hex
        self._thumbnails[image_ref] = thumb
        return image_ref

    def get(self, image_ref: str) -> Optional[bytes]:
        return self._thumbnails.get(image_ref)

    def clear(self) -> None:
        self._thumbnails.clear()

    def __len__(self) -> int:
        return len(self._thumbnails)
