"""Image capability: turns a selected file into an embeddable data URL."""

from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class ImageReader(ABC):
    """Reads a file-like source into a string image representation."""

    @abstractmethod
    async def read_as_data_url(self, source) -> str | None:
        """Return the representation, or None if the read never completed."""
        ...


class DataUrlImageReader(ImageReader):
    """Reads a file path into a ``data:`` URL in a worker thread.

    File type and size are not checked.
    """

    async def read_as_data_url(self, source: str | Path) -> str | None:
        path = Path(source)
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            logger.warning("Could not read image %s: %s", path, e)
            return None
        media_type = mimetypes.guess_type(str(path))[0] or "application/octet-stream"
        encoded = base64.standard_b64encode(data).decode("ascii")
        return f"data:{media_type};base64,{encoded}"
