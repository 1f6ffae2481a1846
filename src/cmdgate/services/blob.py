"""Blob storage collaborator behind the router's ``/image`` route."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class BlobObject(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    data: bytes
    content_type: str = "application/octet-stream"


class BlobStore(ABC):
    """Abstract object store keyed by slash-separated names."""

    @abstractmethod
    async def get(self, key: str) -> BlobObject | None:
        """Fetch an object, or None if it does not exist."""
        ...


class FileSystemBlobStore(BlobStore):
    """Objects are files below a root directory; keys are relative paths."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    async def get(self, key: str) -> BlobObject | None:
        try:
            path = (self._root / key).resolve()
        except (OSError, ValueError):
            # e.g. an embedded NUL byte
            logger.debug("Blob key %r is not a valid path", key)
            return None
        if not path.is_relative_to(self._root) or not path.is_file():
            logger.debug("Blob %r not found under %s", key, self._root)
            return None
        data = await asyncio.to_thread(path.read_bytes)
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return BlobObject(key=key, data=data, content_type=content_type)
