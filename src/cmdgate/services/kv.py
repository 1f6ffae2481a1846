"""Key-value lookup collaborator behind the router's ``/kv`` route."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping

import yaml

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Abstract point-lookup interface."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent."""
        ...


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, data: Mapping[str, str] | None = None) -> None:
        self._data = dict(data or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)


class YamlKeyValueStore(InMemoryKeyValueStore):
    """Serves a flat YAML mapping, read once at construction."""

    def __init__(self, path: Path | str) -> None:
        path = Path(path)
        data: dict = {}
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"{path} must contain a mapping, got {type(data).__name__}")
            logger.info("Loaded %d key(s) from %s", len(data), path)
        else:
            logger.warning("Key-value file %s not found, serving an empty store", path)
        super().__init__({str(k): str(v) for k, v in data.items()})
