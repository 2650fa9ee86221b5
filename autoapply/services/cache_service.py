"""
AutoApply - Response Cache

Memoizes Gemini results on disk so pasting the same job post twice does not
burn quota. Keys are MD5 hashes of the job text, optionally prefixed with the
kind of result ("analysis", "title", "email").

The whole cache lives in memory and is rewritten to a single JSON file on
every write. There is no eviction and no locking; it is meant for a single
local process.
"""
from typing import Any, Dict, Optional
import hashlib
import json
import logging
import os
import tempfile

from ..config import settings

logger = logging.getLogger("autoapply.cache")


def get_cache_key(text: str, prefix: str = "") -> str:
    """MD5 of the text, as `{prefix}_{hash}` when a prefix is given."""
    digest = hashlib.md5(text.encode("utf-8")).hexdigest()
    return f"{prefix}_{digest}" if prefix else digest


class CacheService:
    """Key/value store mirrored verbatim to a JSON file."""

    def __init__(self, cache_file: Optional[str] = None, enabled: Optional[bool] = None):
        self.cache_file = cache_file or settings.cache.cache_file
        self.enabled = settings.cache.cache_enabled if enabled is None else enabled
        self._data: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Populate the in-memory map from disk. Bad or empty files are ignored."""
        if not os.path.exists(self.cache_file):
            return

        try:
            with open(self.cache_file, "r", encoding="utf-8") as f:
                raw = f.read()
        except OSError as e:
            logger.error("Failed to read cache file %s: %s", self.cache_file, e)
            return

        # Editors on Windows like to prepend a BOM
        raw = raw.lstrip("\ufeff").strip()
        if not raw:
            return

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Failed to load cache: %s", e)
            return

        if not isinstance(data, dict):
            logger.error("Ignoring cache file %s: expected a JSON object", self.cache_file)
            return

        self._data = data
        logger.info("Loaded %d cached items from disk", len(self._data))

    def save(self) -> None:
        """Write the full map to disk. Failures are logged, never raised."""
        directory = os.path.dirname(self.cache_file) or "."
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            # Write beside the target, then swap it in
            fd, tmp_path = tempfile.mkstemp(
                dir=directory, prefix=".gemini_cache-", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.cache_file)
            tmp_path = None
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to save cache: %s", e)
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def has(self, key: str) -> bool:
        return self.enabled and key in self._data

    def get(self, key: str, default: Any = None) -> Any:
        if not self.enabled:
            return default
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if not self.enabled:
            return
        self._data[key] = value
        self.save()

    def clear(self) -> None:
        self._data = {}
        self.save()

    def __len__(self) -> int:
        return len(self._data)


# Global instance
cache_service = CacheService()
