"""Persistent directory cache keyed by string.

Each entry snapshots one directory under ``{root}/{key}/``:

    {root}/rain-cache-1.24.2-linux-x64/
        entry.json      source path and creation time
        payload/        copy of the directory

Entries are immutable: saving a key that already exists is an error, the
same way a hosted cache refuses to overwrite a reserved key. All failures
are returned as ``CacheError``; callers treat them as a cache miss or a
skipped save.
"""

from __future__ import annotations

import json
import re
import shutil
import tempfile
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path

from install_rain.core.errors import CacheError
from install_rain.core.result import Err, Ok, Result
from install_rain.platform.files import atomic_write_text

__all__ = ["ToolCache", "CacheEntry"]

MAX_KEY_LENGTH = 512
_VALID_KEY = re.compile(r"^[A-Za-z0-9._-]+$")


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Metadata stored next to a cached directory.

    Attributes:
        key: Cache key
        source: Directory the snapshot was taken from
        created_at: ISO timestamp of the save
    """

    key: str
    source: str
    created_at: str

    @classmethod
    def now(cls, key: str, source: Path) -> CacheEntry:
        return cls(key=key, source=str(source), created_at=datetime.now().isoformat())


class ToolCache:
    """Directory snapshots keyed by string.

    Usage:
        cache = ToolCache(cache_dir)
        match cache.restore(install_dir, key):
            case Ok(True):
                ...  # hit
            case Ok(False) | Err(_):
                ...  # miss
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    def _validate_key(self, key: str) -> CacheError | None:
        if len(key) > MAX_KEY_LENGTH:
            return CacheError(
                key=key, message=f"Key cannot be larger than {MAX_KEY_LENGTH} characters"
            )
        if not _VALID_KEY.match(key):
            return CacheError(key=key, message="Key contains invalid characters")
        return None

    def _entry_dir(self, key: str) -> Path:
        return self._root / key

    def has(self, key: str) -> bool:
        """Check if an entry exists for key."""
        return (self._entry_dir(key) / "entry.json").is_file()

    def restore(self, path: Path, key: str) -> Result[bool, CacheError]:
        """Restore the snapshot stored under ``key`` onto ``path``.

        Returns:
            Ok(True) on a hit, Ok(False) on a miss, Err on failure
        """
        invalid = self._validate_key(key)
        if invalid is not None:
            return Err(invalid)

        entry_dir = self._entry_dir(key)
        if not self.has(key):
            return Ok(False)

        try:
            json.loads((entry_dir / "entry.json").read_text(encoding="utf-8"))
            payload = entry_dir / "payload"
            if not payload.is_dir():
                return Err(CacheError(key=key, message="Cache entry has no payload"))
            path.mkdir(parents=True, exist_ok=True)
            shutil.copytree(payload, path, dirs_exist_ok=True)
        except json.JSONDecodeError as e:
            return Err(CacheError(key=key, message=f"Corrupted cache entry: {e}"))
        except OSError as e:
            return Err(CacheError(key=key, message=f"Failed to restore cache: {e}"))

        return Ok(True)

    def save(self, path: Path, key: str) -> Result[None, CacheError]:
        """Snapshot ``path`` under ``key``.

        The payload is staged in a temporary directory inside the cache
        root and renamed into place, so a crash never leaves a partial
        entry behind.
        """
        invalid = self._validate_key(key)
        if invalid is not None:
            return Err(invalid)

        if not path.is_dir():
            return Err(CacheError(key=key, message=f"Path does not exist: {path}"))

        if self.has(key):
            return Err(
                CacheError(
                    key=key,
                    message="Unable to reserve cache, another job may be creating this cache",
                )
            )

        staging: Path | None = None
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            staging = Path(tempfile.mkdtemp(prefix=f".{key}.", dir=str(self._root)))
            shutil.copytree(path, staging / "payload")
            entry = CacheEntry.now(key, path)
            atomic_write_text(staging / "entry.json", json.dumps(asdict(entry), indent=2))
            staging.rename(self._entry_dir(key))
            staging = None
        except OSError as e:
            return Err(CacheError(key=key, message=f"Failed to save cache: {e}"))
        finally:
            if staging is not None:
                shutil.rmtree(staging, ignore_errors=True)

        return Ok(None)
