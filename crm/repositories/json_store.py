"""
JSON-file persistence adapter.

Each collection lives in ``<root>/<name>.json`` as a single JSON document (an
array for users/properties/roles, an object for settings). Writers to the same
collection are serialized by a per-name lock and every save goes through a
temporary file that is atomically renamed over the target, so readers never
observe a half-written document. Nothing here protects against a second
process writing the same directory.
"""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SUFFIX = ".json"


class StoreError(Exception):
    """Base class for Record Store failures."""

    def __init__(self, name: str, message: str):
        super().__init__(f"{name}: {message}")
        self.name = name
        self.message = message


class CollectionNotFoundError(StoreError):
    """The collection file does not exist (or the name points outside the root)."""


class CorruptDataError(StoreError):
    """The collection file is not valid JSON or not the expected document shape."""


class EncodeError(StoreError):
    """The value handed to save() cannot be serialized as JSON."""


class StoreIOError(StoreError):
    """Reading or writing the collection file failed at the filesystem level."""


def _expect_list(name: str, value: Any) -> list:
    if not isinstance(value, list):
        logger.error("Collection %s holds a %s, expected a JSON array", name, type(value).__name__)
        raise CorruptDataError(name, "expected a JSON array")
    return value


class JsonStore:
    """load/save access to named JSON collections under a fixed root directory."""

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root = Path(root).resolve()
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    # -------------------------------------- paths --------------------------------------
    def _file_name(self, name: str) -> str:
        raw = (name or "").strip()
        if not raw or raw in {".", ".."}:
            raise CollectionNotFoundError(raw, "invalid collection name")
        if "/" in raw or "\\" in raw or "\x00" in raw or os.path.isabs(raw):
            raise CollectionNotFoundError(raw, "collection names cannot contain path segments")
        return raw if raw.endswith(_SUFFIX) else f"{raw}{_SUFFIX}"

    def path_for(self, name: str) -> Path:
        path = (self.root / self._file_name(name)).resolve()
        if path.parent != self.root:
            raise CollectionNotFoundError(name, "collection resolves outside the data root")
        return path

    def _lock_for(self, name: str) -> threading.RLock:
        key = self._file_name(name)
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock

    # -------------------------------------- reads --------------------------------------
    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def load(self, name: str) -> Any:
        """Return the parsed document; an empty file reads as ``[]``."""
        path = self.path_for(name)
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise CollectionNotFoundError(name, "collection file does not exist") from None
        except IsADirectoryError:
            raise CollectionNotFoundError(name, "collection path is a directory") from None
        except OSError as exc:
            raise StoreIOError(name, f"read failed: {exc.strerror or exc}") from exc
        if not content.strip():
            return []
        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            logger.error("Collection %s is not valid JSON (line %s col %s)", name, exc.lineno, exc.colno)
            raise CorruptDataError(name, f"invalid JSON at line {exc.lineno} column {exc.colno}") from exc

    def load_list(self, name: str) -> list:
        """load() for array collections; any other document shape is corrupt."""
        return _expect_list(name, self.load(name))

    # -------------------------------------- writes --------------------------------------
    def save(self, name: str, value: Any) -> None:
        """Replace the whole collection with ``value``."""
        path = self.path_for(name)
        try:
            payload = json.dumps(value, indent=2, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise EncodeError(name, str(exc)) from exc
        with self._lock_for(name):
            self._write_atomic(name, path, payload)

    def _write_atomic(self, name: str, path: Path, payload: str) -> None:
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=self.root)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            # mkstemp creates 0600; keep the permissions of the file being replaced
            if path.exists():
                os.chmod(tmp_name, stat.S_IMODE(path.stat().st_mode))
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            logger.error("Write to collection %s failed: %s", name, exc)
            raise StoreIOError(name, f"write failed: {exc.strerror or exc}") from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.warning("Could not remove temporary file %s", tmp_name)

    def update(self, name: str, mutator: Callable[[Any], T]) -> T:
        """
        Load, mutate in place and save ``name`` while holding its lock.

        ``mutator`` receives the loaded document and returns any result for the
        caller. If it raises, the collection is left untouched.
        """
        with self._lock_for(name):
            value = self.load(name)
            result = mutator(value)
            self.save(name, value)
            return result

    def update_list(self, name: str, mutator: Callable[[list], T]) -> T:
        """update() for array collections. A non-array document is never handed to ``mutator``."""
        return self.update(name, lambda value: mutator(_expect_list(name, value)))

    def ensure(self, name: str, default: Any) -> bool:
        """Create ``name`` with ``default`` if missing. Returns True when created."""
        with self._lock_for(name):
            if self.exists(name):
                return False
            self.save(name, default)
            return True
