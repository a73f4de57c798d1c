"""Durable local key/value storage backing the client-side wishlist cache.

The storefront keeps a copy of the shopper's wishlist on the local machine so
it survives restarts and is available before anyone signs in. Two storage
flavours implement the same tiny ``get_item``/``set_item``/``remove_item``
surface:

* :class:`MemoryLocalStorage` keeps values in a dictionary for the lifetime of
  the process (tests, ephemeral sessions).
* :class:`FileLocalStorage` persists every key inside a single JSON document
  on disk and rewrites it atomically on each mutation. Several processes (the
  API and the CLI) may share one file, so the document is re-read whenever it
  changed on disk since this instance last saw it.

Both are synchronous; local reads and writes never suspend the event loop.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

# (inode, size, mtime) of the document an instance last loaded or wrote.
_FileSignature = tuple[int, int, int]


@runtime_checkable
class LocalStorage(Protocol):
    """String key/value storage that outlives a single application run."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryLocalStorage:
    """Process-local storage used when no cache path is configured."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileLocalStorage:
    """Persist string values inside one JSON object on disk.

    Every read stats the file and reloads it when another writer replaced it.
    Every mutation starts from the current document, writes a temporary file
    and swaps it in with :func:`os.replace`; the in-memory copy only changes
    once that swap succeeded. A missing or unreadable file is treated as
    empty storage.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._items: dict[str, str] = {}
        self._signature: _FileSignature | None = None

    @property
    def path(self) -> Path:
        return self._path

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = dict(self._load())
        items[key] = value
        self._flush(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key not in items:
            return
        remaining = {name: value for name, value in items.items() if name != key}
        self._flush(remaining)

    def _stat(self) -> _FileSignature | None:
        try:
            stat = self._path.stat()
        except FileNotFoundError:
            return None
        return (stat.st_ino, stat.st_size, stat.st_mtime_ns)

    def _load(self) -> dict[str, str]:
        signature = self._stat()
        if signature is not None and signature == self._signature:
            return self._items

        self._signature = signature
        self._items = {}
        if signature is None:
            return self._items

        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not read local storage %s: %s", self._path, exc)
            return self._items

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt local storage file %s", self._path)
            return self._items

        if not isinstance(payload, dict):
            logger.warning("Ignoring local storage file %s with non-object root", self._path)
            return self._items

        self._items = {
            str(key): value for key, value in payload.items() if isinstance(value, str)
        }
        return self._items

    def _flush(self, items: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(items, handle, ensure_ascii=False, sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        self._items = items
        self._signature = self._stat()


def create_local_storage(path: str | os.PathLike[str] | None) -> LocalStorage:
    """Return file-backed storage for ``path`` or in-memory storage when unset."""

    if path is None or not str(path).strip():
        logger.info("No wishlist cache path configured; using in-memory local storage.")
        return MemoryLocalStorage()
    return FileLocalStorage(path)


__all__ = [
    "FileLocalStorage",
    "LocalStorage",
    "MemoryLocalStorage",
    "create_local_storage",
]
