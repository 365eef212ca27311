"""Draft persistence for in-progress exam forms.

``DraftStore`` keeps one JSON file per draft key under a directory.
``AutoSaver`` debounces writes: each ``schedule`` call replaces the pending
save, and only the last value is written once the delay has passed without
another change.

There is a single writer per key; no file locking is attempted.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any

from mockexam_lifecycle.constants import DRAFT_AUTOSAVE_DELAY

logger = logging.getLogger(__name__)

DEFAULT_DRAFT_KEY = "mockExamDraft"

_SAFE_KEY = re.compile(r"[A-Za-z0-9_.-]+")


class DraftStore:
    """JSON-file-backed draft storage."""

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.fullmatch(key):
            raise ValueError(f"Invalid draft key: {key!r}")
        return self._dir / f"{key}.json"

    def save(self, key: str, data: dict[str, Any]) -> Path:
        """Write *data* for *key*, replacing any earlier draft."""
        path = self._path(key)
        self._dir.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(data, default=str, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)
        logger.debug("Draft saved: %s", path)
        return path

    def load(self, key: str) -> dict[str, Any] | None:
        """Return the saved draft, or None if there is none or it is unreadable."""
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Discarding corrupt draft %s", path)
            return None

    def clear(self, key: str) -> bool:
        """Delete the draft; returns True if one existed."""
        path = self._path(key)
        if path.exists():
            path.unlink()
            logger.debug("Draft cleared: %s", path)
            return True
        return False


class AutoSaver:
    """Debounced saver bound to one draft key.

    Must be used from inside a running event loop.
    """

    def __init__(
        self,
        store: DraftStore,
        key: str = DEFAULT_DRAFT_KEY,
        delay: float = DRAFT_AUTOSAVE_DELAY,
    ) -> None:
        self._store = store
        self._key = key
        self._delay = delay
        self._pending: asyncio.Task | None = None
        self._latest: dict[str, Any] | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def schedule(self, data: dict[str, Any]) -> None:
        """Queue *data* to be saved after the debounce delay."""
        self._latest = data
        if self.pending:
            self._pending.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._save_later())

    async def _save_later(self) -> None:
        await asyncio.sleep(self._delay)
        try:
            self._write()
        except OSError:
            # The value stays pending so a later flush can retry it.
            logger.exception("Auto-save of draft %r failed", self._key)

    def _write(self) -> None:
        if self._latest is not None:
            self._store.save(self._key, self._latest)
            self._latest = None

    async def flush(self) -> None:
        """Write the pending value now instead of waiting for the delay."""
        if self.pending:
            self._pending.cancel()
        self._pending = None
        self._write()

    def cancel(self) -> None:
        """Drop the pending save without writing it."""
        if self.pending:
            self._pending.cancel()
        self._pending = None
        self._latest = None
