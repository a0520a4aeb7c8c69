"""File-based JSON document store.

All documents live in a single ``documents.json`` under the store
directory (default ``~/.cmod/store/``).  The file is read on every load,
so several processes (the CLI and the API server) can share one store
directory.  Mutations hold an exclusive ``flock`` on ``documents.lock``
from the load through the commit, and commits write a temporary file and
``os.replace`` it over the previous one, so a failed write leaves the last
committed state on disk.
"""

from __future__ import annotations

import fcntl
import json
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from cmod.errors import PersistenceError
from cmod.store.base import Document, DocumentStore


class JsonFileStore(DocumentStore):
    """Single-file JSON store for development and single-host deployments."""

    DOCUMENTS_FILE = "documents.json"
    LOCK_FILE = "documents.lock"

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        super().__init__()
        self._base = Path(base_dir) if base_dir else Path.home() / ".cmod" / "store"
        self._base.mkdir(parents=True, exist_ok=True)
        self._path = self._base / self.DOCUMENTS_FILE
        self._lock_path = self._base / self.LOCK_FILE

    @property
    def path(self) -> Path:
        return self._path

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        with super()._exclusive():
            with open(self._lock_path, "a") as handle:
                fcntl.flock(handle, fcntl.LOCK_EX)
                try:
                    yield
                finally:
                    fcntl.flock(handle, fcntl.LOCK_UN)

    def _load(self) -> dict[str, Document]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            raise PersistenceError(f"Cannot read {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise PersistenceError(f"{self._path} does not contain a document map")
        return data

    def _commit(self, docs: dict[str, Document]) -> None:
        tmp = self._path.with_suffix(f".json.{os.getpid()}.tmp")
        try:
            tmp.write_text(json.dumps(docs, indent=2, default=str), encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError as exc:
            raise PersistenceError(f"Cannot write {self._path}: {exc}") from exc
