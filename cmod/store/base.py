"""Abstract document store.

The pipeline needs four primitives from its backing store: point reads,
point writes, an all-or-nothing multi-document delete and an ordered query
with a limit.  Documents are addressed by slash-joined paths such as
``contentItems/{id}/reports/{report_id}``; a document's collection is its
path without the last segment.

Backends implement ``_load`` and ``_commit``; every mutation stages a copy
of the document map and commits it in one step, so a failure while staging
leaves the store untouched.  Backends shared between processes extend
``_exclusive`` so the load-check-commit sequence holds across them.
"""

from __future__ import annotations

import copy
import threading
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

from cmod.errors import NotFoundError, PersistenceError
from cmod.store.paths import parent_collection

Document = dict[str, Any]


class DocumentStore(ABC):
    """Path-addressed document store with atomic batch deletes."""

    def __init__(self) -> None:
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _load(self) -> dict[str, Document]:
        """Return the current document map. Callers must not mutate it."""

    @abstractmethod
    def _commit(self, docs: dict[str, Document]) -> None:
        """Replace the whole document map in a single step."""

    def _delete_one(self, staged: dict[str, Document], path: str) -> None:
        staged.pop(path, None)

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        """Held around every load-check-commit sequence."""
        with self._lock:
            yield

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def new_id(self) -> str:
        return uuid.uuid4().hex[:16]

    def get(self, path: str) -> Optional[Document]:
        with self._lock:
            doc = self._load().get(path)
            return copy.deepcopy(doc) if doc is not None else None

    def exists(self, path: str) -> bool:
        with self._lock:
            return path in self._load()

    def list(self, collection: str) -> list[tuple[str, Document]]:
        """Return ``(id, document)`` pairs directly inside *collection*, by id."""
        with self._lock:
            docs = self._load()
            items = [
                (path.rsplit("/", 1)[1], copy.deepcopy(doc))
                for path, doc in docs.items()
                if parent_collection(path) == collection
            ]
        items.sort(key=lambda item: item[0])
        return items

    def list_page(
        self,
        collection: str,
        start_after: Optional[str] = None,
        page_size: int = 100,
    ) -> list[tuple[str, Document]]:
        """Return up to *page_size* documents with ids greater than *start_after*."""
        items = self.list(collection)
        if start_after is not None:
            items = [item for item in items if item[0] > start_after]
        return items[:page_size]

    def query(
        self,
        collection: str,
        order_by: str,
        *,
        descending: bool = False,
        limit: Optional[int] = None,
        where: Optional[dict[str, Any]] = None,
    ) -> list[tuple[str, Document]]:
        """Return documents of *collection* ordered by a field.

        *where* holds equality filters on top-level fields.
        """
        items = self.list(collection)
        if where:
            items = [
                item for item in items
                if all(item[1].get(k) == v for k, v in where.items())
            ]
        items.sort(key=lambda item: str(item[1].get(order_by, "")), reverse=descending)
        if limit is not None:
            items = items[:limit]
        return items

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set(self, path: str, data: Document, *, require_exists: Optional[str] = None) -> None:
        """Write a document.

        When *require_exists* names another document, the write only happens
        if that document is present; otherwise ``NotFoundError`` is raised.
        """
        with self._exclusive():
            docs = self._load()
            if require_exists is not None and require_exists not in docs:
                raise NotFoundError(f"{require_exists} does not exist")
            staged = dict(docs)
            staged[path] = copy.deepcopy(data)
            self._safe_commit(staged)

    def batch_delete(self, paths: Iterable[str], *, cascade: Iterable[str] = ()) -> int:
        """Delete *paths* and their *cascade* subcollections all-or-nothing.

        The first path is the anchor: if it is already gone the call raises
        ``NotFoundError`` and deletes nothing.  Returns the number of
        documents removed.
        """
        paths = list(paths)
        if not paths:
            return 0
        cascade = tuple(cascade)
        with self._exclusive():
            docs = self._load()
            anchor = paths[0]
            if anchor not in docs:
                raise NotFoundError(f"{anchor} does not exist")

            targets: list[str] = []
            for path in paths:
                if path in docs:
                    targets.append(path)
                for sub in cascade:
                    prefix = f"{path}/{sub}/"
                    targets.extend(p for p in docs if p.startswith(prefix))

            staged = dict(docs)
            try:
                for path in targets:
                    self._delete_one(staged, path)
            except Exception as exc:
                raise PersistenceError(f"Batch delete of {anchor} failed: {exc}") from exc
            self._safe_commit(staged)
            return len(set(targets))

    def _safe_commit(self, staged: dict[str, Document]) -> None:
        try:
            self._commit(staged)
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError(f"Commit failed: {exc}") from exc
