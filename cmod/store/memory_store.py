"""In-memory document store, used by tests and short-lived processes."""

from __future__ import annotations

from typing import Optional

from cmod.store.base import Document, DocumentStore


class MemoryStore(DocumentStore):
    """Dict-backed store. Commits swap the whole map under the store lock."""

    def __init__(self, initial: Optional[dict[str, Document]] = None) -> None:
        super().__init__()
        self._docs: dict[str, Document] = dict(initial or {})

    def _load(self) -> dict[str, Document]:
        return self._docs

    def _commit(self, docs: dict[str, Document]) -> None:
        self._docs = docs

    def __len__(self) -> int:
        return len(self._docs)
