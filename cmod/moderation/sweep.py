"""Reconciliation sweep over the whole content corpus.

Walks ``contentItems`` page by page and runs every item through the same
decision path as the reactive trigger.  Items below the warn threshold are
left untouched.  An item that fails (a store error or a malformed
document) is counted and the sweep moves on.
Running the sweep twice on an unchanged corpus applies nothing the second
time: deleted items are gone, and warnings are not repeated for an
unchanged report count.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator

from cmod.errors import CModError
from cmod.moderation.models import SweepResult
from cmod.moderation.pipeline import Evaluation, ModerationPipeline
from cmod.store import paths
from cmod.store.base import DocumentStore

log = logging.getLogger("cmod.sweep")


class ReconciliationSweep:
    """Paginated batch re-evaluation of all content items."""

    def __init__(
        self,
        store: DocumentStore,
        pipeline: ModerationPipeline,
        page_size: int = 100,
        workers: int = 1,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._store = store
        self._pipeline = pipeline
        self.page_size = page_size
        self.workers = max(1, workers)

    def iter_content_ids(self) -> Iterator[str]:
        """Yield every content id, one store page at a time."""
        start_after = None
        while True:
            page = self._store.list_page(paths.CONTENT_ITEMS, start_after, self.page_size)
            if not page:
                return
            for content_id, _ in page:
                yield content_id
            start_after = page[-1][0]

    def _process_one(self, content_id: str) -> Evaluation | None:
        try:
            return self._pipeline.process(content_id)
        except (CModError, ValueError, KeyError):
            log.exception("Sweep could not moderate %s", content_id)
            return None

    def run(self) -> SweepResult:
        result = SweepResult()
        log.info("Starting reconciliation sweep")

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            ids: list[str] = []
            for content_id in self.iter_content_ids():
                ids.append(content_id)
                if len(ids) >= self.page_size:
                    self._tally(result, pool.map(self._process_one, ids))
                    ids = []
            if ids:
                self._tally(result, pool.map(self._process_one, ids))

        log.info(
            "Sweep complete: %d deleted, %d warned, %d processed, %d failed",
            result.deleted_count,
            result.warned_count,
            result.processed_count,
            result.failed_count,
        )
        return result

    @staticmethod
    def _tally(result: SweepResult, evaluations) -> None:
        for evaluation in evaluations:
            result.processed_count += 1
            if evaluation is None:
                result.failed_count += 1
            elif evaluation.deleted:
                result.deleted_count += 1
            elif evaluation.warned:
                result.warned_count += 1
