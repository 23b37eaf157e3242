"""Re-run label discovery and translation when the page structure changes."""

from __future__ import annotations

from typing import List

from loguru import logger
from PySide6.QtCore import QObject

from .collector import TextCollector
from .page import MutationRecord, Page
from .translator import BatchTranslator


class DomObserver(QObject):
    """Rescan the whole page after every batch of structural mutations.

    Each callback walks the full document again; the translator filters out
    labels it already knows, so rescans only cost a backend call when new
    text appeared.
    """

    def __init__(self, page: Page, collector: TextCollector, translator: BatchTranslator) -> None:
        super().__init__(page)
        self._page = page
        self._collector = collector
        self._translator = translator
        self._observing = False

    @property
    def is_observing(self) -> bool:
        return self._observing

    def observe(self) -> None:
        if self._observing:
            return
        self._page.mutated.connect(self._on_mutations)
        self._observing = True

    def stop(self) -> None:
        if not self._observing:
            return
        self._page.mutated.disconnect(self._on_mutations)
        self._observing = False

    def _on_mutations(self, records: List[MutationRecord]) -> None:
        if not any(record.type == "childList" for record in records):
            return
        texts = self._collector.collect(self._page)
        logger.debug("{} mutations, rescanned {} labels", len(records), len(texts))
        self._translator.translate(texts)
