"""Batch translation of label text into analytics event names."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Optional, Set, Tuple

from loguru import logger
from PySide6.QtCore import QObject, Qt, Signal, Slot

from .cache import TranslationCache
from .llm_client import CompletionBackend

SYSTEM_PROMPT = """You are a helpful assistant that converts button/link text into snake_case event names for analytics.
Rules:
- Convert Korean or any language to English
- Use lowercase snake_case format
- Keep it concise (max 3-4 words)
- Add "_clicked" suffix for buttons
- Be consistent and semantic
- Return ONLY a JSON object mapping each input text verbatim to its event name

Example output format:
{
  "회원가입": "signup_clicked",
  "저장하기": "save_clicked",
  "상품 목록": "product_list_clicked"
}"""


class TranslationStatus(str, Enum):
    SKIPPED_EMPTY = "skipped_empty"
    SKIPPED_CACHED = "skipped_cached"
    DISABLED = "disabled"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class TranslationOutcome:
    """Result of one translation pass."""

    status: TranslationStatus
    requested: FrozenSet[str] = frozenset()
    translations: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is TranslationStatus.SUCCEEDED

    @property
    def unresolved(self) -> Set[str]:
        """Requested texts the backend did not name."""
        return set(self.requested) - set(self.translations)


def build_user_prompt(texts: Iterable[str]) -> str:
    payload = json.dumps(sorted(texts), ensure_ascii=False)
    return f"Convert these texts to event names and return as JSON:\n{payload}"


def parse_translations(content: str) -> Dict[str, str]:
    """Parse a completion body into a text -> event name mapping.

    Raises:
        ValueError: If the body is not a JSON object.
    """
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")

    translations = {}
    for text, event_name in data.items():
        if not isinstance(event_name, str) or not event_name.strip():
            logger.debug("Ignoring non-string event name for {!r}: {!r}", text, event_name)
            continue
        translations[text] = event_name.strip()
    return translations


class BatchTranslator(QObject):
    """Name every uncached label with a single backend request per batch.

    ``translate`` runs the request on a worker thread and merges the result
    into the cache on the thread that owns this object. ``translate_now``
    runs the same pass synchronously.
    """

    translation_finished = Signal(object)
    _request_completed = Signal(object)

    def __init__(
        self,
        cache: TranslationCache,
        backend: Optional[CompletionBackend] = None,
        dedupe_in_flight: bool = False,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._cache = cache
        self._backend = backend
        self._dedupe_in_flight = dedupe_in_flight
        self._in_flight: Set[str] = set()
        self._pending_requests = 0
        self._request_completed.connect(self._on_request_completed, Qt.ConnectionType.QueuedConnection)

    @property
    def enabled(self) -> bool:
        return self._backend is not None

    @property
    def pending_requests(self) -> int:
        return self._pending_requests

    def translate(self, texts: Iterable[str]) -> bool:
        """Start a background request for uncached texts.

        Returns:
            True when a backend request was started.
        """
        skipped, uncached = self._prepare(texts)
        if skipped is not None:
            return False

        self._begin(uncached)
        worker = threading.Thread(
            target=self._run_request,
            args=(uncached,),
            name="BatchTranslator",
            daemon=True,
        )
        worker.start()
        return True

    def translate_now(self, texts: Iterable[str]) -> TranslationOutcome:
        skipped, uncached = self._prepare(texts)
        if skipped is not None:
            return skipped

        self._begin(uncached)
        outcome = self._request(uncached)
        self._complete(outcome)
        return outcome

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _prepare(self, texts: Iterable[str]) -> Tuple[Optional[TranslationOutcome], FrozenSet[str]]:
        texts = set(texts)
        if not texts:
            return TranslationOutcome(TranslationStatus.SKIPPED_EMPTY), frozenset()

        uncached = self._cache.missing(texts)
        if self._dedupe_in_flight:
            uncached -= self._in_flight
        if not uncached:
            return TranslationOutcome(TranslationStatus.SKIPPED_CACHED), frozenset()

        if self._backend is None:
            logger.debug("Translation disabled, {} texts stay on fallback", len(uncached))
            return TranslationOutcome(TranslationStatus.DISABLED, requested=frozenset(uncached)), frozenset()

        return None, frozenset(uncached)

    def _begin(self, uncached: FrozenSet[str]) -> None:
        self._in_flight |= uncached
        self._pending_requests += 1
        logger.info("Requesting event names for {} texts", len(uncached))

    def _run_request(self, uncached: FrozenSet[str]) -> None:
        self._request_completed.emit(self._request(uncached))

    def _request(self, uncached: FrozenSet[str]) -> TranslationOutcome:
        try:
            content = self._backend.complete(SYSTEM_PROMPT, build_user_prompt(uncached))
            translations = parse_translations(content)
        except Exception as exc:
            logger.warning("Event name translation failed: {}", exc)
            return TranslationOutcome(TranslationStatus.FAILED, requested=uncached, error=str(exc))
        return TranslationOutcome(TranslationStatus.SUCCEEDED, requested=uncached, translations=translations)

    @Slot(object)
    def _on_request_completed(self, outcome: TranslationOutcome) -> None:
        self._complete(outcome)

    def _complete(self, outcome: TranslationOutcome) -> None:
        self._in_flight -= outcome.requested
        self._pending_requests -= 1

        if outcome.ok:
            self._cache.update(outcome.translations)
            logger.info("Cached {} event names", len(outcome.translations))
            if outcome.unresolved:
                logger.debug("Backend left {} texts unnamed", len(outcome.unresolved))

        self.translation_finished.emit(outcome)
