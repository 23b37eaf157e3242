"""Wiring of collector, translator, observer and dispatcher for one page session."""

from __future__ import annotations

from typing import Optional

from loguru import logger
from PySide6.QtCore import QObject

from ..config.schemas import AnalyticsConfig, AppConfig
from .cache import TranslationCache
from .collector import TextCollector
from .dispatcher import ClickDispatcher
from .llm_client import ChatCompletionClient, CompletionBackend
from .observer import DomObserver
from .page import Page
from .tracker import AmplitudeTracker, DefaultTracking, EventTracker
from .translator import BatchTranslator


class AutoTracking(QObject):
    """Automatic event naming and click tracking for a page."""

    def __init__(
        self,
        page: Page,
        tracker: EventTracker,
        backend: Optional[CompletionBackend] = None,
        analytics: Optional[AnalyticsConfig] = None,
        cache: Optional[TranslationCache] = None,
        dedupe_in_flight: bool = False,
    ) -> None:
        super().__init__(page)
        self._page = page
        self._tracker = tracker
        self._analytics = analytics or AnalyticsConfig()
        self._cache = cache if cache is not None else TranslationCache()
        self._collector = TextCollector()
        self._translator = BatchTranslator(self._cache, backend, dedupe_in_flight=dedupe_in_flight, parent=self)
        self._observer = DomObserver(page, self._collector, self._translator)
        self._dispatcher = ClickDispatcher(page, self._cache, tracker)
        self._default_tracking = DefaultTracking(page, tracker, self._analytics.tracking)
        self._started = False

    @classmethod
    def from_config(cls, page: Page, config: AppConfig, tracker: Optional[EventTracker] = None) -> "AutoTracking":
        backend = ChatCompletionClient(config.api) if config.api.api_key else None
        if backend is None:
            logger.info("No language-model key configured, labels keep the fallback event name")
        if tracker is None:
            tracker = AmplitudeTracker(endpoint=config.analytics.endpoint)
        return cls(
            page,
            tracker,
            backend=backend,
            analytics=config.analytics,
            cache=TranslationCache(fallback=config.naming.fallback_event_name),
            dedupe_in_flight=config.naming.dedupe_in_flight,
        )

    def start(self) -> None:
        if self._started:
            return
        self._started = True

        self._tracker.initialize(self._analytics.api_key, self._analytics.tracking)
        self._default_tracking.attach()

        texts = self._collector.collect(self._page)
        logger.info("Found {} clickable labels on {}", len(texts), self._page.url or "page")
        self._translator.translate(texts)

        self._observer.observe()
        self._dispatcher.attach()

    @property
    def page(self) -> Page:
        return self._page

    @property
    def cache(self) -> TranslationCache:
        return self._cache

    @property
    def translator(self) -> BatchTranslator:
        return self._translator

    @property
    def observer(self) -> DomObserver:
        return self._observer

    @property
    def dispatcher(self) -> ClickDispatcher:
        return self._dispatcher

    @property
    def tracker(self) -> EventTracker:
        return self._tracker
