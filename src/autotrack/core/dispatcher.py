"""Global click listener that names and forwards click events."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from loguru import logger
from PySide6.QtCore import QObject, Signal

from .cache import TranslationCache
from .page import ClickEvent, Page, element_classes, element_text, is_button, is_link
from .tracker import EventTracker

PropertyValue = Union[str, int, float]


@dataclass
class TrackedEvent:
    """A named click ready to hand to the tracker."""

    log_name: str
    display_name: str
    properties: Dict[str, PropertyValue] = field(default_factory=dict)


class ClickDispatcher(QObject):
    """Resolve event names from the cache and send them to the tracker.

    Lookups are point-in-time reads: a click that lands before its label is
    translated is tracked under the fallback name.
    """

    event_tracked = Signal(object)

    def __init__(self, page: Page, cache: TranslationCache, tracker: EventTracker) -> None:
        super().__init__(page)
        self._page = page
        self._cache = cache
        self._tracker = tracker
        self._attached = False

    @property
    def is_attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        if self._attached:
            return
        self._page.clicked.connect(self.handle_click)
        self._attached = True

    def handle_click(self, event: ClickEvent) -> Optional[TrackedEvent]:
        target = event.target
        if is_button(target):
            text = element_text(target)
            tracked = TrackedEvent(
                log_name=self._cache.get(text),
                display_name=text,
                properties={
                    "button_text": text,
                    "button_class": element_classes(target),
                    "element_id": target.get("id", ""),
                    "element_type": "button",
                    "text_length": len(text),
                },
            )
        elif is_link(target):
            text = element_text(target)
            tracked = TrackedEvent(
                log_name=self._cache.get(text),
                display_name=text,
                properties={
                    "link_text": text,
                    "link_href": event.page.resolve_href(target),
                    "element_id": target.get("id", ""),
                    "element_type": "link",
                    "text_length": len(text),
                },
            )
        else:
            return None

        self.track_event(tracked)
        return tracked

    def event_name_for(self, text: str) -> str:
        return self._cache.get(text)

    def log_text_event(self, text: str, properties: Optional[Dict[str, PropertyValue]] = None) -> TrackedEvent:
        """Track an arbitrary text under its cached event name."""
        tracked = TrackedEvent(
            log_name=self._cache.get(text),
            display_name=text,
            properties={**(properties or {}), "text": text},
        )
        self.track_event(tracked)
        return tracked

    def track_event(self, tracked: TrackedEvent) -> None:
        properties = {**tracked.properties, "event_display_name": str(tracked.display_name or "")}
        logger.debug("Tracking {} ({!r})", tracked.log_name, tracked.display_name)
        self._tracker.track(tracked.log_name, properties)
        self.event_tracked.emit(tracked)
