"""Session-scoped mapping from label text to analytics event name."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Set

FALLBACK_EVENT_NAME = "button_clicked"


class TranslationCache:
    """Store generated event names so click handling can read them synchronously.

    The cache has no eviction and no lock: it is only written from the main
    thread, and its size is bounded by the distinct labels of a page.
    """

    def __init__(self, fallback: str = FALLBACK_EVENT_NAME) -> None:
        self._fallback = fallback
        self._entries: Dict[str, str] = {}

    @property
    def fallback(self) -> str:
        return self._fallback

    def get(self, text: str) -> str:
        if not text or not text.strip():
            return self._fallback
        return self._entries.get(text.strip(), self._fallback)

    def put(self, text: str, event_name: str) -> None:
        self._entries[text] = event_name

    def update(self, translations: Mapping[str, str]) -> None:
        self._entries.update(translations)

    def missing(self, texts: Iterable[str]) -> Set[str]:
        """Return the texts that have no entry yet."""
        return {text for text in texts if text not in self._entries}

    def snapshot(self) -> Dict[str, str]:
        return dict(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, text: object) -> bool:
        return text in self._entries

    def __len__(self) -> int:
        return len(self._entries)
