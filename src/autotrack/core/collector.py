"""Discovery of clickable label text on a page."""

from __future__ import annotations

from typing import Set

from .page import Page, element_text


class TextCollector:
    """Collect distinct, non-empty label text of buttons and links."""

    def collect(self, page: Page) -> Set[str]:
        texts: Set[str] = set()
        for element in page.clickable_elements():
            text = element_text(element)
            if text:
                texts.add(text)
        return texts
