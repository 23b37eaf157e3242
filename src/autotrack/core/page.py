"""BeautifulSoup-backed page model with mutation and click notifications."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag
from PySide6.QtCore import QObject, Signal

BUTTON_SELECTOR = "button, [role=button]"
LINK_SELECTOR = "a"
CLICKABLE_SELECTOR = f"{BUTTON_SELECTOR}, {LINK_SELECTOR}"


@dataclass
class MutationRecord:
    """A structural change under the page body."""

    target: Tag
    added: List[Tag] = field(default_factory=list)
    removed: List[Tag] = field(default_factory=list)
    type: str = "childList"


@dataclass
class ClickEvent:
    """A click delivered to a single target element."""

    target: Tag
    page: "Page"


@dataclass
class SubmitEvent:
    """A form submission."""

    form: Tag
    page: "Page"


def is_button(element: Tag) -> bool:
    """Anchors stay links even with a button role."""
    if element.name == "a":
        return False
    return element.name == "button" or element.get("role") == "button"


def is_link(element: Tag) -> bool:
    return element.name == "a"


def element_text(element: Tag) -> str:
    """Return the trimmed text content of an element."""
    return element.get_text().strip()


def element_classes(element: Tag) -> str:
    classes = element.get("class") or []
    if isinstance(classes, str):
        return classes
    return " ".join(classes)


class Page(QObject):
    """Document wrapper through which every mutation and click flows.

    Mutations are delivered on ``mutated`` as a list of :class:`MutationRecord`.
    Inside :meth:`batch`, records are collected and delivered once on exit.
    """

    mutated = Signal(object)
    clicked = Signal(object)
    submitted = Signal(object)

    def __init__(self, html: str = "", url: str = "", parser: str = "html.parser") -> None:
        super().__init__()
        self._url = url
        self._parser = parser
        self._soup = BeautifulSoup(html, parser)
        if self._soup.body is None:
            self._soup = BeautifulSoup(f"<html><body>{html}</body></html>", parser)
        self._pending: Optional[List[MutationRecord]] = None

    @classmethod
    def from_file(cls, path: Union[str, Path], url: str = "") -> "Page":
        path = Path(path)
        return cls(path.read_text(encoding="utf-8"), url=url or path.resolve().as_uri())

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def url(self) -> str:
        return self._url

    @property
    def title(self) -> str:
        if self._soup.title is None:
            return ""
        return self._soup.title.get_text().strip()

    @property
    def body(self) -> Tag:
        return self._soup.body

    def select(self, selector: str) -> List[Tag]:
        return self._soup.select(selector)

    def select_one(self, selector: str) -> Optional[Tag]:
        return self._soup.select_one(selector)

    def clickable_elements(self) -> List[Tag]:
        """Return every button-role and anchor element currently attached."""
        return self._soup.select(CLICKABLE_SELECTOR)

    def resolve_href(self, element: Tag, attribute: str = "href") -> str:
        href = element.get(attribute)
        if not href:
            return ""
        return urljoin(self._url, href)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def append_html(self, html: str, parent: Optional[Tag] = None) -> List[Tag]:
        """Parse ``html`` and append the resulting elements to ``parent`` (default body)."""
        parent = parent if parent is not None else self.body
        fragment = BeautifulSoup(html, self._parser)
        nodes = list(fragment.contents)
        added = []
        for node in nodes:
            parent.append(node.extract())
            if isinstance(node, Tag):
                added.append(node)
        self._record(MutationRecord(target=parent, added=added))
        return added

    def remove(self, element: Tag) -> None:
        parent = element.parent
        element.extract()
        self._record(MutationRecord(target=parent, removed=[element]))

    def set_text(self, element: Tag, text: str) -> None:
        """Replace the children of ``element`` with a single text node."""
        removed = [child for child in element.contents if isinstance(child, Tag)]
        element.clear()
        element.append(text)
        self._record(MutationRecord(target=element, removed=removed))

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Group mutations made inside the block into one ``mutated`` delivery."""
        if self._pending is not None:
            yield
            return
        self._pending = []
        try:
            yield
        finally:
            records, self._pending = self._pending, None
            if records:
                self.mutated.emit(records)

    def _record(self, record: MutationRecord) -> None:
        if self._pending is not None:
            self._pending.append(record)
        else:
            self.mutated.emit([record])

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def click(self, element: Tag) -> ClickEvent:
        event = ClickEvent(target=element, page=self)
        self.clicked.emit(event)
        return event

    def submit(self, form: Tag) -> SubmitEvent:
        event = SubmitEvent(form=form, page=self)
        self.submitted.emit(event)
        return event
