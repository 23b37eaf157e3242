"""Analytics sink: the Amplitude HTTP API behind a fire-and-forget interface."""

from __future__ import annotations

import queue
import re
import threading
import time
import uuid
from pathlib import PurePosixPath
from typing import Any, Dict, List, Mapping, Optional, Protocol
from urllib.parse import urlparse

import requests
from loguru import logger
from PySide6.QtCore import QObject

from ..config.schemas import TrackingOptions
from .page import ClickEvent, Page, SubmitEvent, element_text, is_link

AMPLITUDE_ENDPOINT = "https://api2.amplitude.com/2/httpapi"
SESSION_START = "session_start"
PAGE_VIEWED = "[Amplitude] Page Viewed"
FILE_DOWNLOADED = "[Amplitude] File Downloaded"
FORM_SUBMITTED = "[Amplitude] Form Submitted"

DOWNLOAD_EXTENSION_RE = re.compile(
    r"\.(pdf|xlsx?|docx?|txt|rtf|csv|exe|key|pp[st]x?|7z|pkg|rar|gz|zip|avi|mov|mp4|mpe?g|wmv|midi?|mp3|wav|wma)$",
    re.IGNORECASE,
)

_STOP = object()


class EventTracker(Protocol):
    def initialize(self, api_key: Optional[str], options: Optional[TrackingOptions] = None) -> None:
        ...

    def track(self, event_name: str, properties: Optional[Mapping[str, Any]] = None) -> None:
        ...


class AmplitudeTracker:
    """Queue events and ship them to Amplitude from a background thread.

    ``track`` never blocks on the network and never raises. Delivery is best
    effort: failed batches are logged and dropped.
    """

    def __init__(
        self,
        endpoint: str = AMPLITUDE_ENDPOINT,
        device_id: Optional[str] = None,
        batch_size: int = 10,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._endpoint = endpoint
        self._device_id = device_id or str(uuid.uuid4())
        self._batch_size = batch_size
        self._timeout = timeout_seconds
        self._api_key: Optional[str] = None
        self._options = TrackingOptions()
        self._session_id: Optional[int] = None
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._worker: Optional[threading.Thread] = None

    @property
    def enabled(self) -> bool:
        return self._api_key is not None

    @property
    def options(self) -> TrackingOptions:
        return self._options

    @property
    def session_id(self) -> Optional[int]:
        return self._session_id

    def initialize(self, api_key: Optional[str], options: Optional[TrackingOptions] = None) -> None:
        self._options = options or TrackingOptions()
        if not api_key:
            logger.info("No analytics key configured, events will not be sent")
            return

        self._api_key = api_key
        if self._worker is None:
            self._worker = threading.Thread(target=self._run, name="AmplitudeTracker", daemon=True)
            self._worker.start()

        if self._options.sessions:
            self._session_id = int(time.time() * 1000)
            self.track(SESSION_START)

    def track(self, event_name: str, properties: Optional[Mapping[str, Any]] = None) -> None:
        if not self.enabled:
            logger.debug("Analytics disabled, skipping {}", event_name)
            return

        event: Dict[str, Any] = {
            "event_type": event_name,
            "device_id": self._device_id,
            "time": int(time.time() * 1000),
            "insert_id": str(uuid.uuid4()),
            "event_properties": dict(properties or {}),
        }
        if self._session_id is not None:
            event["session_id"] = self._session_id
        self._queue.put(event)

    def flush(self) -> None:
        """Block until every queued event has been handed to the API."""
        if self._worker is not None:
            self._queue.join()

    def shutdown(self) -> None:
        if self._worker is None:
            return
        self._queue.put(_STOP)
        self._worker.join()
        self._worker = None

    # ------------------------------------------------------------------
    # Worker thread
    # ------------------------------------------------------------------
    def _run(self) -> None:
        stopping = False
        while not stopping:
            item = self._queue.get()
            if item is _STOP:
                self._queue.task_done()
                break

            batch = [item]
            while len(batch) < self._batch_size:
                try:
                    item = self._queue.get_nowait()
                except queue.Empty:
                    break
                if item is _STOP:
                    self._queue.task_done()
                    stopping = True
                    break
                batch.append(item)

            self._send(batch)
            for _ in batch:
                self._queue.task_done()

    def _send(self, events: List[Dict[str, Any]]) -> None:
        try:
            response = requests.post(
                self._endpoint,
                json={"api_key": self._api_key, "events": events},
                timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Dropping {} analytics events: {}", len(events), exc)
            return
        logger.debug("Sent {} analytics events", len(events))


class DefaultTracking(QObject):
    """Automatic page view, file download and form submission events."""

    def __init__(self, page: Page, tracker: EventTracker, options: TrackingOptions) -> None:
        super().__init__(page)
        self._page = page
        self._tracker = tracker
        self._options = options

    def attach(self) -> None:
        if self._options.page_views:
            self._tracker.track(PAGE_VIEWED, {"page_url": self._page.url, "page_title": self._page.title})
        if self._options.file_downloads:
            self._page.clicked.connect(self._on_click)
        if self._options.form_interactions:
            self._page.submitted.connect(self._on_submit)

    def _on_click(self, event: ClickEvent) -> None:
        target = event.target
        if not is_link(target):
            return
        url = event.page.resolve_href(target)
        path = PurePosixPath(urlparse(url).path)
        match = DOWNLOAD_EXTENSION_RE.search(path.name)
        if match is None:
            return
        self._tracker.track(
            FILE_DOWNLOADED,
            {
                "file_extension": match.group(1).lower(),
                "file_name": path.name,
                "link_text": element_text(target),
                "link_url": url,
            },
        )

    def _on_submit(self, event: SubmitEvent) -> None:
        form = event.form
        self._tracker.track(
            FORM_SUBMITTED,
            {
                "form_id": form.get("id", ""),
                "form_name": form.get("name", ""),
                "form_destination": event.page.resolve_href(form, "action"),
            },
        )
