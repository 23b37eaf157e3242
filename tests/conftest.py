"""Pytest fixtures for the Qt event loop and fake collaborators."""

from __future__ import annotations

import os
import threading
from typing import Any, Dict, List, Mapping, Optional, Tuple

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtWidgets import QApplication


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


class FakeBackend:
    """Completion backend returning canned bodies and recording prompts."""

    def __init__(self, responses: Optional[List[Any]] = None) -> None:
        self.responses = list(responses or [])
        self.calls: List[Tuple[str, str]] = []
        self.release = threading.Event()
        self.release.set()

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        self.release.wait(timeout=5)
        response = self.responses.pop(0) if self.responses else "{}"
        if isinstance(response, Exception):
            raise response
        return response


class RecordingTracker:
    """Event sink that keeps every tracked event in memory."""

    def __init__(self) -> None:
        self.api_key: Optional[str] = None
        self.options = None
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def initialize(self, api_key, options=None) -> None:  # noqa: ANN001
        self.api_key = api_key
        self.options = options

    def track(self, event_name: str, properties: Optional[Mapping[str, Any]] = None) -> None:
        self.events.append((event_name, dict(properties or {})))

    def named(self, event_name: str) -> List[Dict[str, Any]]:
        return [props for name, props in self.events if name == event_name]


@pytest.fixture
def backend_factory():
    return FakeBackend


@pytest.fixture
def tracker() -> RecordingTracker:
    return RecordingTracker()
