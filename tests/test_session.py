"""End-to-end tests for automatic naming and click tracking."""

from __future__ import annotations

import gc
import json
import time

from autotrack.config.schemas import AnalyticsConfig, ApiConfig, AppConfig, NamingConfig, TrackingOptions
from autotrack.core.llm_client import ChatCompletionClient
from autotrack.core.page import Page
from autotrack.core.session import AutoTracking
from autotrack.core.tracker import FILE_DOWNLOADED, FORM_SUBMITTED, PAGE_VIEWED

HTML = """
<html><head><title>요금제</title></head><body>
  <button id="signup">회원가입</button>
  <a id="guide" href="/files/guide.pdf">가이드</a>
  <form id="contact" name="contact" action="/contact"></form>
</body></html>
"""


def make_session(tracker, backend, **options):
    page = Page(HTML, url="https://example.com/pricing")
    analytics = AnalyticsConfig(api_key="amp-key", tracking=TrackingOptions(**options))
    session = AutoTracking(page, tracker, backend=backend, analytics=analytics)
    return page, session


def test_click_before_and_after_translation(qtbot, tracker, backend_factory) -> None:
    backend = backend_factory([json.dumps({"회원가입": "signup_clicked", "가이드": "guide_clicked"})])
    backend.release.clear()
    page, session = make_session(tracker, backend)
    button = page.select_one("#signup")

    try:
        session.start()
        started = time.monotonic()
        page.click(button)
        assert time.monotonic() - started < 1.0
    finally:
        backend.release.set()

    qtbot.waitUntil(lambda: session.translator.pending_requests == 0, timeout=2000)
    page.click(button)

    clicks = [(name, props["event_display_name"]) for name, props in tracker.events if "button_text" in props]
    assert clicks == [("button_clicked", "회원가입"), ("signup_clicked", "회원가입")]
    assert len(backend.calls) == 1


def test_dynamic_content_gets_named(qtbot, tracker, backend_factory) -> None:
    backend = backend_factory(
        [
            json.dumps({"회원가입": "signup_clicked", "가이드": "guide_clicked"}),
            json.dumps({"장바구니": "cart_clicked"}),
        ]
    )
    page, session = make_session(tracker, backend)
    session.start()
    qtbot.waitUntil(lambda: session.translator.pending_requests == 0, timeout=2000)

    with qtbot.waitSignal(session.translator.translation_finished, timeout=2000):
        page.append_html('<button id="cart">장바구니</button>')

    assert json.loads(backend.calls[1][1].split("\n", 1)[1]) == ["장바구니"]
    page.click(page.select_one("#cart"))
    assert tracker.events[-1][0] == "cart_clicked"


def test_backend_failure_does_not_reach_click_path(qtbot, tracker, backend_factory) -> None:
    backend = backend_factory([RuntimeError("boom")])
    page, session = make_session(tracker, backend)

    with qtbot.waitSignal(session.translator.translation_finished, timeout=2000) as blocker:
        session.start()

    assert blocker.args[0].error == "boom"
    assert len(session.cache) == 0
    page.click(page.select_one("#signup"))
    assert tracker.events[-1][0] == "button_clicked"


def test_start_initializes_tracker_and_default_tracking(tracker) -> None:
    page, session = make_session(tracker, backend=None)

    session.start()
    session.start()
    page.click(page.select_one("#guide"))
    page.submit(page.select_one("#contact"))

    assert tracker.api_key == "amp-key"
    assert tracker.named(PAGE_VIEWED) == [{"page_url": "https://example.com/pricing", "page_title": "요금제"}]
    assert tracker.named(FILE_DOWNLOADED) == [
        {
            "file_extension": "pdf",
            "file_name": "guide.pdf",
            "link_text": "가이드",
            "link_url": "https://example.com/files/guide.pdf",
        }
    ]
    assert tracker.named(FORM_SUBMITTED) == [
        {"form_id": "contact", "form_name": "contact", "form_destination": "https://example.com/contact"}
    ]
    assert tracker.named("button_clicked")[0]["link_href"] == "https://example.com/files/guide.pdf"


def test_disabled_default_tracking_categories(tracker) -> None:
    page, session = make_session(
        tracker, backend=None, page_views=False, file_downloads=False, form_interactions=False
    )

    session.start()
    page.click(page.select_one("#guide"))
    page.submit(page.select_one("#contact"))

    assert [name for name, _ in tracker.events] == ["button_clicked"]


def test_from_config_without_keys_still_dispatches(tracker) -> None:
    page = Page(HTML)
    session = AutoTracking.from_config(page, AppConfig(), tracker=tracker)

    session.start()
    page.click(page.select_one("#signup"))

    assert session.translator.enabled is False
    assert tracker.api_key is None
    assert tracker.events[-1][0] == "button_clicked"


def test_from_config_wires_backend_and_naming(tracker) -> None:
    config = AppConfig(api=ApiConfig(api_key="sk-test"), naming=NamingConfig(fallback_event_name="ui_clicked"))
    session = AutoTracking.from_config(Page(HTML), config, tracker=tracker)

    assert session.translator.enabled is True
    assert isinstance(session.translator._backend, ChatCompletionClient)
    assert session.cache.get("회원가입") == "ui_clicked"


def test_wiring_lives_as_long_as_the_page(tracker) -> None:
    page = Page(HTML)
    AutoTracking.from_config(page, AppConfig(), tracker=tracker).start()
    gc.collect()

    page.click(page.select_one("#signup"))
    page.append_html("<button>저장</button>")
    page.click(page.select_one("#signup"))

    assert [props["button_text"] for props in tracker.named("button_clicked")] == ["회원가입", "회원가입"]
