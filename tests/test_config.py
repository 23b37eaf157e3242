"""Tests for configuration manager."""

from __future__ import annotations

from pathlib import Path

from autotrack.config.manager import ConfigManager
from autotrack.config.schemas import TrackingOptions


def test_config_manager_loads_defaults(tmp_path: Path) -> None:
    config_dir = tmp_path / "config"
    manager = ConfigManager(config_path=config_dir / "config.json")

    assert (config_dir / "config.json").exists()
    assert manager.config.naming.fallback_event_name == "button_clicked"
    assert manager.config.naming.dedupe_in_flight is False
    assert manager.config.api.model == "gpt-4o-mini"
    assert manager.config.api.timeout_seconds is None
    assert manager.config.analytics.endpoint.startswith("https://")


def test_tracking_options_accept_camel_case() -> None:
    options = TrackingOptions.model_validate(
        {"sessions": False, "pageViews": False, "formInteractions": True, "fileDownloads": False}
    )

    assert options.sessions is False
    assert options.page_views is False
    assert options.form_interactions is True
    assert options.file_downloads is False
    assert TrackingOptions(page_views=False).page_views is False


def test_effective_config_reads_keys_from_environment(tmp_path: Path) -> None:
    manager = ConfigManager(config_path=tmp_path / "config.json")

    config = manager.effective_config({"OPENAI_API_KEY": "sk-env", "AMPLITUDE_API_KEY": "amp-env"})

    assert config.api.api_key == "sk-env"
    assert config.analytics.api_key == "amp-env"
    assert manager.config.api.api_key is None
    assert "sk-env" not in (tmp_path / "config.json").read_text(encoding="utf-8")


def test_effective_config_without_environment_keys(tmp_path: Path) -> None:
    manager = ConfigManager(config_path=tmp_path / "config.json")

    config = manager.effective_config({})

    assert config.api.api_key is None
    assert config.analytics.api_key is None
