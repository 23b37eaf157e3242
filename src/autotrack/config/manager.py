"""Configuration manager for autotrack."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from .schemas import AppConfig

OPENAI_KEY_ENV = "OPENAI_API_KEY"
AMPLITUDE_KEY_ENV = "AMPLITUDE_API_KEY"


@dataclass
class ConfigManager:
    """Load, manage, and persist autotrack configuration."""

    config_path: Path = field(default_factory=lambda: Path.home() / ".autotrack" / "config.json")
    _config: AppConfig = field(init=False)

    def __post_init__(self) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config = self._load_or_default()

    @property
    def config(self) -> AppConfig:
        """Return the configuration model as stored on disk."""
        return self._config

    def effective_config(self, environ: Optional[Mapping[str, str]] = None) -> AppConfig:
        """Return the stored configuration with credentials taken from the environment.

        Environment keys win over stored ones and are never written back to disk.
        """
        environ = os.environ if environ is None else environ
        config = self._config

        openai_key = environ.get(OPENAI_KEY_ENV)
        if openai_key:
            config = config.model_copy(update={"api": config.api.model_copy(update={"api_key": openai_key})})

        amplitude_key = environ.get(AMPLITUDE_KEY_ENV)
        if amplitude_key:
            analytics = config.analytics.model_copy(update={"api_key": amplitude_key})
            config = config.model_copy(update={"analytics": analytics})

        return config

    def update(self, **kwargs: Any) -> None:
        """Update configuration fields and persist to disk."""
        self._config = self._config.model_copy(update=kwargs)
        self.save()

    def save(self) -> None:
        """Persist configuration to disk."""
        self.config_path.write_text(self._config.model_dump_json(indent=2), encoding="utf-8")

    def _load_or_default(self) -> AppConfig:
        if self.config_path.exists():
            return AppConfig.model_validate_json(self.config_path.read_text(encoding="utf-8"))
        config = AppConfig()
        self.config_path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
        return config
