"""Chat completion client for OpenAI-compatible APIs."""

from __future__ import annotations

from typing import Protocol

import requests
from loguru import logger

from ..config.schemas import ApiConfig


class CompletionError(RuntimeError):
    """Raised when the backend call fails or returns an unusable envelope."""


class CompletionBackend(Protocol):
    def complete(self, system_prompt: str, user_prompt: str) -> str:
        ...


class ChatCompletionClient:
    """Call an external chat completion API and return the message content."""

    def __init__(self, api_config: ApiConfig) -> None:
        self._api_config = api_config

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        payload = {
            "model": self._api_config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self._api_config.temperature,
            "max_tokens": self._api_config.max_tokens,
            "response_format": {"type": "json_object"},
        }

        headers = {"Content-Type": "application/json"}
        if self._api_config.api_key:
            headers["Authorization"] = f"Bearer {self._api_config.api_key}"
        else:
            logger.warning("No API key set for {}", self._api_config.endpoint)

        logger.debug("Requesting completion from {} (model {})", self._api_config.endpoint, self._api_config.model)
        try:
            response = requests.post(
                self._api_config.endpoint,
                json=payload,
                headers=headers,
                timeout=self._api_config.timeout_seconds,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise CompletionError(f"completion request failed: {exc}") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise CompletionError(f"unexpected completion envelope: {exc!r}") from exc

        if not isinstance(content, str) or not content.strip():
            raise CompletionError("completion returned no content")
        return content.strip()
