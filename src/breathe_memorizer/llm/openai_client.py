from __future__ import annotations

import importlib
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, cast

from ..config import OpenAISettings

logger = logging.getLogger(__name__)

OpenAI: Callable[..., Any] | None = None


@dataclass(slots=True)
class PromptMetadata:
    """Describes a text-generation request, used for logging."""

    task: str
    topic: str | None = None
    draft_chars: int | None = None


class OpenAIScriptClient:
    """Thin wrapper around the OpenAI Responses API with retries."""

    def __init__(
        self,
        settings: OpenAISettings,
        api_key: str,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not api_key:
            raise ValueError("OpenAI API key is required for script writing.")
        self._settings = settings
        self._api_key = api_key
        self._client_factory: Callable[..., Any] = _load_openai_factory()
        self._client: Any | None = None
        self._max_attempts = max(1, settings.max_attempts)
        self._sleep = sleep

    @property
    def settings(self) -> OpenAISettings:
        return self._settings

    def complete(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        metadata: PromptMetadata,
    ) -> str:
        """Send the prompt pair and return the model's text output."""
        attempt = 0
        last_error: Exception | None = None
        while attempt < self._max_attempts:
            attempt += 1
            try:
                client = self._ensure_client()
                response: Any = client.responses.create(
                    model=self._settings.model,
                    input=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    temperature=self._settings.temperature,
                    max_output_tokens=self._settings.max_output_tokens,
                    top_p=self._settings.top_p,
                    timeout=self._settings.request_timeout,
                )
                text = self._extract_text(response)
                logger.debug(
                    "OpenAI %s succeeded (topic=%r, %s chars out)",
                    metadata.task,
                    metadata.topic,
                    len(text),
                )
                return text
            except Exception as exc:  # pragma: no cover - network-related
                last_error = exc
                logger.warning(
                    "OpenAI %s failed (attempt %s/%s): %s",
                    metadata.task,
                    attempt,
                    self._max_attempts,
                    exc,
                )
                if attempt >= self._max_attempts:
                    break
                self._sleep(min(2 ** (attempt - 1), 5))
        raise RuntimeError(
            f"OpenAI {metadata.task} failed after {self._max_attempts} attempts."
        ) from last_error

    def _ensure_client(self) -> Any:
        if self._client is None:
            options: dict[str, Any] = {"api_key": self._api_key}
            if self._settings.base_url:
                options["base_url"] = self._settings.base_url
            if self._settings.organization:
                options["organization"] = self._settings.organization
            self._client = self._client_factory(**options)
        return self._client

    @staticmethod
    def _extract_text(response: Any) -> str:
        """Return the first non-empty text segment of a Responses API result."""
        direct = getattr(response, "output_text", None)
        if isinstance(direct, str) and direct.strip():
            return direct
        for item in getattr(response, "output", None) or ():
            for segment in getattr(item, "content", None) or ():
                text = getattr(segment, "text", None)
                if isinstance(text, str) and text.strip():
                    return text
        raise RuntimeError("OpenAI response contained no text output.")


def _load_openai_factory() -> Callable[..., Any]:
    """Resolve ``openai.OpenAI`` on first use so the extra stays optional."""
    global OpenAI
    if OpenAI is None:
        try:
            module = importlib.import_module("openai")
        except ImportError as exc:  # pragma: no cover - depends on the environment
            raise RuntimeError(
                "Script writing needs the openai package: pip install '.[llm-openai]'"
            ) from exc
        OpenAI = cast(Callable[..., Any], module.OpenAI)
    return OpenAI
