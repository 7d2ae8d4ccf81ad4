"""Local Ollama backend (``/api/generate``, non-streaming)."""

from __future__ import annotations

from typing import Any

from sec_audit.backends.base import SYSTEM_PROMPT, HTTPBackend


class OllamaBackend(HTTPBackend):
    name = "ollama"

    def __init__(self, host: str, **kwargs: Any) -> None:
        kwargs.setdefault("model", "llama3.1")
        super().__init__(base_url=host, **kwargs)

    def _build_request(self, prompt: str, context: str | None):
        system = SYSTEM_PROMPT
        if context:
            system = f"{system} Context: {context}"
        return (
            f"{self.base_url}/api/generate",
            {},
            {
                "model": self.model,
                "prompt": prompt,
                "system": system,
                "stream": False,
                "options": {"num_predict": self.max_tokens},
            },
        )

    def _extract_text(self, data: dict[str, Any]) -> str:
        return data["response"]
