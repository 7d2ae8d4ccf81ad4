"""OpenAI chat-completions backend."""

from __future__ import annotations

from typing import Any

from sec_audit.backends.base import SYSTEM_PROMPT, HTTPBackend


class OpenAIBackend(HTTPBackend):
    name = "openai"

    def __init__(self, api_key: str, **kwargs: Any) -> None:
        kwargs.setdefault("model", "gpt-4o")
        kwargs.setdefault("base_url", "https://api.openai.com/v1")
        super().__init__(**kwargs)
        self._api_key = api_key

    def _build_request(self, prompt: str, context: str | None):
        messages = [{"role": "system", "content": SYSTEM_PROMPT}]
        if context:
            messages.append({"role": "system", "content": f"Context: {context}"})
        messages.append({"role": "user", "content": prompt})
        return (
            f"{self.base_url}/chat/completions",
            {"Authorization": f"Bearer {self._api_key}"},
            {
                "model": self.model,
                "messages": messages,
                "temperature": 0.2,
                "max_tokens": self.max_tokens,
            },
        )

    def _extract_text(self, data: dict[str, Any]) -> str:
        return data["choices"][0]["message"]["content"]
