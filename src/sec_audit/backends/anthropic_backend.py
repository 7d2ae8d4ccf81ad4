"""Anthropic messages-API backend."""

from __future__ import annotations

from typing import Any

from sec_audit.backends.base import SYSTEM_PROMPT, HTTPBackend

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicBackend(HTTPBackend):
    name = "anthropic"

    def __init__(self, api_key: str, **kwargs: Any) -> None:
        kwargs.setdefault("model", "claude-3-5-sonnet-latest")
        kwargs.setdefault("base_url", "https://api.anthropic.com/v1")
        super().__init__(**kwargs)
        self._api_key = api_key

    def _build_request(self, prompt: str, context: str | None):
        system = SYSTEM_PROMPT
        if context:
            system = f"{system} Context: {context}"
        return (
            f"{self.base_url}/messages",
            {"x-api-key": self._api_key, "anthropic-version": ANTHROPIC_VERSION},
            {
                "model": self.model,
                "max_tokens": self.max_tokens,
                "system": system,
                "messages": [{"role": "user", "content": prompt}],
            },
        )

    def _extract_text(self, data: dict[str, Any]) -> str:
        # Concatenate every text block; tool/other blocks are ignored.
        blocks = [b["text"] for b in data["content"] if b.get("type", "text") == "text"]
        if not blocks:
            raise KeyError("content")
        return "".join(blocks)
