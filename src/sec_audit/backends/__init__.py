"""Inference backends consumed by every pipeline stage.

A backend exposes ``name`` and ``generate(prompt, context=None) -> str`` and
raises :class:`sec_audit.errors.BackendError` on failure. Exactly one is
selected at process start by :func:`create_backend`:

1. ``Settings.SEC_AUDIT_BACKEND`` (or ``--backend``) when set explicitly;
2. otherwise the first recognized credential, in order
   ``OPENAI_API_KEY`` → ``ANTHROPIC_API_KEY`` → ``OLLAMA_HOST``.

No credential at all is a :class:`StartupError`.
"""

from __future__ import annotations

from typing import Protocol

import httpx

from sec_audit.core.cancel import CancelToken
from sec_audit.core.config import Settings
from sec_audit.errors import StartupError


class InferenceBackend(Protocol):
    """Every backend must expose ``name`` and ``generate()``."""

    name: str

    def generate(self, prompt: str, context: str | None = None) -> str:
        """Return the backend's free-form text answer to *prompt*."""
        ...


# (backend name, credential setting) in precedence order
BACKEND_PRECEDENCE: tuple[tuple[str, str], ...] = (
    ("openai", "OPENAI_API_KEY"),
    ("anthropic", "ANTHROPIC_API_KEY"),
    ("ollama", "OLLAMA_HOST"),
)


def select_backend_name(settings: Settings) -> str:
    """Resolve which backend to use without constructing it."""
    credentials = dict(BACKEND_PRECEDENCE)
    explicit = settings.SEC_AUDIT_BACKEND.strip().lower()
    if explicit:
        if explicit not in credentials:
            known = ", ".join(credentials)
            raise StartupError(f"unknown backend {explicit!r} (expected one of: {known})")
        if not getattr(settings, credentials[explicit]):
            raise StartupError(
                f"backend {explicit!r} selected but {credentials[explicit]} is not set"
            )
        return explicit

    for name, credential in BACKEND_PRECEDENCE:
        if getattr(settings, credential):
            return name

    raise StartupError(
        "No inference backend configured. Set OPENAI_API_KEY, "
        "ANTHROPIC_API_KEY or OLLAMA_HOST."
    )


def create_backend(
    settings: Settings,
    *,
    cancel: CancelToken | None = None,
    client: httpx.Client | None = None,
) -> InferenceBackend:
    """Construct the single backend for this process."""
    name = select_backend_name(settings)
    common = {
        "timeout": settings.SEC_AUDIT_TIMEOUT,
        "max_retries": settings.SEC_AUDIT_MAX_RETRIES,
        "max_tokens": settings.SEC_AUDIT_MAX_TOKENS,
        "client": client,
        "cancel": cancel,
    }
    if name == "openai":
        from sec_audit.backends.openai_backend import OpenAIBackend

        return OpenAIBackend(
            settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            base_url=settings.OPENAI_BASE_URL,
            **common,
        )
    if name == "anthropic":
        from sec_audit.backends.anthropic_backend import AnthropicBackend

        return AnthropicBackend(
            settings.ANTHROPIC_API_KEY,
            model=settings.ANTHROPIC_MODEL,
            base_url=settings.ANTHROPIC_BASE_URL,
            **common,
        )

    from sec_audit.backends.ollama_backend import OllamaBackend

    return OllamaBackend(settings.OLLAMA_HOST, model=settings.OLLAMA_MODEL, **common)


__all__ = [
    "BACKEND_PRECEDENCE",
    "InferenceBackend",
    "create_backend",
    "select_backend_name",
]
