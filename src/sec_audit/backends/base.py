"""HTTP backend base — timeout, retry/backoff and cancellation for every provider.

Subclasses only describe the wire format: how to build the request and how
to pull the generated text out of the response. Transient failures
(transport errors, timeouts, HTTP 429 and 5xx) are retried with exponential
backoff; everything else surfaces immediately as :class:`BackendError`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    stop_when_event_set,
    wait_exponential,
)

from sec_audit.core.cancel import CancelToken
from sec_audit.errors import BackendError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a security auditing assistant. Answer precisely and, when asked "
    "for JSON, reply with a single JSON document and nothing else."
)

# Backoff between attempts of the same call (seconds); unrelated to the
# monitor tick interval.
_BACKOFF_MIN = 1.0
_BACKOFF_MAX = 10.0


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


class HTTPBackend(ABC):
    """Base class for backends reached over HTTP with ``httpx``."""

    name: str = "http"

    def __init__(
        self,
        *,
        model: str,
        base_url: str,
        timeout: float = 120.0,
        max_retries: int = 3,
        max_tokens: int = 4096,
        client: httpx.Client | None = None,
        cancel: CancelToken | None = None,
    ) -> None:
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.max_tokens = max_tokens
        self.cancel = cancel or CancelToken()
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    # ── wire format (provider specific) ─────────────────────────────

    @abstractmethod
    def _build_request(self, prompt: str, context: str | None) -> tuple[str, dict[str, str], dict[str, Any]]:
        """Return ``(url, headers, json_body)`` for one generation call."""

    @abstractmethod
    def _extract_text(self, data: dict[str, Any]) -> str:
        """Pull the generated text out of a decoded response body."""

    # ── public API ──────────────────────────────────────────────────

    def generate(self, prompt: str, context: str | None = None) -> str:
        """Send *prompt* (plus optional *context*) and return the reply text."""
        self.cancel.raise_if_cancelled()
        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries) | stop_when_event_set(self.cancel.event),
            wait=wait_exponential(multiplier=1, min=_BACKOFF_MIN, max=_BACKOFF_MAX),
            retry=retry_if_exception(_is_transient),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self.cancel.wait,
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    self.cancel.raise_if_cancelled()
                    text = self._post(prompt, context)
        except httpx.TimeoutException as exc:
            raise BackendError(
                f"request timed out after {self.timeout:g}s", backend=self.name
            ) from exc
        except httpx.HTTPStatusError as exc:
            body = exc.response.text[:200]
            raise BackendError(
                f"HTTP {exc.response.status_code}: {body}",
                backend=self.name,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise BackendError(f"request failed: {exc}", backend=self.name) from exc
        return text

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HTTPBackend":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── internals ───────────────────────────────────────────────────

    def _post(self, prompt: str, context: str | None) -> str:
        url, headers, body = self._build_request(prompt, context)
        logger.debug("%s request → %s (model=%s)", self.name, url, self.model)
        resp = self._client.post(url, headers=headers, json=body, timeout=self.timeout)
        resp.raise_for_status()
        try:
            data = resp.json()
            text = self._extract_text(data)
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise BackendError(f"invalid response format: {exc}", backend=self.name) from exc
        if not isinstance(text, str):
            raise BackendError("invalid response format: text is not a string", backend=self.name)
        return text
