"""Configuration — audit options and environment-backed settings.

Environment variables override ``Settings`` defaults; the CLI overrides
both for the flags it exposes.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class AuditConfig:
    """Immutable options for one audit run (or every tick of a monitor)."""

    root: Path = Path(".")
    zero_day: bool = False
    supply_chain: bool = False
    compliance: tuple[str, ...] = ()
    ci_mode: bool = False


@dataclass
class Settings:
    """Backend and scheduling settings."""

    # Backend selection ("openai" | "anthropic" | "ollama"); empty = credential precedence
    SEC_AUDIT_BACKEND: str = ""

    # OpenAI
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"

    # Anthropic
    ANTHROPIC_API_KEY: Optional[str] = None
    ANTHROPIC_MODEL: str = "claude-3-5-sonnet-latest"
    ANTHROPIC_BASE_URL: str = "https://api.anthropic.com/v1"

    # Ollama (local)
    OLLAMA_HOST: Optional[str] = None
    OLLAMA_MODEL: str = "llama3.1"

    # Per-call limits
    SEC_AUDIT_TIMEOUT: float = 120.0       # seconds per HTTP call
    SEC_AUDIT_MAX_RETRIES: int = 3         # attempts, including the first
    SEC_AUDIT_MAX_TOKENS: int = 4096

    # Monitoring
    SEC_AUDIT_MONITOR_INTERVAL: float = 3600.0

    env: dict[str, str] | None = field(default=None, repr=False)

    def __post_init__(self):
        """Load from environment variables"""
        source = os.environ if self.env is None else self.env
        for key, spec in self.__dataclass_fields__.items():
            if key == "env":
                continue
            env_value = source.get(key)
            if env_value is None or env_value == "":
                continue
            field_type = spec.type
            if field_type == "int":
                setattr(self, key, int(env_value))
            elif field_type == "float":
                setattr(self, key, float(env_value))
            else:
                setattr(self, key, env_value)
