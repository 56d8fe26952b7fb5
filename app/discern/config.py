"""
Process configuration, read from the environment (and a local .env file).
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import load_dotenv

from .persistence.session_store import DEFAULT_TTL_SECONDS
from .services.signal_classifier import DEFAULT_SIGNAL_MODEL


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass
class Settings:
    openai_api_key: Optional[str] = None
    model: str = DEFAULT_SIGNAL_MODEL
    session_ttl_seconds: float = DEFAULT_TTL_SECONDS
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(
        cls, env: Optional[Mapping[str, str]] = None, *, dotenv: bool = True
    ) -> "Settings":
        if env is None:
            if dotenv:
                load_dotenv()
            env = os.environ

        return cls(
            openai_api_key=env.get("OPENAI_API_KEY") or None,
            model=env.get("DISCERN_MODEL", DEFAULT_SIGNAL_MODEL),
            session_ttl_seconds=float(
                env.get("DISCERN_SESSION_TTL_SECONDS", DEFAULT_TTL_SECONDS)
            ),
            log_level=env.get("DISCERN_LOG_LEVEL", "INFO").upper(),
            host=env.get("DISCERN_HOST", "0.0.0.0"),
            port=int(env.get("DISCERN_PORT", 3000)),
            cors_origins=_split_csv(env.get("DISCERN_CORS_ORIGINS", "*")) or ["*"],
        )
