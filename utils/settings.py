"""Environment-driven configuration for the API and the analysis core."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

RELEVANCE_STRATEGIES = ("substring", "token_overlap")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_number(name: str, default: float, cast=float):
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} is not a valid {cast.__name__}") from exc


@dataclass(frozen=True)
class Settings:
    """Runtime settings.

    When `openai_api_key` is missing the service runs in local mode: vision
    extraction yields placeholder facts and chat answers come from the
    deterministic rule-based fallback.
    """

    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_vision_model: str = "gpt-4o-mini"
    vision_timeout_seconds: float = 20.0
    reasoning_timeout_seconds: float = 15.0
    slice_height: int = 1800
    slice_overlap_ratio: float = 0.15
    max_vision_slices: int = 8
    relevance_strategy: str = "substring"
    log_level: str = "INFO"

    @property
    def provider_enabled(self) -> bool:
        return bool(self.openai_api_key)

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the process environment, failing fast on bad values."""
        strategy = (_env_str("RELEVANCE_STRATEGY", "substring") or "substring").lower()
        if strategy not in RELEVANCE_STRATEGIES:
            raise RuntimeError(
                f"RELEVANCE_STRATEGY={strategy!r} is not supported. "
                f"Use one of: {', '.join(RELEVANCE_STRATEGIES)}"
            )

        settings = cls(
            openai_api_key=_env_str("OPENAI_API_KEY"),
            openai_base_url=_env_str("OPENAI_BASE_URL"),
            openai_model=_env_str("OPENAI_MODEL", cls.openai_model),
            openai_vision_model=_env_str("OPENAI_VISION_MODEL", cls.openai_vision_model),
            vision_timeout_seconds=_env_number("VISION_TIMEOUT_SECONDS", cls.vision_timeout_seconds),
            reasoning_timeout_seconds=_env_number("REASONING_TIMEOUT_SECONDS", cls.reasoning_timeout_seconds),
            slice_height=_env_number("SLICE_HEIGHT", cls.slice_height, int),
            slice_overlap_ratio=_env_number("SLICE_OVERLAP_RATIO", cls.slice_overlap_ratio),
            max_vision_slices=_env_number("MAX_VISION_SLICES", cls.max_vision_slices, int),
            relevance_strategy=strategy,
            log_level=(_env_str("LOG_LEVEL", cls.log_level) or cls.log_level).upper(),
        )
        if settings.slice_height <= 0:
            raise RuntimeError("SLICE_HEIGHT must be a positive integer")
        if not 0 <= settings.slice_overlap_ratio < 1:
            raise RuntimeError("SLICE_OVERLAP_RATIO must be in [0, 1)")
        if settings.max_vision_slices <= 0:
            raise RuntimeError("MAX_VISION_SLICES must be a positive integer")
        if settings.log_level not in LOG_LEVELS:
            raise RuntimeError(f"LOG_LEVEL must be one of: {', '.join(LOG_LEVELS)}")
        return settings
