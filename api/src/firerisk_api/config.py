"""API settings read from FIRERISK_* environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


@dataclass(frozen=True)
class ApiSettings:
    """Runtime configuration for the HTTP layer."""

    cors_origins: tuple[str, ...] = ("*",)
    provider_timeout: float = 10.0
    unit_max_step: float = 0.0015
    unit_jitter_seed: int = 2024

    @classmethod
    def from_env(cls) -> "ApiSettings":
        origins = os.environ.get("FIRERISK_CORS_ORIGINS", "*")
        return cls(
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()) or ("*",),
            provider_timeout=_float_env("FIRERISK_PROVIDER_TIMEOUT", cls.provider_timeout),
            unit_max_step=_float_env("FIRERISK_UNIT_MAX_STEP", cls.unit_max_step),
            unit_jitter_seed=int(_float_env("FIRERISK_UNIT_JITTER_SEED", cls.unit_jitter_seed)),
        )
