from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_OURA_API_BASE = "https://api.ouraring.com"


@dataclass
class OuraConfig:
    oura_api_base: str
    oura_api_token: str
    http_timeout_seconds: float = 30.0
    fetch_timeout_seconds: float = 8.0
    log_level: str = "INFO"

    @property
    def configured(self) -> bool:
        return bool(self.oura_api_token)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}.")


def load_config() -> OuraConfig:
    return OuraConfig(
        oura_api_base=os.getenv("OURA_API_BASE", DEFAULT_OURA_API_BASE).rstrip("/"),
        oura_api_token=os.getenv("OURA_API_TOKEN", "").strip(),
        http_timeout_seconds=_float_env("OURA_HTTP_TIMEOUT_SECONDS", 30.0),
        fetch_timeout_seconds=_float_env("OURA_FETCH_TIMEOUT_SECONDS", 8.0),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
