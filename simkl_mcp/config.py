"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .client import DEFAULT_BASE_URL


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    client_id: str = ""
    timeout: float = 30.0


def load_settings() -> Settings:
    return Settings(
        base_url=os.environ.get("SIMKL_API_BASE_URL") or DEFAULT_BASE_URL,
        client_id=os.environ.get("SIMKL_CLIENT_ID", ""),
        timeout=float(os.environ.get("SIMKL_TIMEOUT", "30")),
    )


def env_token() -> Optional[str]:
    """Token accessor: reads SIMKL_ACCESS_TOKEN on every call."""
    return os.environ.get("SIMKL_ACCESS_TOKEN") or None
