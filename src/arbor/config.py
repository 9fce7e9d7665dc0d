"""Configuration for the Arbor client."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ArborConfig:
    """Configuration for a Database client."""

    database_url: str | None = None
    request_timeout_s: float = 10.0
    append_json_suffix: bool = True
    user_agent: str | None = None
