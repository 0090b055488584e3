"""
Per-source configuration for outbound data fetches.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class SourceConfig:
    name: str
    base_url: Optional[str]
    timeout_ms: int
    retry_attempts: int
    retry_delay_ms: int
    cache_ttl_seconds: int
    requires_auth_key: bool
    api_key: Optional[str] = None
    # query parameter the key is sent as (appid, token, apiKey)
    auth_param: Optional[str] = None

    @property
    def has_key(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @classmethod
    def from_mapping(cls, name: str, data: Mapping[str, Any], api_key: Optional[str] = None) -> "SourceConfig":
        return cls(
            name=name,
            base_url=data.get("base_url"),
            timeout_ms=int(data["timeout_ms"]),
            retry_attempts=int(data["retry_attempts"]),
            retry_delay_ms=int(data["retry_delay_ms"]),
            cache_ttl_seconds=int(data["cache_ttl_seconds"]),
            requires_auth_key=bool(data["requires_auth_key"]),
            api_key=api_key,
            auth_param=data.get("auth_param"),
        )
