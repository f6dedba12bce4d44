"""
SDK configuration: node endpoints for each transport plus timeouts.

- Loads sane defaults and supports overrides via environment variables (ONT_*).
- Provides helpers for building HTTP headers and validating endpoints.
- An empty URL disables the corresponding transport.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .version import user_agent as _default_user_agent

DEFAULT_RPC_URL = "http://127.0.0.1:20336"
DEFAULT_REST_URL = "http://127.0.0.1:20334"
DEFAULT_WS_URL = "ws://127.0.0.1:20335"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None else default


def _ensure_scheme(url: Optional[str], allowed: tuple[str, ...]) -> Optional[str]:
    if not url:
        return url
    lower = url.lower()
    if not any(lower.startswith(f"{sch}://") for sch in allowed):
        raise ValueError(f"URL must start with {allowed}, got: {url!r}")
    return url


@dataclass(slots=True)
class SDKConfig:
    # Endpoints (None / "" disables the transport)
    rpc_url: Optional[str] = field(default_factory=lambda: DEFAULT_RPC_URL)
    rest_url: Optional[str] = None
    ws_url: Optional[str] = None
    # HTTP/WS behavior
    request_timeout: float = 10.0
    ws_connect_timeout: float = 10.0
    # Headers / identity
    user_agent: str = field(default_factory=_default_user_agent)

    def __post_init__(self) -> None:
        _ensure_scheme(self.rpc_url, ("http", "https"))
        _ensure_scheme(self.rest_url, ("http", "https"))
        _ensure_scheme(self.ws_url, ("ws", "wss"))

    @classmethod
    def from_env(cls, prefix: str = "ONT_") -> "SDKConfig":
        """
        Create config from environment variables:

        ONT_RPC_URL      (http/https; default http://127.0.0.1:20336)
        ONT_REST_URL     (http/https) optional
        ONT_WS_URL       (ws/wss) optional
        ONT_TIMEOUT      (float seconds, HTTP and WS requests)
        ONT_WS_TIMEOUT   (float seconds, WS connect)
        ONT_USER_AGENT   (str)
        """
        return cls(
            rpc_url=_env(f"{prefix}RPC_URL", DEFAULT_RPC_URL) or None,
            rest_url=_env(f"{prefix}REST_URL") or None,
            ws_url=_env(f"{prefix}WS_URL") or None,
            request_timeout=float(_env(f"{prefix}TIMEOUT", "10.0")),
            ws_connect_timeout=float(_env(f"{prefix}WS_TIMEOUT", "10.0")),
            user_agent=_env(f"{prefix}USER_AGENT") or _default_user_agent(),
        )

    @classmethod
    def with_overrides(
        cls, base: Optional["SDKConfig"] = None, **overrides: Any
    ) -> "SDKConfig":
        """
        Build from an existing config plus keyword overrides.
        Unknown keys and None values are ignored.
        """
        base = base or cls.from_env()
        data = base.to_dict()
        data.update({k: v for k, v in overrides.items() if k in data and v is not None})
        return cls(**data)

    def http_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rpc_url": self.rpc_url,
            "rest_url": self.rest_url,
            "ws_url": self.ws_url,
            "request_timeout": float(self.request_timeout),
            "ws_connect_timeout": float(self.ws_connect_timeout),
            "user_agent": self.user_agent,
        }


__all__ = ["SDKConfig", "DEFAULT_RPC_URL", "DEFAULT_REST_URL", "DEFAULT_WS_URL"]
