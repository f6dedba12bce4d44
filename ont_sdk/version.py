"""
Version helpers for the ont-sdk Python package.
We keep a static __version__ (PEP 440) and expose a helper used in the
User-Agent header sent by the HTTP and WebSocket transports.
"""

from __future__ import annotations

# Bump this when publishing
__version__ = "0.3.0"


def user_agent() -> str:
    """Default User-Agent string, e.g. 'ont-sdk-python/0.3.0'."""
    return f"ont-sdk-python/{__version__}"


__all__ = ["__version__", "user_agent"]
