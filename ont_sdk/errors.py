"""
Typed error classes for the Python SDK.

These are raised by the client manager, the transports, the response decoders
and the layer-2 proof helpers so callers can catch specific failure modes while
still being able to catch the base `OntSdkError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional

__all__ = [
    "OntSdkError",
    "NoClientError",
    "RpcError",
    "DecodeError",
    "TxError",
    "ProofError",
    "BlockWaitTimeout",
    "ErrorCode",
]


class OntSdkError(Exception):
    """Base class for all SDK errors."""


class ErrorCode(IntEnum):
    # Node-side codes carried in the `error` / `Error` envelope field
    SUCCESS = 0
    SESSION_EXPIRED = 41001
    SERVICE_CEILING = 41002
    ILLEGAL_DATAFORMAT = 41003
    INVALID_VERSION = 41004
    INVALID_METHOD = 42001
    INVALID_PARAMS = 42002
    INVALID_TRANSACTION = 43001
    INVALID_ASSET = 43002
    INVALID_BLOCK = 43003
    UNKNOWN_TRANSACTION = 44001
    UNKNOWN_ASSET = 44002
    UNKNOWN_BLOCK = 44003
    UNKNOWN_CONTRACT = 44004
    INTERNAL_ERROR = 45001
    SMARTCODE_ERROR = 47001
    PRE_EXEC_ERROR = 47002

    # Client-side transport codes (JSON-RPC reserved range)
    MALFORMED_RESPONSE = -32603
    NETWORK_ERROR = -32098


class NoClientError(OntSdkError):
    """Raised when no transport is configured on the manager."""

    def __init__(self, message: str = "don't have available client of ontology") -> None:
        super().__init__(message)


@dataclass(slots=True)
class RpcError(OntSdkError):
    """Raised when a transport call fails or the node reports an error."""

    method: Optional[str]
    code: int
    message: str
    data: Optional[Any] = None
    request_id: Optional[str] = None
    http_status: Optional[int] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        parts = [f"RPC[{self.method or '-'}] code={self.code} msg={self.message!r}"]
        if self.request_id is not None:
            parts.append(f"id={self.request_id}")
        if self.http_status is not None:
            parts.append(f"http={self.http_status}")
        if self.data is not None:
            parts.append(f"data={self.data!r}")
        return " ".join(parts)

    @property
    def code_enum(self) -> Optional[ErrorCode]:
        try:
            return ErrorCode(self.code)
        except ValueError:
            return None


@dataclass(slots=True)
class DecodeError(OntSdkError):
    """
    Raised when response bytes do not have the shape the operation expects.

    `payload` keeps the raw response so protocol mismatches can be diagnosed.
    """

    what: str
    message: str
    payload: Optional[bytes] = None

    def __str__(self) -> str:
        return f"decode {self.what}: {self.message}"


@dataclass(slots=True)
class TxError(OntSdkError):
    """
    Raised when a transaction cannot be finalized or encoded.

    Fields:
      - message: human-readable description
      - field: the missing or invalid field, when known
    """

    message: str
    field: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        where = f" [{self.field}]" if self.field else ""
        return f"TxError{where}: {self.message}"


@dataclass(slots=True)
class ProofError(OntSdkError):
    """
    Raised when a layer-2 store proof cannot be decoded or does not verify.

    `stage` is one of "decode", "verify" or "verify_item".
    """

    message: str
    stage: Optional[str] = None

    def __str__(self) -> str:
        return f"ProofError[{self.stage or '-'}]: {self.message}"


class BlockWaitTimeout(OntSdkError, TimeoutError):
    """Raised when the chain did not advance far enough before the timeout."""

    def __init__(self, seconds: int) -> None:
        super().__init__(f"timeout after {seconds} (s)")
        self.seconds = seconds
