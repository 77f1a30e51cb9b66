#!/usr/bin/env python3
"""
Base Client - Foundation for dual-mode clients (Local/Remote)

Provides:
1. Connection mode definition
2. Remote endpoint value object
3. Local binding protocol

The dispatcher routes every operation either to a local binding (the
privileged helper on this machine) or to a remote management server.
"""

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Protocol, runtime_checkable
from urllib.parse import urlsplit

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


class ClientMode(str, Enum):
    """Client operation mode"""
    LOCAL = "local"      # Same-machine helper via native binding
    REMOTE = "remote"    # Management server via HTTP/WebSocket


STREAM_SCHEMES = {
    "http": "ws",
    "https": "wss",
}


@dataclass(frozen=True)
class RemoteEndpoint:
    """
    Address and credential of a remote management server.

    Immutable once constructed. The token is kept out of ``repr`` so it does
    not leak into logs or tracebacks.
    """
    base_url: str
    token: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        raw = (self.base_url or "").strip()
        parts = urlsplit(raw)
        if parts.scheme.lower() not in STREAM_SCHEMES or not parts.netloc:
            raise ConfigurationError(
                f"Remote endpoint must be an http(s) URL with a host, got {raw!r}",
                field="base_url",
            )
        object.__setattr__(self, "base_url", raw.rstrip("/"))
        object.__setattr__(self, "token", self.token or None)

    @property
    def scheme(self) -> str:
        return urlsplit(self.base_url).scheme.lower()

    @property
    def stream_base_url(self) -> str:
        """Base address with http(s) rewritten to ws(s)"""
        return STREAM_SCHEMES[self.scheme] + self.base_url[len(self.scheme):]

    @property
    def has_token(self) -> bool:
        return self.token is not None

    @classmethod
    def coerce(cls, value: Any, token: Optional[str] = None) -> "RemoteEndpoint":
        """Accept an endpoint, or a base URL plus optional token"""
        if isinstance(value, cls):
            if token is not None and token != value.token:
                return cls(value.base_url, token)
            return value
        return cls(str(value), token)


@runtime_checkable
class LocalBinding(Protocol):
    """
    Protocol for the local helper binding.

    Any object exposing one callable per operation (named like the dispatcher
    method, e.g. ``vm_start``) satisfies it. Callables may be plain functions
    or coroutine functions. ``terminal_port`` is the one every binding needs.
    """

    def terminal_port(self) -> Any:
        """Port the helper's terminal/VNC WebSocket server listens on"""
        ...


async def resolve(value: Any) -> Any:
    """Await ``value`` if the binding handed back an awaitable"""
    if inspect.isawaitable(value):
        return await value
    return value
