#!/usr/bin/env python3
"""
Streaming session URLs for terminal and graphical console (VNC) sessions.

Local mode: the helper runs one WebSocket server on a loopback port that
serves both paths, so the URL is composed directly from that port.
Remote mode: the URL is derived from the management server's base address
(http→ws, https→wss) and carries the credential as a query parameter.

Either way the result is consumed by the same WebSocket client.
"""

from enum import Enum
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

LOCAL_STREAM_HOST = "127.0.0.1"


class StreamPath(str, Enum):
    """WebSocket endpoints for interactive sessions"""
    TERMINAL = "/ws/terminal"
    VNC = "/ws/vnc"


def encode_query(params: Optional[Mapping[str, Any]] = None) -> str:
    """
    urlencode with JSON-style booleans (``true``/``false``)

    >>> encode_query({"hostId": "h1", "readOnly": True})
    'hostId=h1&readOnly=true'
    """
    return urlencode({
        k: ("true" if v else "false") if isinstance(v, bool) else v
        for k, v in (params or {}).items()
    })


def local_stream_url(
    port: int,
    path: str,
    params: Optional[Mapping[str, Any]] = None,
    host: str = LOCAL_STREAM_HOST,
) -> str:
    """
    Compose the loopback WebSocket URL for the local helper

    >>> local_stream_url(7000, "/ws/terminal", {"hostId": "h1"})
    'ws://127.0.0.1:7000/ws/terminal?hostId=h1'
    """
    path = getattr(path, "value", path)
    if not path.startswith("/"):
        path = "/" + path
    return f"ws://{host}:{int(port)}{path}?{encode_query(params)}"
