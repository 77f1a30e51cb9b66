"""
Transport clients

- RemoteClient: HTTP action RPC against a management server
- LocalClient: positional calls into the same-machine helper binding
"""

from .base import ClientMode, LocalBinding, RemoteEndpoint
from .local_client import LocalClient
from .remote_client import RemoteClient

__all__ = [
    "ClientMode",
    "LocalBinding",
    "LocalClient",
    "RemoteClient",
    "RemoteEndpoint",
]
