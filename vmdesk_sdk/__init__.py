#!/usr/bin/env python3
"""
VMDesk SDK
==========

Client-side dispatch layer for a virtual machine management desktop.
Every management operation is callable the same way whether it runs through
the privileged helper on this machine (local mode) or against a remote
management server over HTTP (remote mode).

Quick Start:
    from vmdesk_sdk import VMDeskClient

    # Local helper
    client = VMDeskClient(binding=helper)
    hosts = await client.host_list()
    await client.vm_start("h1", "web-01")

    # Remote server
    version = await client.connect("https://10.0.0.5:8443", token="vmdesk_sk_...")
    vms = await client.vm_list("h1")

    # Terminal / VNC session URL (either mode)
    url = await client.terminal_url({"hostId": "h1", "vmName": "web-01"})

    # Back to the local helper
    client.disconnect()

Lower-level pieces:
    from vmdesk_sdk import ModeRegistry, Dispatcher, ConnectionManager

    registry = ModeRegistry()
    api = Dispatcher(registry, binding=helper)
    conn = ConnectionManager(api)
    await conn.connect_remote("https://10.0.0.5:8443", token="...")

Features:
    - One call surface for local and remote mode
    - Runtime switching with verify-or-rollback connect
    - Operation table as data (action names, wire fields, result types)
    - Typed resource models (pydantic) via Dispatcher.decode_result
    - Distinct transport and peer-reported errors
"""

# Version
__version__ = "0.1.0"

# Error classes (import early, no dependencies)
from .errors import (
    VMDeskError,
    TransportError,
    AuthenticationError,
    VerificationError,
    ActionError,
    ConfigurationError,
    LocalBindingError,
)

# Configuration
from .core.config import (
    ClientConfig,
    LoggingConfig,
    get_settings,
    reload_settings,
    setup_logging,
)

# Clients and mode state
from .clients import (
    ClientMode,
    LocalBinding,
    LocalClient,
    RemoteClient,
    RemoteEndpoint,
)
from .core.mode_registry import ModeRegistry, ModeSnapshot

# Operation table and dispatch
from .operations import (
    Operation,
    OPERATIONS,
    OPERATION_LIST,
    PayloadStyle,
    get_operation,
)
from .streaming import StreamPath, local_stream_url
from .dispatch import Dispatcher
from .connection import ConnectionManager, ConnectionState
from ._client import VMDeskClient

# Wire models
from .api_types import *  # noqa: F401,F403
from .api_types import __all__ as _api_types_all

__all__ = [
    # Version
    "__version__",

    # Error classes
    "VMDeskError",
    "TransportError",
    "AuthenticationError",
    "VerificationError",
    "ActionError",
    "ConfigurationError",
    "LocalBindingError",

    # Configuration
    "ClientConfig",
    "LoggingConfig",
    "get_settings",
    "reload_settings",
    "setup_logging",

    # Clients and mode state
    "ClientMode",
    "LocalBinding",
    "LocalClient",
    "RemoteClient",
    "RemoteEndpoint",
    "ModeRegistry",
    "ModeSnapshot",

    # Dispatch
    "Operation",
    "OPERATIONS",
    "OPERATION_LIST",
    "PayloadStyle",
    "get_operation",
    "StreamPath",
    "local_stream_url",
    "Dispatcher",
    "ConnectionManager",
    "ConnectionState",
    "VMDeskClient",

    # Wire models
    *_api_types_all,
]
