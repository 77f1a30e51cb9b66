#!/usr/bin/env python3
"""
VMDesk SDK - Application Client
===============================

Bundles the pieces an application needs: one ModeRegistry, the Dispatcher
that reads it, and the ConnectionManager that switches it.

Example:
    from vmdesk_sdk import VMDeskClient

    # Local helper only
    client = VMDeskClient(binding=helper)
    vms = await client.vm_list("h1")

    # Remote server from VMDESK_REMOTE_URL / VMDESK_API_KEY
    async with VMDeskClient(binding=helper) as client:
        vms = await client.vm_list("h1")
        url = await client.terminal_url({"hostId": "h1", "vmName": "web-01"})

    # Switch at runtime; call sites do not change
    await client.connect("https://10.0.0.5:8443", token="vmdesk_sk_...")
    client.disconnect()
"""

import logging
from typing import Any, Dict, Optional

from .clients.base import ClientMode, LocalBinding
from .connection import ConnectionManager, ConnectionState
from .core.config import ClientConfig, get_settings
from .core.mode_registry import ModeRegistry
from .dispatch import Dispatcher
from .errors import ConfigurationError
from .operations import OPERATIONS

logger = logging.getLogger(__name__)


class VMDeskClient:
    """
    Application-level client for local and remote management.

    Args:
        binding: Local helper binding (one callable per operation)
        config: ClientConfig (defaults to the environment-derived settings)
        **client_options: Extra RemoteClient options (e.g. transport=...)
    """

    def __init__(
        self,
        binding: Optional[LocalBinding] = None,
        *,
        config: Optional[ClientConfig] = None,
        **client_options: Any,
    ):
        self.config = config or get_settings()

        options: Dict[str, Any] = {"verify": self.config.verify_tls}
        if self.config.timeout is not None:
            options["timeout"] = self.config.timeout
        options.update(client_options)

        self._registry = ModeRegistry(**options)
        self.api = Dispatcher(
            self._registry,
            binding,
            local_stream_host=self.config.local_stream_host,
        )
        self.connection = ConnectionManager(self.api)

    @property
    def mode(self) -> ClientMode:
        return self._registry.current_mode()

    @property
    def is_remote(self) -> bool:
        return self.connection.is_remote

    @property
    def registry(self) -> ModeRegistry:
        return self._registry

    def __getattr__(self, name: str):
        # Operation methods and stream helpers live on the dispatcher
        if name in OPERATIONS or name in ("terminal_url", "vnc_url", "call"):
            return getattr(self.api, name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    async def __aenter__(self) -> "VMDeskClient":
        if self.config.has_remote:
            logger.debug(f"Connecting from config | base_url={self.config.remote_url}")
            await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    async def connect(self, base_url: Optional[str] = None, token: Optional[str] = None) -> str:
        """
        Connect to a remote server (defaults from config)

        Returns:
            The server's version string
        """
        base_url = base_url or self.config.remote_url
        if not base_url:
            raise ConfigurationError(
                "No remote URL given and VMDESK_REMOTE_URL is not set",
                field="remote_url",
            )
        if token is None and base_url == self.config.remote_url:
            token = self.config.api_key
        return await self.connection.connect_remote(base_url, token)

    def disconnect(self) -> None:
        """Return to local mode"""
        self.connection.disconnect_remote()

    def get_connection_info(self) -> Dict[str, Any]:
        """Summary for status displays (never includes the credential)"""
        endpoint = self.connection.endpoint
        return {
            "mode": self.mode.value,
            "state": self.connection.state.value,
            "base_url": endpoint.base_url if endpoint else None,
            "authenticated": endpoint.has_token if endpoint else False,
            "version": self.connection.remote_version,
        }


__all__ = ["VMDeskClient", "ConnectionState"]
