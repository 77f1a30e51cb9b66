#!/usr/bin/env python3
"""
Connection lifecycle - switching between local and remote mode at runtime

States:
    DISCONNECTED  mode=local, no endpoint
    CONNECTED     mode=remote, endpoint installed and verified

``connect_remote`` installs the endpoint, verifies it with one ``app.version``
call, and rolls the registry back to local mode if anything goes wrong.
The process never stays in remote mode against an unverified server.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, Optional, Union

from .clients.base import ClientMode, RemoteEndpoint
from .clients.remote_client import RemoteClient
from .dispatch import Dispatcher
from .errors import ConfigurationError, VerificationError

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Connection lifecycle state"""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class ConnectionManager:
    """
    Connect/disconnect entry points for a Dispatcher's registry

    Usage:
        conn = ConnectionManager(api)
        await conn.connect_remote("https://10.0.0.5:8443", token="...")
        conn.remote_version      # "1.4.0"
        conn.disconnect_remote()
    """

    def __init__(self, dispatcher: Dispatcher):
        self._dispatcher = dispatcher
        self._registry = dispatcher.registry
        self._client: Optional[RemoteClient] = None
        self._remote_version: str = ""

    @property
    def state(self) -> ConnectionState:
        # Connected only while the verified client is the installed one
        if self._client is not None and self._registry.active_client() is self._client:
            return ConnectionState.CONNECTED
        return ConnectionState.DISCONNECTED

    @property
    def mode(self) -> ClientMode:
        return self._registry.current_mode()

    @property
    def is_remote(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    @property
    def endpoint(self) -> Optional[RemoteEndpoint]:
        """Verified endpoint, while connected"""
        return self._client.endpoint if self.is_remote else None

    @property
    def remote_version(self) -> str:
        """Version reported by the server at connect time ("" when local)"""
        return self._remote_version if self.is_remote else ""

    async def connect_remote(
        self,
        endpoint: Union[RemoteEndpoint, str],
        token: Optional[str] = None,
        **client_options: Any,
    ) -> str:
        """
        Switch to remote mode and verify the server

        Args:
            endpoint: RemoteEndpoint or base URL
            token: Bearer credential (when endpoint is a URL)
            **client_options: Passed to the RemoteClient (timeout, verify, transport)

        Returns:
            The server's version string

        Raises:
            ConfigurationError: The endpoint URL is malformed (nothing changes)
            TransportError / ActionError: Verification failed; the original
                error is re-raised after rolling back to local mode
            VerificationError: The server answered with a non-string version
                (an empty string is accepted as-is)
        """
        endpoint = RemoteEndpoint.coerce(endpoint, token)
        client = self._registry.switch_to_remote(endpoint, **client_options)

        try:
            version = await self._dispatcher.app_version()
        except (Exception, asyncio.CancelledError) as e:
            self._rollback(client)
            logger.warning(
                f"Remote verification failed, back to LOCAL mode | "
                f"base_url={endpoint.base_url} | error={type(e).__name__}: {e}"
            )
            raise

        if not isinstance(version, str):
            self._rollback(client)
            raise VerificationError(
                f"Server at {endpoint.base_url} did not report a version string",
                base_url=endpoint.base_url,
            )

        if self._registry.active_client() is not client:
            # A newer connect/disconnect ran while we were verifying; it wins.
            logger.info(f"Connect superseded by a later switch | base_url={endpoint.base_url}")
            return version

        self._client = client
        self._remote_version = version
        logger.info(f"Connected to remote server | base_url={endpoint.base_url} | version={version}")
        return version

    def disconnect_remote(self) -> None:
        """Return to local mode. Always succeeds."""
        self._registry.switch_to_local()
        if self._client is not None:
            logger.info(f"Disconnected from remote server | base_url={self._client.base_url}")
        self._client = None
        self._remote_version = ""

    async def check_health(self) -> Dict[str, Any]:
        """
        Query the connected server's health endpoint

        Does not change connection state; failures raise TransportError.
        """
        client = self._registry.active_client()
        if client is None:
            raise ConfigurationError("Not connected to a remote server", field="endpoint")
        return await client.health()

    def _rollback(self, client: RemoteClient) -> None:
        if self._registry.switch_to_local(expected=client):
            self._client = None
            self._remote_version = ""
