#!/usr/bin/env python3
"""
Mode Registry - current connection mode and active remote client

The (mode, client) pair is held as one immutable snapshot and replaced with a
single assignment, so a reader never sees remote mode without a client or a
client left behind in local mode. Switches never block.

A registry is an ordinary object: the application creates one and hands it to
the Dispatcher and ConnectionManager. Tests get a fresh one each.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..clients.base import ClientMode, RemoteEndpoint
from ..clients.remote_client import RemoteClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModeSnapshot:
    """Consistent view of the registry at one instant"""
    mode: ClientMode
    client: Optional[RemoteClient] = None

    @property
    def is_remote(self) -> bool:
        return self.mode == ClientMode.REMOTE


_LOCAL = ModeSnapshot(ClientMode.LOCAL)


class ModeRegistry:
    """
    Holds the connection mode for one application instance

    Usage:
        registry = ModeRegistry()
        registry.switch_to_remote(RemoteEndpoint("https://10.0.0.5:8443", "tok"))
        registry.current_mode()   # ClientMode.REMOTE
        registry.switch_to_local()
    """

    def __init__(
        self,
        client_factory: Optional[Callable[..., RemoteClient]] = None,
        **client_options: Any,
    ):
        """
        Args:
            client_factory: Builds the RemoteClient for an endpoint
                (defaults to RemoteClient)
            **client_options: Default keyword options for every client
                (timeout, verify, transport)
        """
        self._client_factory = client_factory or RemoteClient
        self._client_options = client_options
        self._state: ModeSnapshot = _LOCAL

    def snapshot(self) -> ModeSnapshot:
        return self._state

    def current_mode(self) -> ClientMode:
        return self._state.mode

    def active_client(self) -> Optional[RemoteClient]:
        return self._state.client

    @property
    def is_remote(self) -> bool:
        return self._state.is_remote

    def switch_to_remote(self, endpoint: RemoteEndpoint, **client_options: Any) -> RemoteClient:
        """
        Install a client for ``endpoint`` and enter remote mode

        Replaces any previously installed client.
        """
        options = {**self._client_options, **client_options}
        client = self._client_factory(endpoint, **options)
        previous = self._state.client
        self._state = ModeSnapshot(ClientMode.REMOTE, client)

        if previous is not None:
            logger.info(f"Remote client replaced | old={previous.base_url} | new={endpoint.base_url}")
        else:
            logger.info(f"Switched to REMOTE mode | base_url={endpoint.base_url}")
        return client

    def switch_to_local(self, expected: Optional[RemoteClient] = None) -> bool:
        """
        Drop the remote client and enter local mode

        Args:
            expected: Only switch if this client is still the installed one.
                A newer switch_to_remote then wins over a stale rollback.

        Returns:
            True if the registry changed
        """
        current = self._state
        if expected is not None and current.client is not expected:
            logger.debug("switch_to_local skipped: a different client is installed")
            return False
        if not current.is_remote:
            return False

        self._state = _LOCAL
        logger.info(f"Switched to LOCAL mode | dropped={current.client.base_url}")
        return True
