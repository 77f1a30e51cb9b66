#!/usr/bin/env python3
"""
Remote Client - Action RPC against a VMDesk management server

Provides:
- Single JSON action endpoint (POST /v1/api.json)
- Bearer credential handling
- Envelope decoding and error classification
- WebSocket URL derivation for terminal/VNC sessions

The client holds nothing but its endpoint and transport options. Every call
opens its own httpx.AsyncClient, so dropping a RemoteClient (mode switch) never
interrupts calls that are still in flight.
"""

import logging
from typing import Any, Dict, Mapping, Optional

import httpx
from pydantic import ValidationError

from ..api_types.envelope import ActionRequest, ActionResponse
from ..errors import ActionError, AuthenticationError, TransportError
from ..streaming import encode_query
from .base import RemoteEndpoint

logger = logging.getLogger(__name__)

API_PATH = "/v1/api.json"
HEALTH_PATH = "/health"
TOKEN_PARAM = "token"


class RemoteClient:
    """
    Client for the management server's action endpoint

    Usage:
        client = RemoteClient(RemoteEndpoint("https://10.0.0.5:8443", token="..."))
        vms = await client.invoke("vm.list", {"hostId": "h1"})
        url = client.build_streaming_url("/ws/terminal", {"hostId": "h1"})
    """

    def __init__(
        self,
        endpoint: RemoteEndpoint,
        *,
        timeout: Optional[float] = None,
        verify: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize remote client

        Args:
            endpoint: Server address and optional bearer token
            timeout: Request timeout in seconds (None keeps the httpx default)
            verify: Verify TLS certificates
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self._endpoint = endpoint
        self._timeout = timeout
        self._verify = verify
        self._transport = transport

    @property
    def endpoint(self) -> RemoteEndpoint:
        return self._endpoint

    @property
    def base_url(self) -> str:
        return self._endpoint.base_url

    def __repr__(self) -> str:
        return f"RemoteClient(base_url={self.base_url!r}, authenticated={self._endpoint.has_token})"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._endpoint.token:
            headers["Authorization"] = f"Bearer {self._endpoint.token}"
        return headers

    def _http_client(self) -> httpx.AsyncClient:
        kwargs: Dict[str, Any] = {
            "base_url": self.base_url,
            "headers": self._headers(),
            "verify": self._verify,
        }
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.AsyncClient(**kwargs)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        action: Optional[str] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Issue one request, mapping httpx failures onto TransportError"""
        url = f"{self.base_url}{path}"
        try:
            async with self._http_client() as http:
                if body is None:
                    resp = await http.request(method, path)
                else:
                    resp = await http.request(method, path, json=body)
        except httpx.TimeoutException as e:
            logger.error(f"Remote call timed out | action={action} | url={url}")
            raise TransportError(
                f"Request timed out: {e}", category="timeout", action=action, url=url
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Remote call network error | action={action} | url={url} | error={e}")
            raise TransportError(
                f"Network error: {e}", category="network", action=action, url=url
            ) from e

        if not resp.is_success:
            reason = resp.reason_phrase
            logger.warning(
                f"Remote call rejected | action={action} | status={resp.status_code} {reason}"
            )
            error_cls = AuthenticationError if resp.status_code == 401 else TransportError
            raise error_cls(
                f"HTTP {resp.status_code}: {reason}",
                category="http",
                status_code=resp.status_code,
                reason=reason,
                action=action,
                url=url,
            )
        return resp

    @staticmethod
    def _decode_envelope(resp: httpx.Response, action: str) -> ActionResponse:
        try:
            return ActionResponse.model_validate_json(resp.content)
        except ValidationError as e:
            logger.error(f"Invalid response envelope | action={action} | error={e}")
            raise TransportError(
                f"Invalid response envelope for {action}",
                category="decode",
                status_code=resp.status_code,
                action=action,
                url=str(resp.request.url),
            ) from e

    async def invoke(self, action: str, payload: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Call one remote action

        Args:
            action: Action identifier, e.g. "vm.start"
            payload: Named fields for the action (defaults to {})

        Returns:
            The envelope's ``data`` member, unmodified

        Raises:
            TransportError: The exchange failed (network, HTTP status, decode)
            ActionError: The peer reported a non-zero code
        """
        request = ActionRequest(action=action, data=dict(payload or {}))
        logger.debug(f"Remote invoke | action={action} | base_url={self.base_url}")

        resp = await self._send("POST", API_PATH, action=action, body=request.model_dump())
        envelope = self._decode_envelope(resp, action)

        if not envelope.ok:
            logger.info(f"Remote action failed | action={action} | code={envelope.code} | msg={envelope.msg}")
            raise ActionError(envelope.msg, code=envelope.code, action=action)

        return envelope.data

    async def health(self) -> Dict[str, Any]:
        """
        Query the server's unauthenticated health endpoint

        Returns:
            Decoded body, e.g. {"status": "ok", "version": "1.4.0"}
        """
        resp = await self._send("GET", HEALTH_PATH, action="health")
        try:
            return resp.json()
        except ValueError as e:
            raise TransportError(
                "Invalid health response",
                category="decode",
                status_code=resp.status_code,
                action="health",
                url=f"{self.base_url}{HEALTH_PATH}",
            ) from e

    def build_streaming_url(self, path: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """
        Build a WebSocket URL for a streaming session

        WebSocket upgrades cannot carry custom headers, so the credential goes
        into the query string. When a credential is configured it replaces any
        caller-supplied ``token`` and goes last; otherwise params pass through.

        Args:
            path: Endpoint path, e.g. "/ws/terminal"
            params: Session context query parameters

        Returns:
            ws:// or wss:// URL
        """
        query = dict(params or {})
        if self._endpoint.token:
            query.pop(TOKEN_PARAM, None)
            query[TOKEN_PARAM] = self._endpoint.token
        path = getattr(path, "value", path)
        if not path.startswith("/"):
            path = "/" + path
        return f"{self._endpoint.stream_base_url}{path}?{encode_query(query)}"
