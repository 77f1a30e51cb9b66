#!/usr/bin/env python3
"""
Dispatcher - the uniform call surface for every management operation

One generic ``dispatch`` routes an Operation either to the remote client
(action name + mapped payload) or to the local binding (positional args),
based on a single read of the ModeRegistry. Every entry of the operation table
is also exposed as a coroutine method, e.g.:

    api = Dispatcher(registry, binding=helper)
    await api.vm_start("h1", "web-01")
    hosts = await api.host_list()
    url = await api.terminal_url({"hostId": "h1"})

Results come back exactly as the transport returned them; errors propagate
unchanged. Use ``decode_result`` to turn a raw result into typed models.
"""

import inspect
import logging
from typing import Any, Mapping, Optional, Union

from pydantic import TypeAdapter

from .clients.base import ClientMode, LocalBinding
from .clients.local_client import LocalClient
from .core.mode_registry import ModeRegistry
from .operations import OPERATION_LIST, Operation, get_operation
from .streaming import LOCAL_STREAM_HOST, StreamPath, local_stream_url

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Dual-mode dispatch facade

    Args:
        registry: Mode registry shared with the ConnectionManager
        binding: Local helper binding (one callable per operation)
        local_stream_host: Loopback address of the helper's WebSocket server
    """

    def __init__(
        self,
        registry: ModeRegistry,
        binding: Optional[LocalBinding] = None,
        *,
        local_stream_host: str = LOCAL_STREAM_HOST,
    ):
        self._registry = registry
        self._local = LocalClient(binding)
        self._local_stream_host = local_stream_host

    @property
    def registry(self) -> ModeRegistry:
        return self._registry

    @property
    def mode(self) -> ClientMode:
        return self._registry.current_mode()

    async def dispatch(self, operation: Union[Operation, str], *args: Any, **kwargs: Any) -> Any:
        """
        Run one operation in whichever mode is active right now

        The registry is read once; a mode switch while this call is awaiting
        does not affect it.
        """
        if not isinstance(operation, Operation):
            operation = get_operation(operation)
        positional = operation.bind_args(args, kwargs)

        state = self._registry.snapshot()
        if state.is_remote:
            payload = operation.build_payload(positional)
            logger.debug(f"Dispatch REMOTE | operation={operation.name} | action={operation.action}")
            return await state.client.invoke(operation.action, payload)

        logger.debug(f"Dispatch LOCAL | operation={operation.name}")
        return await self._local.call(operation.binding, *positional)

    async def call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Dispatch by method name (``vm_start``) or action name (``vm.start``)"""
        return await self.dispatch(get_operation(name), *args, **kwargs)

    # ==================== Streaming Sessions ====================

    async def terminal_url(self, params: Optional[Mapping[str, Any]] = None) -> str:
        """WebSocket URL for an interactive terminal session"""
        return await self._stream_url(StreamPath.TERMINAL, params)

    async def vnc_url(self, params: Optional[Mapping[str, Any]] = None) -> str:
        """WebSocket URL for a graphical console (VNC) session"""
        return await self._stream_url(StreamPath.VNC, params)

    async def _stream_url(self, path: StreamPath, params: Optional[Mapping[str, Any]]) -> str:
        state = self._registry.snapshot()
        if state.is_remote:
            return state.client.build_streaming_url(path.value, params)

        # Terminal and VNC share the helper's WebSocket server
        port = await self._local.call("terminal_port")
        return local_stream_url(port, path.value, params, host=self._local_stream_host)

    # ==================== Typed Results ====================

    @staticmethod
    def decode_result(name: str, data: Any) -> Any:
        """
        Validate a raw result against the operation's documented type

        Example:
            vms = Dispatcher.decode_result("vm_list", await api.vm_list("h1"))
            vms[0].memory_mb
        """
        op = get_operation(name)
        if op.result is None:
            return data
        return TypeAdapter(op.result).validate_python(data)


def _make_method(op: Operation):
    async def method(self: Dispatcher, *args: Any, **kwargs: Any) -> Any:
        return await self.dispatch(op, *args, **kwargs)

    sig = op.signature
    method.__name__ = op.name
    method.__qualname__ = f"Dispatcher.{op.name}"
    method.__doc__ = op.doc or f"Dispatch the ``{op.action}`` action."
    method.__signature__ = sig.replace(
        parameters=[inspect.Parameter("self", inspect.Parameter.POSITIONAL_OR_KEYWORD)]
        + list(sig.parameters.values())
    )
    method.operation = op
    return method


for _op in OPERATION_LIST:
    setattr(Dispatcher, _op.name, _make_method(_op))
del _op
