#!/usr/bin/env python3
"""
Local Client - Calls into the same-machine privileged helper

The helper exposes one callable per operation on a binding object. Calls are
positional, in the same order as the dispatcher method. Binding callables may
be synchronous or coroutine functions; both are awaited uniformly here.
Exceptions raised by the binding propagate unchanged.
"""

import logging
from typing import Any, Optional

from ..errors import LocalBindingError
from .base import LocalBinding, resolve

logger = logging.getLogger(__name__)


class LocalClient:
    """Awaitable adapter over a local binding object"""

    def __init__(self, binding: Optional[LocalBinding] = None):
        self._binding = binding

    @property
    def binding(self) -> Optional[LocalBinding]:
        return self._binding

    @property
    def is_bound(self) -> bool:
        return self._binding is not None

    def _resolve_callable(self, name: str):
        if self._binding is None:
            raise LocalBindingError(
                f"No local binding configured for '{name}'. "
                "Pass binding= or connect to a remote server.",
                operation=name,
            )
        func = getattr(self._binding, name, None)
        if func is None or not callable(func):
            raise LocalBindingError(
                f"Local binding {type(self._binding).__name__} has no callable '{name}'",
                operation=name,
            )
        return func

    async def call(self, name: str, *args: Any) -> Any:
        """Invoke ``binding.<name>(*args)`` and await the result if needed"""
        func = self._resolve_callable(name)
        logger.debug(f"Local invoke | operation={name}")
        return await resolve(func(*args))
