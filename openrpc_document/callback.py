from __future__ import annotations

import functools
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from openrpc_document.declarations import DeclarationInfo


@dataclass(frozen=True)
class Callback:
    """
    A named RPC handler.

    ``declaration``, ``param_types`` and ``return_types`` are explicit
    metadata supplied at registration; whatever is left unset is recovered
    from the handler itself.
    """

    name: str
    handler: Callable[..., Any]
    declaration: Optional[DeclarationInfo] = None
    param_types: Optional[Tuple[Any, ...]] = None
    return_types: Optional[Tuple[Any, ...]] = None

    def function(self) -> Any:
        """The innermost function object behind the handler."""
        target = self.handler
        while isinstance(target, functools.partial):
            target = target.func
        target = inspect.unwrap(target)
        if inspect.ismethod(target):
            target = target.__func__
        if (
            getattr(target, "__code__", None) is None
            and not inspect.isroutine(target)
            and callable(target)
        ):
            call = getattr(type(target), "__call__", None)
            target = getattr(call, "__func__", call)
        return target
