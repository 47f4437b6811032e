"""Decorator-based registration of documented RPC handlers."""

from __future__ import annotations

import inspect
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from openrpc_document.callback import Callback
from openrpc_document.declarations import DeclarationInfo
from openrpc_document.exceptions import DuplicateMethodError
from openrpc_document.method_builder import bounded_zip
from openrpc_document.type_inspector import inspect_types


class CallbackRegistry:
    def __init__(self) -> None:
        self._callbacks: Dict[str, Callback] = {}

    def method(
        self,
        name: Optional[str] = None,
        *,
        declaration: Optional[DeclarationInfo] = None,
        param_types: Optional[Sequence[Any]] = None,
        return_types: Optional[Sequence[Any]] = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.register(
                Callback(
                    name=name or func.__name__,
                    handler=func,
                    declaration=declaration,
                    param_types=tuple(param_types) if param_types is not None else None,
                    return_types=(
                        tuple(return_types) if return_types is not None else None
                    ),
                )
            )
            return func

        return decorator

    def register(self, callback: Callback) -> None:
        """
        Add a callback.

        Explicit declarations are checked against the handler's types here,
        so an arity mismatch surfaces at registration instead of at build
        time.
        """
        if callback.name in self._callbacks:
            raise DuplicateMethodError(callback.name)

        if callback.declaration is not None and not callback.declaration.auto_generated:
            param_types, return_types = inspect_types(callback)
            bounded_zip("parameter", param_types, callback.declaration.param_fields())
            bounded_zip("result", return_types, callback.declaration.result_fields())

        self._callbacks[callback.name] = callback

    def extend(self, callbacks: Iterable[Callback]) -> None:
        for callback in callbacks:
            self.register(callback)

    def get(self, name: str) -> Optional[Callback]:
        return self._callbacks.get(name)

    def to_list(self) -> List[Callback]:
        return list(self._callbacks.values())

    def __len__(self) -> int:
        return len(self._callbacks)


def lower_camel(name: str) -> str:
    head, *rest = name.strip("_").split("_")
    return head[:1].lower() + head[1:] + "".join(part[:1].upper() + part[1:] for part in rest)


def ethereum_method_name(service: str, attribute: str) -> str:
    """``("eth", "get_balance")`` -> ``"eth_getBalance"``."""
    return f"{service}_{lower_camel(attribute)}"


def callbacks_from_receiver(
    receiver: Any,
    service: str,
    name_fn: Callable[[str, str], str] = ethereum_method_name,
) -> List[Callback]:
    """One callback per public method of ``receiver``, in definition order."""
    callbacks: List[Callback] = []
    for attribute in _public_methods(receiver):
        callbacks.append(
            Callback(
                name=name_fn(service, attribute),
                handler=getattr(receiver, attribute),
            )
        )
    return callbacks


def _public_methods(receiver: Any) -> List[str]:
    seen: List[str] = []
    for klass in reversed(type(receiver).__mro__):
        if klass is object:
            continue
        for attribute, value in vars(klass).items():
            if attribute.startswith("_") or attribute in seen:
                continue
            if inspect.isfunction(value):
                seen.append(attribute)
    return seen


registry = CallbackRegistry()
