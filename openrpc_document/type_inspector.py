"""Runtime parameter and return types of RPC handlers."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, List, Tuple, get_args, get_origin

from openrpc_document.exceptions import DeclarationError

if TYPE_CHECKING:
    from openrpc_document.callback import Callback


def handler_signature(handler: Any) -> inspect.Signature:
    """Signature of a handler with string annotations evaluated."""
    try:
        return inspect.signature(handler, eval_str=True)
    except (NameError, SyntaxError) as exc:
        raise DeclarationError(
            f"Cannot evaluate annotations of {handler!r}: {exc}"
        ) from exc
    except (TypeError, ValueError) as exc:
        raise DeclarationError(f"No signature for {handler!r}: {exc}") from exc


def split_return_type(annotation: Any) -> List[Any]:
    """
    Expand a return annotation into the list of returned values.

    ``None`` returns nothing, a fixed ``tuple[...]`` returns one value per
    element and anything else, including ``tuple[X, ...]``, is one value.
    """
    if annotation is inspect.Signature.empty:
        return [Any]
    if annotation is None or annotation is type(None):
        return []
    if get_origin(annotation) is tuple:
        args = get_args(annotation)
        if args == ((),):
            return []
        if args and not (len(args) == 2 and args[1] is Ellipsis):
            return list(args)
    return [annotation]


def inspect_types(callback: "Callback") -> Tuple[List[Any], List[Any]]:
    """Ordered parameter types and ordered return types of a callback."""
    if callback.param_types is not None and callback.return_types is not None:
        return list(callback.param_types), list(callback.return_types)

    signature = handler_signature(callback.handler)

    if callback.param_types is not None:
        param_types = list(callback.param_types)
    else:
        param_types = [
            Any if parameter.annotation is inspect.Parameter.empty
            else parameter.annotation
            for parameter in signature.parameters.values()
        ]

    if callback.return_types is not None:
        return_types = list(callback.return_types)
    else:
        return_types = split_return_type(signature.return_annotation)

    return param_types, return_types
