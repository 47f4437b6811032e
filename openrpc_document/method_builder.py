"""
Builds one OpenRPC ``Method`` per RPC handler.

The builder pairs the handler's runtime types with its declared fields by
position: parameter i is described by declared parameter field i, return
value i by declared result field i. The declaration may name more fields
than there are runtime types, never fewer.

Only the broad strokes are collected here: every parameter becomes a
param, the first return value becomes the result. Dialect specific
filtering and rewriting is done by the hooks in ``ParseOptions``.
"""

from __future__ import annotations

import copy
import pprint
from typing import Any, List, Optional, Sequence, Tuple

from loguru import logger

from openrpc_document.callback import Callback
from openrpc_document.declarations import DeclarationInfo, NamedField, resolve_declaration
from openrpc_document.exceptions import (
    ArityMismatchError,
    DeclarationError,
    MethodBuildError,
    NonDocumentableHandlerError,
    SchemaMutationError,
)
from openrpc_document.options import ParseOptions
from openrpc_document.schema import full_type_description, type_to_schema
from openrpc_document.type_inspector import inspect_types
from openrpc_document.types import (
    ContentDescriptor,
    ExternalDocs,
    Method,
    null_content_descriptor,
)


def bounded_zip(
    kind: str, types: Sequence[Any], fields: Sequence[NamedField]
) -> List[Tuple[int, Any, NamedField]]:
    """Pair types with fields by index; every type must have a field."""
    if len(types) > len(fields):
        raise ArityMismatchError(kind, len(fields), len(fields))
    return [(index, tp, fields[index]) for index, tp in enumerate(types)]


def build_content_descriptor(
    options: ParseOptions, tp: Any, field: NamedField
) -> ContentDescriptor:
    schema = type_to_schema(tp)
    if options.schema_mutators:
        # Mutators work on a private copy; a failure discards it.
        schema = copy.deepcopy(schema)
        for mutation in options.schema_mutators:
            try:
                mutation(schema)
            except Exception as exc:
                raise SchemaMutationError(mutation, exc) from exc

    return ContentDescriptor(
        name=field.name,
        summary=field.comment,
        description=full_type_description(tp),
        required=True,
        schema=schema,
    )


def _collect(
    options: ParseOptions,
    is_param: bool,
    types: Sequence[Any],
    fields: Sequence[NamedField],
) -> List[ContentDescriptor]:
    kind = "parameter" if is_param else "result"
    out: List[ContentDescriptor] = []
    for index, tp, field in bounded_zip(kind, types, fields):
        descriptor = build_content_descriptor(options, tp, field)
        if options.skip is not None and options.skip(is_param, index, descriptor):
            continue
        for mutate in options.content_descriptor_mutators:
            mutate(is_param, index, descriptor)
        out.append(descriptor)
    return out


def signature_description(
    param_types: Sequence[Any], return_types: Sequence[Any]
) -> str:
    """Render a handler's type signature, e.g. ``(int, int) -> int``."""
    params = ", ".join(full_type_description(tp) for tp in param_types)
    if not return_types:
        returns = "None"
    elif len(return_types) == 1:
        returns = full_type_description(return_types[0])
    else:
        returns = "(" + ", ".join(full_type_description(tp) for tp in return_types) + ")"
    return f"`({params}) -> {returns}`"


def make_method(
    options: ParseOptions,
    name: str,
    declaration: DeclarationInfo,
    param_types: Sequence[Any],
    return_types: Sequence[Any],
) -> Method:
    params = _collect(options, True, param_types, declaration.param_fields())
    results = _collect(options, False, return_types, declaration.result_fields())
    if not results:
        results.append(null_content_descriptor())

    return Method(
        name=name,
        summary=declaration.summary(),
        description=signature_description(param_types, return_types),
        external_docs=ExternalDocs(
            description=f"line={declaration.line}",
            url=f"file://{declaration.file}",
        ),
        params=params,
        # OpenRPC methods have a single result.
        result=results[0],
        deprecated=declaration.deprecated,
    )


def build_method(
    options: Optional[ParseOptions], name: str, callback: Callback
) -> Method:
    """
    Describe one callback as an OpenRPC method.

    Raises:
        NonDocumentableHandlerError: the handler has no real declaration and
            should be left out of the document.
        MethodBuildError: anything else went wrong for this handler.
    """
    options = options or ParseOptions()
    try:
        declaration = resolve_declaration(callback)
        param_types, return_types = inspect_types(callback)
    except NonDocumentableHandlerError:
        raise
    except DeclarationError as exc:
        logger.warning(f"parse callback {name}: {exc.message}")
        raise MethodBuildError(name, pprint.pformat(callback), exc) from exc

    try:
        return make_method(options, name, declaration, param_types, return_types)
    except (ArityMismatchError, SchemaMutationError) as exc:
        raise MethodBuildError(name, pprint.pformat(callback), exc) from exc
    except Exception as exc:
        # Skip predicates and descriptor mutators are caller supplied.
        logger.warning(f"option hook failed for {name}: {exc!r}")
        raise MethodBuildError(name, pprint.pformat(callback), exc) from exc
