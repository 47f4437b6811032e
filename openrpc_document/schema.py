"""
Runtime type to JSON schema conversion.

Schemas are produced by pydantic's ``TypeAdapter`` so that anything a
handler can accept through pydantic validation is described the same way
it is validated. Types pydantic cannot describe (arbitrary classes,
callables) fall back to an untyped object schema titled with the type name.

The schema mutators at the bottom of the module are the building blocks of
the default parse options; each takes a schema dict and rewrites it in
place.
"""

from __future__ import annotations

import copy
import inspect
import sys
from typing import Any, Callable, Dict, get_origin

from loguru import logger
from pydantic import TypeAdapter
from pydantic.errors import PydanticUserError

Schema = Dict[str, Any]

NULL_SCHEMA: Schema = {"type": "null"}

_LOCAL_REF_PREFIX = "#/$defs/"


def type_to_schema(tp: Any) -> Schema:
    """Convert one runtime type to a JSON schema dict."""
    if tp is None or tp is type(None):
        return dict(NULL_SCHEMA)
    if tp is Any or tp is inspect.Parameter.empty:
        return {}

    try:
        return TypeAdapter(tp).json_schema()
    except PydanticUserError as exc:
        logger.debug(f"No JSON schema for {tp!r}, using opaque object: {exc}")
        return {"type": "object", "title": _type_name(tp)}


def full_type_description(tp: Any) -> str:
    """
    Render a type the way it would be written in an annotation.

    Classes outside ``builtins`` are module qualified, e.g.
    ``decimal.Decimal``. Classes defined in a private accelerator module
    (``_contextvars``) are named after the public module re-exporting them.
    Generic aliases and unions use their repr.
    """
    if tp is None or tp is type(None):
        return "None"
    if tp is inspect.Parameter.empty:
        return "typing.Any"
    if isinstance(tp, type) and get_origin(tp) is None:
        if tp.__module__ == "builtins":
            return tp.__qualname__
        return f"{_public_module(tp)}.{tp.__qualname__}"
    return repr(tp)


def _public_module(tp: type) -> str:
    module = tp.__module__
    if module.startswith("_"):
        public = sys.modules.get(module.lstrip("_"))
        if public is not None and getattr(public, tp.__qualname__, None) is tp:
            return public.__name__
    return module


def _type_name(tp: Any) -> str:
    return getattr(tp, "__qualname__", None) or getattr(tp, "__name__", None) or repr(tp)


def walk_schema(schema: Any, visit: Callable[[Schema], None]) -> None:
    """Call ``visit`` on every dict node of a schema, parents first."""
    if isinstance(schema, dict):
        visit(schema)
        for value in list(schema.values()):
            walk_schema(value, visit)
    elif isinstance(schema, list):
        for item in schema:
            walk_schema(item, visit)


def has_local_refs(schema: Any) -> bool:
    found = []

    def visit(node: Schema) -> None:
        ref = node.get("$ref")
        if isinstance(ref, str) and ref.startswith(_LOCAL_REF_PREFIX):
            found.append(ref)

    walk_schema(schema, visit)
    return bool(found)


def inline_definitions(schema: Schema) -> None:
    """
    Replace local ``#/$defs/...`` references with the definition itself.

    Recursive definitions keep their reference at the point of recursion,
    so the result is always finite.
    """
    definitions = schema.get("$defs") or {}
    if not definitions:
        return

    def expand(node: Any, expanding: tuple) -> Any:
        if isinstance(node, list):
            return [expand(item, expanding) for item in node]
        if not isinstance(node, dict):
            return node

        ref = node.get("$ref")
        if isinstance(ref, str) and ref.startswith(_LOCAL_REF_PREFIX):
            def_name = ref[len(_LOCAL_REF_PREFIX) :]
            if def_name in definitions and def_name not in expanding:
                resolved = expand(
                    copy.deepcopy(definitions[def_name]), expanding + (def_name,)
                )
                siblings = {k: v for k, v in node.items() if k != "$ref"}
                resolved.update(expand(siblings, expanding))
                return resolved

        return {
            key: (value if key == "$defs" else expand(value, expanding))
            for key, value in node.items()
        }

    expanded = expand(schema, ())
    schema.clear()
    schema.update(expanded)


def remove_definitions(schema: Schema) -> None:
    """Drop ``$defs`` once nothing in the schema points into it."""
    if "$defs" in schema and not has_local_refs(
        {k: v for k, v in schema.items() if k != "$defs"}
    ):
        del schema["$defs"]


def require_all_properties(schema: Schema) -> None:
    """Mark every property of every object schema as required."""

    def visit(node: Schema) -> None:
        properties = node.get("properties")
        if isinstance(properties, dict) and properties:
            node["required"] = list(properties)

    walk_schema(schema, visit)
