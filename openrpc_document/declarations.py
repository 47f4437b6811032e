"""
Static declaration metadata of RPC handlers.

A declaration is what a reader of the handler's source would see: the
parameter names, the comment attached to each of them, the leading doc
comment, a deprecation marker and where the handler is defined. Handlers
may be registered with an explicit ``DeclarationInfo``; otherwise one is
recovered from the function's signature, its Google-style docstring and its
code object.

Handlers without real source (built-ins, code produced by ``exec`` or
``eval``) are reported with ``NonDocumentableHandlerError`` so callers can
leave them out of the document.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from loguru import logger

from openrpc_document.exceptions import DeclarationError, NonDocumentableHandlerError
from openrpc_document.schema import full_type_description
from openrpc_document.type_inspector import handler_signature, split_return_type

if TYPE_CHECKING:
    from openrpc_document.callback import Callback


@dataclass(frozen=True)
class FieldGroup:
    """
    One declared field group.

    A group may name several parameters that share a comment; a group with
    no names stands for one unnamed value and is named after its type.
    """

    names: Tuple[str, ...] = ()
    comment: str = ""
    type_repr: str = ""


@dataclass(frozen=True)
class NamedField:
    name: str
    comment: str
    source: FieldGroup


@dataclass(frozen=True)
class DeclarationInfo:
    params: Tuple[FieldGroup, ...] = ()
    results: Tuple[FieldGroup, ...] = ()
    doc: str = ""
    deprecated: bool = False
    file: str = ""
    line: int = 0
    auto_generated: bool = False

    def param_fields(self) -> List[NamedField]:
        return expand_fields(self.params)

    def result_fields(self) -> List[NamedField]:
        return expand_fields(self.results)

    def summary(self) -> str:
        """First paragraph of the leading doc comment, on one line."""
        first = self.doc.strip().split("\n\n", 1)[0]
        return " ".join(line.strip() for line in first.splitlines())


def expand_fields(groups: Tuple[FieldGroup, ...]) -> List[NamedField]:
    """Flatten field groups into one NamedField per name, keeping order."""
    fields: List[NamedField] = []
    for group in groups:
        if not group.names:
            fields.append(NamedField(group.type_repr, group.comment, group))
            continue
        for name in group.names:
            fields.append(NamedField(name, group.comment, group))
    return fields


def declaration(
    *param_names: str,
    params: Optional[Dict[str, str]] = None,
    results: Optional[List[str]] = None,
    doc: str = "",
    deprecated: bool = False,
    file: str = "",
    line: int = 0,
) -> DeclarationInfo:
    """
    Shorthand for building an explicit declaration.

    Example usage:

    declaration(
        "ctx", "a", "b",
        params={"a": "left operand", "b": "right operand"},
        results=["sum", "error"],
        doc="Add two integers.",
    )
    """
    comments = params or {}
    names = list(param_names) or list(comments)
    return DeclarationInfo(
        params=tuple(FieldGroup((name,), comments.get(name, "")) for name in names),
        results=tuple(FieldGroup((name,)) for name in results or []),
        doc=doc,
        deprecated=deprecated,
        file=file,
        line=line,
    )


@dataclass
class DocSections:
    """Docstring split into the parts a declaration needs."""

    summary: str = ""
    body: str = ""
    params: Dict[str, str] = field(default_factory=dict)
    returns: str = ""
    deprecated: bool = False


_ARGS_HEADERS = {"args", "arguments", "parameters", "params"}
_RETURNS_HEADERS = {"returns", "return", "yields"}
_OTHER_HEADERS = {"raises", "example", "examples", "note", "notes", "see also"}


def parse_docstring(doc: Optional[str]) -> DocSections:
    """Parse a cleaned (``inspect.cleandoc``) Google-style docstring."""
    sections = DocSections()
    if not doc:
        return sections

    body_lines: List[str] = []
    return_lines: List[str] = []
    current_section = "body"
    current_param: Optional[str] = None
    entry_indent: Optional[int] = None

    for raw_line in doc.splitlines():
        stripped = raw_line.strip()
        lowered = stripped.lower()

        if lowered.startswith(".. deprecated::") or lowered.startswith("deprecated:"):
            sections.deprecated = True
            if current_section == "body":
                body_lines.append(stripped)
            continue

        header = lowered[:-1] if lowered.endswith(":") else None
        if header in _ARGS_HEADERS:
            current_section, current_param, entry_indent = "args", None, None
            continue
        if header in _RETURNS_HEADERS:
            current_section = "returns"
            continue
        if header in _OTHER_HEADERS:
            current_section = "other"
            continue

        if current_section == "body":
            body_lines.append(raw_line.rstrip())
        elif current_section == "args" and stripped:
            indent = len(raw_line) - len(raw_line.lstrip())
            if entry_indent is None:
                entry_indent = indent
            name, sep, desc = stripped.partition(":")
            # "name (type): desc" and "name: desc" both start an entry
            name = name.split("(", 1)[0].strip().lstrip("*")
            if indent <= entry_indent and sep and name.isidentifier():
                current_param = name
                sections.params[current_param] = desc.strip()
            elif current_param:
                sections.params[current_param] += f" {stripped}"
        elif current_section == "returns" and stripped:
            return_lines.append(stripped)

    sections.body = "\n".join(body_lines).strip()
    paragraphs = sections.body.split("\n\n", 1)
    sections.summary = " ".join(line.strip() for line in paragraphs[0].splitlines())
    sections.returns = " ".join(return_lines)
    return sections


def _is_synthesized(filename: str) -> bool:
    return filename.startswith("<") and filename.endswith(">")


def resolve_declaration(callback: "Callback") -> DeclarationInfo:
    """
    Return the static declaration of a callback.

    Raises:
        NonDocumentableHandlerError: the handler has no source declaration.
        DeclarationError: the declaration could not be recovered.
    """
    if callback.declaration is not None:
        if callback.declaration.auto_generated:
            raise NonDocumentableHandlerError(callback.name)
        return callback.declaration

    function = callback.function()
    code = getattr(function, "__code__", None)
    if code is None:
        raise NonDocumentableHandlerError(callback.name, reason="no code object")
    if _is_synthesized(code.co_filename):
        raise NonDocumentableHandlerError(callback.name, reason=code.co_filename)

    signature = handler_signature(callback.handler)
    doc = inspect.getdoc(function) or ""
    sections = parse_docstring(doc)

    params = tuple(
        FieldGroup((name,), sections.params.get(name, ""), _annotation_repr(parameter))
        for name, parameter in signature.parameters.items()
    )

    returned = split_return_type(signature.return_annotation)
    results = tuple(
        FieldGroup((), sections.returns if i == 0 else "", full_type_description(tp))
        for i, tp in enumerate(returned)
    )

    try:
        file = inspect.getsourcefile(function) or code.co_filename
    except TypeError as exc:
        raise DeclarationError(
            f"No source file for handler {callback.name}: {exc}"
        ) from exc

    deprecated = sections.deprecated or bool(getattr(function, "__deprecated__", None))
    if deprecated:
        logger.debug(f"Handler {callback.name} is marked deprecated")

    return DeclarationInfo(
        params=params,
        results=results,
        doc=sections.body,
        deprecated=deprecated,
        file=file,
        line=code.co_firstlineno,
    )


def _annotation_repr(parameter: inspect.Parameter) -> str:
    annotation: Any = parameter.annotation
    if annotation is inspect.Parameter.empty:
        return "typing.Any"
    return full_type_description(annotation)
