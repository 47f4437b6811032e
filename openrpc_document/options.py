"""
Extension hooks for the method builder.

``ParseOptions`` is an immutable value; build one per RPC dialect and share
it across builds. Hook functions may be called from several worker threads
at once when a document is assembled concurrently, so they must not keep
unsynchronised state of their own.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from openrpc_document.schema import (
    Schema,
    inline_definitions,
    remove_definitions,
    require_all_properties,
)
from openrpc_document.types import ContentDescriptor

# (is_param, index, descriptor) -> drop this position
SkipFn = Callable[[bool, int, ContentDescriptor], bool]
# (is_param, index, descriptor) -> None, rewrites the descriptor in place
ContentDescriptorMutator = Callable[[bool, int, ContentDescriptor], None]
# (schema) -> None, rewrites the schema in place; raise to reject it
SchemaMutator = Callable[[Schema], None]


@dataclass(frozen=True, slots=True)
class ParseOptions:
    skip: Optional[SkipFn] = None
    content_descriptor_mutators: Tuple[ContentDescriptorMutator, ...] = ()
    schema_mutators: Tuple[SchemaMutator, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "content_descriptor_mutators", tuple(self.content_descriptor_mutators)
        )
        object.__setattr__(self, "schema_mutators", tuple(self.schema_mutators))

    def replace(self, **changes) -> "ParseOptions":
        return dataclasses.replace(self, **changes)


def default_parse_options() -> ParseOptions:
    """Self-contained schemas: references inlined, definitions dropped."""
    return ParseOptions(
        schema_mutators=(
            inline_definitions,
            remove_definitions,
            require_all_properties,
        ),
    )


def skip_leading_context(
    is_param: bool, index: int, descriptor: ContentDescriptor
) -> bool:
    return is_param and index == 0 and "context" in descriptor.description


def ethereum_parse_options() -> ParseOptions:
    """Default options for handlers that take a leading context argument."""
    return default_parse_options().replace(skip=skip_leading_context)
