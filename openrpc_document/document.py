"""
Assembles the OpenRPC document for a set of callbacks.

A ``ServiceProvider`` bundles everything dialect specific: where the
callbacks come from, how one callback becomes a method and the document's
info block. ``DocumentAssembler`` drives the build, leaves out handlers that
cannot be documented, moves object schemas that occur more than once into
``components.schemas`` and serialises the result.
"""

from __future__ import annotations

import json
import os
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from openrpc_document.callback import Callback
from openrpc_document.configuration import DocumentSettings
from openrpc_document.exceptions import MethodBuildError, NonDocumentableHandlerError
from openrpc_document.method_builder import build_method
from openrpc_document.options import (
    ParseOptions,
    default_parse_options,
    ethereum_parse_options,
)
from openrpc_document.registry import CallbackRegistry, callbacks_from_receiver
from openrpc_document.schema import Schema, walk_schema
from openrpc_document.types import (
    Components,
    ContentDescriptor,
    ExternalDocs,
    Info,
    Method,
    OpenRPCDocument,
)

CallbackToMethod = Callable[[ParseOptions, str, Callback], Method]

COMPONENT_REF_PREFIX = "#/components/schemas/"


@dataclass
class ServiceProvider:
    callbacks: Callable[[], List[Callback]]
    callback_to_method: CallbackToMethod = build_method
    options: ParseOptions = field(default_factory=default_parse_options)
    info: Callable[[], Optional[Info]] = lambda: None
    external_docs: Callable[[], Optional[ExternalDocs]] = lambda: None

    @classmethod
    def from_registry(
        cls, registry: CallbackRegistry, **kwargs: Any
    ) -> "ServiceProvider":
        return cls(callbacks=registry.to_list, **kwargs)


def ethereum_service_provider(receiver: Any, service: str = "eth") -> ServiceProvider:
    """Provider for a receiver whose methods take a leading context argument."""
    return ServiceProvider(
        callbacks=lambda: callbacks_from_receiver(receiver, service),
        options=ethereum_parse_options(),
        external_docs=lambda: ExternalDocs(
            description="GPLv3",
            url="https://github.com/ethereum/go-ethereum/blob/COPYING.md",
        ),
    )


class DocumentAssembler:
    def __init__(
        self,
        provider: ServiceProvider,
        settings: Optional[DocumentSettings] = None,
        strict: bool = True,
    ) -> None:
        self._provider = provider
        self._settings = settings or DocumentSettings()
        self._strict = strict

    def build_methods(self) -> List[Method]:
        callbacks = self._provider.callbacks()
        workers = min(self._settings.max_workers, max(1, len(callbacks)))
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                built = list(executor.map(self._build_one, callbacks))
        else:
            built = [self._build_one(callback) for callback in callbacks]
        return [method for method in built if method is not None]

    def _build_one(self, callback: Callback) -> Optional[Method]:
        try:
            return self._provider.callback_to_method(
                self._provider.options, callback.name, callback
            )
        except NonDocumentableHandlerError as exc:
            logger.debug(f"Skipping {callback.name}: {exc.message}")
            return None
        except MethodBuildError as exc:
            if self._strict:
                raise
            logger.error(f"Leaving {callback.name} out of the document: {exc.cause}")
            return None

    def document(self) -> OpenRPCDocument:
        methods = [method.model_copy(deep=True) for method in self.build_methods()]

        if self._settings.external_docs_base_url:
            for method in methods:
                link_external_docs(
                    method,
                    self._settings.external_docs_base_url,
                    self._settings.source_root,
                )

        info = self._provider.info() or Info(
            title=self._settings.title, version=self._settings.version
        )
        return OpenRPCDocument(
            info=info,
            external_docs=self._provider.external_docs(),
            methods=methods,
            components=Components(schemas=extract_components(methods)),
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.document().to_dict(), indent=indent)


def link_external_docs(method: Method, base_url: str, source_root: str) -> None:
    """Point a method's ``file://`` provenance link at a hosted source tree."""
    url = method.external_docs.url
    if not url.startswith("file://"):
        return
    path = url[len("file://") :]
    line = method.external_docs.description.partition("line=")[2]
    relative = os.path.relpath(path, source_root).replace(os.sep, "/")
    anchor = f"#L{line}" if line else ""
    method.external_docs.url = f"{base_url.rstrip('/')}/{relative}{anchor}"


def _descriptors(methods: List[Method]) -> List[ContentDescriptor]:
    descriptors: List[ContentDescriptor] = []
    for method in methods:
        descriptors.extend(method.params)
        descriptors.append(method.result)
    return descriptors


def _is_component(node: Schema) -> bool:
    return (
        node.get("type") == "object"
        and isinstance(node.get("title"), str)
        and bool(node.get("properties"))
    )


def _key(node: Schema) -> str:
    return json.dumps(node, sort_keys=True)


def extract_components(methods: List[Method]) -> Dict[str, Schema]:
    """
    Move repeated object schemas into components and reference them.

    Rewrites the descriptors of ``methods`` in place and returns the
    component schemas keyed by (deduplicated) title.
    """
    counts: Counter = Counter()

    def count(node: Schema) -> None:
        if _is_component(node):
            counts[_key(node)] += 1

    descriptors = _descriptors(methods)
    for descriptor in descriptors:
        walk_schema(descriptor.schema_, count)

    names: Dict[str, str] = {}
    components: Dict[str, Schema] = {}
    for key, occurrences in counts.items():
        if occurrences < 2:
            continue
        schema = json.loads(key)
        name = schema["title"]
        suffix = 2
        while name in components:
            name = f"{schema['title']}{suffix}"
            suffix += 1
        names[key] = name
        components[name] = schema

    if not names:
        return {}

    def replace(node: Any, root: bool = False) -> Any:
        if isinstance(node, list):
            return [replace(item) for item in node]
        if not isinstance(node, dict):
            return node
        if not root and _is_component(node) and _key(node) in names:
            return {"$ref": COMPONENT_REF_PREFIX + names[_key(node)]}
        return {key: replace(value) for key, value in node.items()}

    for descriptor in descriptors:
        descriptor.schema_ = replace(descriptor.schema_)
    return {name: replace(schema, root=True) for name, schema in components.items()}
