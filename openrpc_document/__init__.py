from .callback import Callback
from .declarations import DeclarationInfo, FieldGroup, NamedField, declaration
from .document import DocumentAssembler, ServiceProvider, ethereum_service_provider
from .exceptions import (
    ArityMismatchError,
    DeclarationError,
    MethodBuildError,
    NonDocumentableHandlerError,
    OpenRPCDocumentError,
    SchemaMutationError,
)
from .method_builder import build_method
from .options import ParseOptions, default_parse_options, ethereum_parse_options
from .registry import CallbackRegistry, registry
from .types import ContentDescriptor, ExternalDocs, Method, OpenRPCDocument


__all__ = [
    "ArityMismatchError",
    "Callback",
    "CallbackRegistry",
    "ContentDescriptor",
    "DeclarationError",
    "DeclarationInfo",
    "DocumentAssembler",
    "ExternalDocs",
    "FieldGroup",
    "Method",
    "MethodBuildError",
    "NamedField",
    "NonDocumentableHandlerError",
    "OpenRPCDocument",
    "OpenRPCDocumentError",
    "ParseOptions",
    "SchemaMutationError",
    "ServiceProvider",
    "build_method",
    "declaration",
    "default_parse_options",
    "ethereum_parse_options",
    "ethereum_service_provider",
    "registry",
]
